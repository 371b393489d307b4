"""TubeGrow AI - backend for the TubeGrow creator dashboard."""

__version__ = "0.1.0"

"""
Monitoring Module - Structured logging and usage stats for AI routing.

Usage:
    from tubegrow.ai.monitoring import ai_monitor

    stats = ai_monitor.get_stats().to_dict()
"""

from tubegrow.ai.monitoring.monitor import AggregatedMetrics, AIMonitor, ai_monitor

__all__ = [
    "AggregatedMetrics",
    "AIMonitor",
    "ai_monitor",
]

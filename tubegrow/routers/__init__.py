"""
Routers module - API endpoint handlers organized by dashboard area.

- tools: growth tools (metadata, script, trends, thumbnails, audit, ...)
- studio: speech, transcription and video generation
- chat: assistant chat turns
- settings: provider API keys
- channel: the creator's own YouTube channel
- stats: AI routing metrics
"""

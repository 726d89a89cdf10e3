"""
Resolution-layer configuration module.

Provides settings for the namespace identity, backend selection,
deadlines, retry policy and audit logging.
"""

from config.settings import get_settings, Settings, Backend

__all__ = ["get_settings", "Settings", "Backend"]

"""
Configuration.
Exports the application settings.
"""

from courier_tracker.config.loader import Settings, get_settings, settings

__all__ = ["Settings", "get_settings", "settings"]

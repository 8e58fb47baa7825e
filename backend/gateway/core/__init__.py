"""Settings and logging setup shared by the translator."""
from .config import Settings, get_settings, load_settings, reset_settings
from .logging_config import configure_logging

__all__ = ["Settings", "configure_logging", "get_settings", "load_settings", "reset_settings"]

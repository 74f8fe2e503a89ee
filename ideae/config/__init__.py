"""Configuration for ideae.

Example:
    >>> from ideae.config import load_settings
    >>> settings = load_settings()
    >>> settings.provider
    'auto'
"""

from ideae.config.settings import DEFAULT_CONFIG_PATH, IdeaeSettings, load_settings

__all__ = ["DEFAULT_CONFIG_PATH", "IdeaeSettings", "load_settings"]

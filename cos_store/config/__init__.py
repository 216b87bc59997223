"""
Configuration using Pydantic settings.

Adapter settings come from GHOST_STORAGE_ADAPTER_COS_* environment
variables, falling back to the config object the host CMS passes in.
"""

from .settings import CosSettings, Settings, get_cos_settings, get_settings

__all__ = ["CosSettings", "Settings", "get_cos_settings", "get_settings"]

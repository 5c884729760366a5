"""
Persistence Layer.

This package handles the library's own persisted state: the INI configuration
file and the JSON application settings store.
"""

from .config_manager import ConfigManager
from .settings import AppSettings, BoolSetting, EnumSetting, Setting

__all__ = ["AppSettings", "BoolSetting", "ConfigManager", "EnumSetting", "Setting"]

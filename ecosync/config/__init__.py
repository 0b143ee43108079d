"""
Config — Remote categories, timeouts and report location.
"""

from .loader import CONFIG_FILENAME, ExternalRepo, SyncConfig, load_config

__all__ = ["CONFIG_FILENAME", "ExternalRepo", "SyncConfig", "load_config"]

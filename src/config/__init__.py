"""Configuration management for the recordings sync service."""

from .settings import Settings
from .storage import StorageConfig, load_cloud_config

__all__ = ["Settings", "StorageConfig", "load_cloud_config"]

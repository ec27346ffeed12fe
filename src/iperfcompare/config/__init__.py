"""
Configuration management with typed Pydantic models.

Covers the upload, server and logging surfaces around the engine.
"""

from iperfcompare.config.loader import load_config
from iperfcompare.config.settings import (
    MAX_SOURCES,
    AppConfig,
    LoggingConfig,
    ServerConfig,
    UploadConfig,
)

__all__ = [
    "MAX_SOURCES",
    "AppConfig",
    "LoggingConfig",
    "ServerConfig",
    "UploadConfig",
    "load_config",
]

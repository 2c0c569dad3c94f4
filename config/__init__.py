"""
Configuration Module

This module provides centralized configuration for Milvus wait operations:
- Connection configuration
- Progress polling defaults
- Configuration loading from YAML and environment variables

Implements a flexible, environment-aware configuration system
with sensible defaults and validation using Pydantic.
"""

from .settings import (
    MilvusSettings,
    ConnectionSettings,
    WaitSettings,
    load_settings
)

__all__ = [
    'MilvusSettings',
    'ConnectionSettings',
    'WaitSettings',
    'load_settings'
]

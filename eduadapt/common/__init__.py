"""
Common Components for the Adaptive Assessment Engine

Key components:
1. Logging - Centralized logging configuration
2. Exceptions - The engine's error taxonomy
3. Configuration - Thresholds, weights and tables as named settings
4. Cache - Explicit, caller-owned analytics cache
5. Clock and text - UTC timestamps and answer text folding
"""

from eduadapt.common.logger import app_logger
from eduadapt.common.exceptions import (
    BaseError, InvalidInputError, NotFoundError, ConfigurationError
)
from eduadapt.common.config import EngineConfig, get_config, reload_config
from eduadapt.common.cache import MemoryCache, KeyBuilder, create_cache

__all__ = [
    'app_logger',
    'BaseError', 'InvalidInputError', 'NotFoundError', 'ConfigurationError',
    'EngineConfig', 'get_config', 'reload_config',
    'MemoryCache', 'KeyBuilder', 'create_cache',
]

"""
Конфигурация EarthOS
"""

from .unified_config import (
    UnifiedConfig, LoggingConfig, configure_logging, get_config, reload_config
)

__all__ = [
    'UnifiedConfig',
    'LoggingConfig',
    'configure_logging',
    'get_config',
    'reload_config'
]

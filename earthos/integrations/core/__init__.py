"""
Базовые интерфейсы и примитивы синхронизации для модулей EarthOS
"""

from .universal_module_interface import UniversalModuleInterface, ModuleStatus
from .universal_provider_interface import UniversalProviderInterface, ProviderStatus, ProviderMetrics
from .device_locks import DeviceLock, DeviceLockManager

__all__ = [
    'UniversalModuleInterface',
    'ModuleStatus',
    'UniversalProviderInterface',
    'ProviderStatus',
    'ProviderMetrics',
    'DeviceLock',
    'DeviceLockManager'
]

"""
Device Registry Module - реестр устройств EarthOS

Модуль предоставляет функциональность для:
- Регистрации устройств с конфигурацией по умолчанию
- Частичного обновления конфигурации
- Фиксации версии ОС после успешного обновления
- Долговременного хранения (JSON файлы или память)
"""

from .core.device_registry import DeviceRegistry
from .core.types import Device, InstalledApp
from .config import StorageConfig
from .providers import (
    StorageProvider, MemoryStorageProvider, JsonStorageProvider, create_storage_provider
)

__all__ = [
    'DeviceRegistry',
    'Device',
    'InstalledApp',
    'StorageConfig',
    'StorageProvider',
    'MemoryStorageProvider',
    'JsonStorageProvider',
    'create_storage_provider'
]
__version__ = '1.0.0'

"""
Провайдеры хранилища Device Registry
"""

from .storage_provider import StorageProvider
from .memory_storage_provider import MemoryStorageProvider
from .json_storage_provider import JsonStorageProvider


def create_storage_provider(storage_config) -> StorageProvider:
    """
    Создание провайдера хранилища по конфигурации

    Args:
        storage_config: StorageConfig

    Raises:
        ValueError: Неизвестный тип хранилища
    """
    if storage_config.backend == "memory":
        return MemoryStorageProvider(storage_config.to_dict())
    if storage_config.backend == "json":
        return JsonStorageProvider(storage_config.to_dict())
    raise ValueError(f"Unknown storage backend: {storage_config.backend}")


__all__ = [
    'StorageProvider',
    'MemoryStorageProvider',
    'JsonStorageProvider',
    'create_storage_provider'
]

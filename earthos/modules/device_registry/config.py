"""
Конфигурация Device Registry
"""

import os
from dataclasses import dataclass
from typing import Optional, Dict, Any
from pathlib import Path

STORAGE_BACKENDS = ("json", "memory")


@dataclass
class StorageConfig:
    """Конфигурация хранилища устройств"""

    backend: str = "json"
    data_dir: Optional[str] = None

    def __post_init__(self):
        """Путь по умолчанию - каталог system рядом с рабочей директорией"""
        if self.data_dir is None:
            self.data_dir = str(Path.cwd() / "system")

    @classmethod
    def from_env(cls) -> 'StorageConfig':
        """Создание конфигурации из переменных окружения"""
        return cls(
            backend=os.getenv('EARTHOS_STORAGE_BACKEND', 'json').lower(),
            data_dir=os.getenv('EARTHOS_DATA_DIR')
        )

    def to_dict(self) -> Dict[str, Any]:
        return {
            'backend': self.backend,
            'data_dir': self.data_dir
        }

    def is_valid(self) -> bool:
        return self.backend in STORAGE_BACKENDS and bool(self.data_dir)

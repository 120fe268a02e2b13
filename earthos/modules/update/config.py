"""
Конфигурация Update Module
"""

import os
from dataclasses import dataclass
from typing import Optional, Dict, Any


@dataclass
class UpdateConfig:
    """Конфигурация модуля обновлений"""

    # Скачивание
    chunk_size: int = 64 * 1024
    transfer_timeout: int = 300  # секунд на весь пакет

    # Установка: прогресс сбрасывается на это значение в начале фазы installing
    install_progress_start: int = 50

    # История завершенных сессий (на весь менеджер)
    max_session_history: int = 1000

    # Источники данных
    catalog_dir: Optional[str] = None
    staging_dir: Optional[str] = None
    require_https: bool = False

    @classmethod
    def from_dict(cls, config_dict: Dict[str, Any]) -> 'UpdateConfig':
        """Создание конфигурации из словаря"""
        return cls(**config_dict)

    @classmethod
    def from_env(cls) -> 'UpdateConfig':
        """Создание конфигурации из переменных окружения"""
        return cls(
            chunk_size=int(os.getenv('EARTHOS_CHUNK_SIZE', str(64 * 1024))),
            transfer_timeout=int(os.getenv('EARTHOS_TRANSFER_TIMEOUT', '300')),
            install_progress_start=int(os.getenv('EARTHOS_INSTALL_PROGRESS_START', '50')),
            max_session_history=int(os.getenv('EARTHOS_MAX_SESSION_HISTORY', '1000')),
            catalog_dir=os.getenv('EARTHOS_CATALOG_DIR'),
            staging_dir=os.getenv('EARTHOS_STAGING_DIR'),
            require_https=os.getenv('EARTHOS_REQUIRE_HTTPS', 'false').lower() == 'true'
        )

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь"""
        return {
            'chunk_size': self.chunk_size,
            'transfer_timeout': self.transfer_timeout,
            'install_progress_start': self.install_progress_start,
            'max_session_history': self.max_session_history,
            'catalog_dir': self.catalog_dir,
            'staging_dir': self.staging_dir,
            'require_https': self.require_https
        }

    def is_valid(self) -> bool:
        """Проверка валидности конфигурации"""
        if self.chunk_size <= 0:
            return False
        if self.transfer_timeout <= 0:
            return False
        if not (0 <= self.install_progress_start < 100):
            return False
        if self.max_session_history <= 0:
            return False
        return True

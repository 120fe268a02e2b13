"""
Централизованная конфигурация EarthOS
Объединяет настройки хранилища, обновлений и логирования в единую точку управления
"""

import os
import logging
import logging.handlers
import yaml
from pathlib import Path
from typing import Dict, Any, Optional, Union, List
from dataclasses import dataclass, field

from ..modules.device_registry.config import StorageConfig
from ..modules.update.config import UpdateConfig

logger = logging.getLogger(__name__)

LOG_FORMAT = '%(asctime)s - %(name)s - %(levelname)s - %(message)s'


@dataclass
class LoggingConfig:
    """Конфигурация логирования"""
    level: str = "INFO"
    format: str = LOG_FORMAT
    log_file: Optional[str] = None
    max_file_size: int = 10485760  # 10MB
    backup_count: int = 5

    @classmethod
    def from_env(cls) -> 'LoggingConfig':
        return cls(
            level=os.getenv('EARTHOS_LOG_LEVEL', 'INFO').upper(),
            format=os.getenv('EARTHOS_LOG_FORMAT', LOG_FORMAT),
            log_file=os.getenv('EARTHOS_LOG_FILE') or None,
            max_file_size=int(os.getenv('EARTHOS_LOG_MAX_FILE_SIZE', '10485760')),
            backup_count=int(os.getenv('EARTHOS_LOG_BACKUP_COUNT', '5'))
        )


@dataclass
class UnifiedConfig:
    """Централизованная конфигурация EarthOS"""
    storage: StorageConfig = field(default_factory=StorageConfig.from_env)
    update: UpdateConfig = field(default_factory=UpdateConfig.from_env)
    logging: LoggingConfig = field(default_factory=LoggingConfig.from_env)

    def __post_init__(self):
        """Пост-инициализация для валидации"""
        self.warnings = self._validate_config()

    def _validate_config(self) -> List[str]:
        """Валидация всей конфигурации (только предупреждения)"""
        errors = []

        if not self.storage.is_valid():
            errors.append(f"Неизвестный тип хранилища: {self.storage.backend}")

        if not self.update.is_valid():
            errors.append("Некорректные параметры модуля обновлений")

        if self.logging.level not in ('DEBUG', 'INFO', 'WARNING', 'ERROR', 'CRITICAL'):
            errors.append(f"Неизвестный уровень логирования: {self.logging.level}")

        for error in errors:
            logger.warning(f"⚠️ {error}")

        if errors:
            logger.warning("⚠️ Конфигурация имеет предупреждения")
        return errors

    def get_module_config(self, module_name: str) -> Dict[str, Any]:
        """
        Получение конфигурации для конкретного модуля

        Args:
            module_name: Имя модуля

        Returns:
            Словарь с конфигурацией модуля
        """
        config_mapping = {
            'storage': self.storage.to_dict(),
            'update': self.update.to_dict(),
            'logging': dict(self.logging.__dict__)
        }

        return config_mapping.get(module_name, {})

    def save_to_yaml(self, file_path: Union[str, Path]) -> None:
        """
        Сохранение конфигурации в YAML файл

        Args:
            file_path: Путь к файлу
        """
        config_dict = {
            'storage': self.storage.to_dict(),
            'update': self.update.to_dict(),
            'logging': dict(self.logging.__dict__)
        }

        with open(file_path, 'w', encoding='utf-8') as f:
            yaml.dump(config_dict, f, default_flow_style=False, allow_unicode=True)

        logger.info(f"✅ Конфигурация сохранена в {file_path}")

    @classmethod
    def load_from_yaml(cls, file_path: Union[str, Path]) -> 'UnifiedConfig':
        """
        Загрузка конфигурации из YAML файла

        Отсутствующие секции и поля берут значения по умолчанию.

        Args:
            file_path: Путь к файлу

        Returns:
            Экземпляр UnifiedConfig
        """
        with open(file_path, 'r', encoding='utf-8') as f:
            config_dict = yaml.safe_load(f) or {}

        return cls(
            storage=StorageConfig(**config_dict.get('storage', {})),
            update=UpdateConfig.from_dict(config_dict.get('update', {})),
            logging=LoggingConfig(**config_dict.get('logging', {}))
        )

    def get_status(self) -> Dict[str, Any]:
        """
        Получение статуса всей конфигурации

        Returns:
            Словарь со статусом конфигурации
        """
        return {
            'storage': self.storage.to_dict(),
            'update': self.update.to_dict(),
            'logging': {
                'level': self.logging.level,
                'log_file': self.logging.log_file
            },
            'warnings': list(self.warnings)
        }


def configure_logging(logging_config: Optional[LoggingConfig] = None) -> None:
    """
    Настройка корневого логгера

    Консольный вывод всегда; файл с ротацией если задан log_file.
    """
    logging_config = logging_config or LoggingConfig.from_env()
    handlers: List[logging.Handler] = [logging.StreamHandler()]

    if logging_config.log_file:
        handlers.append(logging.handlers.RotatingFileHandler(
            logging_config.log_file,
            maxBytes=logging_config.max_file_size,
            backupCount=logging_config.backup_count,
            encoding='utf-8'
        ))

    logging.basicConfig(
        level=getattr(logging, logging_config.level, logging.INFO),
        format=logging_config.format,
        handlers=handlers,
        force=True
    )


# Глобальный экземпляр конфигурации
_config_instance: Optional[UnifiedConfig] = None


def get_config() -> UnifiedConfig:
    """
    Получение глобального экземпляра конфигурации

    Returns:
        Экземпляр UnifiedConfig
    """
    global _config_instance
    if _config_instance is None:
        _config_instance = UnifiedConfig()
        logger.info("✅ Централизованная конфигурация инициализирована")
    return _config_instance


def reload_config() -> UnifiedConfig:
    """
    Перезагрузка конфигурации из переменных окружения

    Returns:
        Новый экземпляр UnifiedConfig
    """
    global _config_instance
    _config_instance = UnifiedConfig()
    logger.info("✅ Конфигурация перезагружена")
    return _config_instance

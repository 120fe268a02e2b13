"""
Базовый класс модулей EarthOS

DeviceRegistry, InstallationLedger и UpdateSessionManager проходят один
жизненный цикл: initialize() -> рабочие операции -> cleanup().
"""

import logging
from abc import ABC, abstractmethod
from enum import Enum
from typing import Dict, Any, Optional

from ...errors import InternalError

logger = logging.getLogger(__name__)


class ModuleStatus(Enum):
    """Статус модуля"""
    UNINITIALIZED = "uninitialized"
    INITIALIZING = "initializing"
    READY = "ready"
    ERROR = "error"
    STOPPED = "stopped"


class UniversalModuleInterface(ABC):
    """Модуль с жизненным циклом и статусом"""

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None):
        self.name = name
        self.config = config or {}
        self.status = ModuleStatus.UNINITIALIZED
        self.is_initialized = False

    @abstractmethod
    async def initialize(self) -> bool:
        """
        Returns:
            True если модуль готов принимать операции. Ошибки не
            пробрасываются, а переводят модуль в ModuleStatus.ERROR.
        """

    @abstractmethod
    async def cleanup(self) -> bool:
        """Остановка модуля и освобождение провайдеров"""

    def ensure_initialized(self):
        """
        Raises:
            InternalError: Модуль не инициализирован или уже остановлен
        """
        if not self.is_initialized:
            raise InternalError(f"Module {self.name} not initialized", {"status": self.status.value})

    def set_status(self, status: ModuleStatus):
        if status is not self.status:
            logger.debug(f"Модуль {self.name}: {self.status.value} -> {status.value}")
        self.status = status

    def get_status(self) -> Dict[str, Any]:
        return {
            "name": self.name,
            "status": self.status.value,
            "is_initialized": self.is_initialized,
            "config": dict(self.config)
        }

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}', status='{self.status.value}')"

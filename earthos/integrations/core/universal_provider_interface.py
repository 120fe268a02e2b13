"""
Базовый класс провайдеров EarthOS

Хранилища, каталоги пакетов, транспорт и установщики наследуют его, чтобы
менеджеры одинаково их инициализировали, останавливали и читали метрики.
"""

import time
import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass, asdict
from enum import Enum
from typing import Dict, Any, Optional

logger = logging.getLogger(__name__)

# Подряд идущих ошибок до статуса FAILED
FAILURE_THRESHOLD = 3


class ProviderStatus(Enum):
    """Статус провайдера"""
    UNKNOWN = "unknown"
    HEALTHY = "healthy"
    DEGRADED = "degraded"
    FAILED = "failed"


@dataclass
class ProviderMetrics:
    """Счетчики обращений к провайдеру"""
    total: int = 0
    succeeded: int = 0
    failed: int = 0
    consecutive_errors: int = 0
    last_error: Optional[str] = None
    last_success: Optional[float] = None

    @property
    def success_rate(self) -> float:
        return self.succeeded / self.total if self.total else 0.0


class UniversalProviderInterface(ABC):
    """Провайдер с жизненным циклом и метриками"""

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None):
        """
        Args:
            name: Имя провайдера (используется в логах и статусе)
            config: Конфигурация провайдера
        """
        self.name = name
        self.config = config or {}
        self.status = ProviderStatus.UNKNOWN
        self.is_initialized = False
        self.metrics = ProviderMetrics()

    @abstractmethod
    async def initialize(self) -> bool:
        """
        Подготовка ресурсов провайдера

        Returns:
            True если провайдер готов к работе
        """

    async def cleanup(self) -> bool:
        self.is_initialized = False
        return True

    @property
    def is_healthy(self) -> bool:
        return self.is_initialized and self.status is not ProviderStatus.FAILED

    def report_success(self):
        self.metrics.total += 1
        self.metrics.succeeded += 1
        self.metrics.consecutive_errors = 0
        self.metrics.last_success = time.time()
        self.status = ProviderStatus.HEALTHY

    def report_error(self, error: str):
        """Учет ошибки; после FAILURE_THRESHOLD ошибок подряд провайдер FAILED"""
        self.metrics.total += 1
        self.metrics.failed += 1
        self.metrics.consecutive_errors += 1
        self.metrics.last_error = str(error)

        if self.metrics.consecutive_errors >= FAILURE_THRESHOLD:
            if self.status is not ProviderStatus.FAILED:
                logger.warning(f"⚠️ Провайдер {self.name} помечен FAILED после {FAILURE_THRESHOLD} ошибок подряд")
            self.status = ProviderStatus.FAILED
        else:
            self.status = ProviderStatus.DEGRADED

    def get_status(self) -> Dict[str, Any]:
        status = {
            "name": self.name,
            "status": self.status.value,
            "is_initialized": self.is_initialized,
            "is_healthy": self.is_healthy,
            "success_rate": self.metrics.success_rate
        }
        status.update(asdict(self.metrics))
        return status

    def __repr__(self) -> str:
        return f"{type(self).__name__}(name='{self.name}', status='{self.status.value}')"

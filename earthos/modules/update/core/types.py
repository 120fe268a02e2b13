"""
Типы данных для модуля обновлений
"""

from enum import Enum
from dataclasses import dataclass, field, asdict
from typing import Optional, Dict, Any, List


class UpdateState(Enum):
    """Состояния сессии обновления"""
    DOWNLOADING = "downloading"     # Скачивание
    VERIFYING = "verifying"         # Проверка SHA256
    INSTALLING = "installing"       # Установка
    COMPLETED = "completed"         # Версия зафиксирована
    FAILED = "failed"               # Ошибка
    CANCELLED = "cancelled"         # Отменено клиентом

    @property
    def is_terminal(self) -> bool:
        return self in TERMINAL_STATES


TERMINAL_STATES = frozenset({UpdateState.COMPLETED, UpdateState.FAILED, UpdateState.CANCELLED})

# Установку начатую отменить нельзя - только completed или failed
CANCELLABLE_STATES = frozenset({UpdateState.DOWNLOADING, UpdateState.VERIFYING})


class SessionKind(Enum):
    """Направление смены версии"""
    UPDATE = "update"
    ROLLBACK = "rollback"


class PackageKind(Enum):
    """Тип пакета обновления"""
    FULL = "full"
    DELTA = "delta"


@dataclass(frozen=True)
class UpdatePackage:
    """Опубликованный пакет обновления ОС (неизменяемый)"""
    version: str
    release_date: str
    changelog: str
    download_url: str
    checksum: str
    size: int
    kind: PackageKind = PackageKind.FULL

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        return data


@dataclass
class UpdateSession:
    """Одна попытка перевести устройство на новую версию ОС"""
    session_id: str
    device_id: str
    target_version: str
    from_version: str
    kind: SessionKind = SessionKind.UPDATE
    state: UpdateState = UpdateState.DOWNLOADING
    progress: int = 0
    bytes_received: int = 0
    error: Optional[str] = None
    error_detail: Optional[str] = None
    created_at: float = 0.0
    updated_at: float = 0.0

    @property
    def is_active(self) -> bool:
        return not self.state.is_terminal

    def to_dict(self) -> Dict[str, Any]:
        data = asdict(self)
        data["kind"] = self.kind.value
        data["state"] = self.state.value
        return data


@dataclass
class UpdateCheckResult:
    """Результат проверки обновлений для устройства"""
    current_version: str
    latest_version: str
    is_update_available: bool
    packages: List[UpdatePackage] = field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "current_version": self.current_version,
            "latest_version": self.latest_version,
            "is_update_available": self.is_update_available,
            "packages": [package.to_dict() for package in self.packages]
        }


@dataclass
class UpdateMetrics:
    """Метрики сессий обновления"""
    total_sessions: int = 0
    completed_sessions: int = 0
    failed_sessions: int = 0
    cancelled_sessions: int = 0
    rollbacks: int = 0
    bytes_downloaded: int = 0

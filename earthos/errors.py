"""
Ошибки EarthOS - единая таксономия для всех модулей

Каждая ошибка несет стабильный тег `kind`, по которому вызывающая сторона
определяет тип сбоя без разбора текста сообщения.
"""

from typing import Dict, Any, Optional


class EarthOSError(Exception):
    """Базовая ошибка EarthOS"""

    kind = "earthos_error"

    def __init__(self, message: str, details: Optional[Dict[str, Any]] = None):
        super().__init__(message)
        self.message = message
        self.details = details or {}

    def to_dict(self) -> Dict[str, Any]:
        """Преобразование в словарь для ответа клиенту"""
        return {
            "kind": self.kind,
            "message": self.message,
            "details": self.details
        }


class ValidationError(EarthOSError):
    """Некорректные входные данные (deviceId, appId, версия, checksum)"""
    kind = "validation_error"


class InvalidVersion(ValidationError):
    """Версия не соответствует semver или не подходит для обновления"""
    kind = "invalid_version"


class ConflictError(EarthOSError):
    """Повторная установка приложения или вторая активная сессия"""
    kind = "conflict"


class ForbiddenError(EarthOSError):
    """Попытка удалить защищенное приложение"""
    kind = "forbidden"


class NotFoundError(EarthOSError):
    """Неизвестное устройство, приложение или сессия"""
    kind = "not_found"


class ChecksumMismatch(EarthOSError):
    """Контрольная сумма payload не совпала - данные повреждены или подменены"""
    kind = "checksum_mismatch"


class TransferError(EarthOSError):
    """Сбой передачи данных во время скачивания"""
    kind = "transfer_error"


class InternalError(EarthOSError):
    """Хранилище недоступно или модуль не готов к работе"""
    kind = "internal_error"

"""
EarthOS - управление парком устройств: реестр, установка приложений и обновления ОС
"""

from .errors import (
    EarthOSError, ValidationError, InvalidVersion, ConflictError, ForbiddenError,
    NotFoundError, ChecksumMismatch, TransferError, InternalError
)
from .system import EarthOSSystem

__all__ = [
    'EarthOSSystem',
    'EarthOSError',
    'ValidationError',
    'InvalidVersion',
    'ConflictError',
    'ForbiddenError',
    'NotFoundError',
    'ChecksumMismatch',
    'TransferError',
    'InternalError'
]
__version__ = '1.0.0'

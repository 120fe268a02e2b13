"""
Integrity Module - проверка целостности пакетов обновлений (SHA256)
"""

from .core.integrity_checker import IntegrityChecker

__all__ = ['IntegrityChecker']
__version__ = '1.0.0'

"""
Identity Module - генерация идентификаторов EarthOS

Модуль предоставляет:
- ID устройств формата earth-<16 hex>
- ID сессий обновления и установок (UUIDv4)
- Случайные токены
"""

from .core.identity_generator import IdentityGenerator

__all__ = ['IdentityGenerator']
__version__ = '1.0.0'

"""
Installation Ledger Module - установка и удаление приложений

Модуль обеспечивает:
- Уникальность appId на устройстве
- Невозможность удаления защищенных приложений
- Порядок списка приложений = порядок установки
"""

from .core.installation_ledger import InstallationLedger

__all__ = ['InstallationLedger']
__version__ = '1.0.0'

"""
Update Module - сессии обновления и отката ОС

Модуль обеспечивает:
- Проверку доступных обновлений по каталогу пакетов
- Не более одной активной сессии на устройство
- Скачивание с прогрессом, проверку SHA256 и установку
- Фиксацию версии ОС ровно один раз, только после успешной проверки
- Откат на ранее выпущенную версию через тот же конвейер
"""

from .core.update_session_manager import UpdateSessionManager
from .core.types import (
    UpdateState, UpdateSession, UpdatePackage, UpdateCheckResult, UpdateMetrics,
    SessionKind, PackageKind
)
from .config import UpdateConfig
from .providers import (
    VersionProvider,
    CatalogProvider, StaticCatalogProvider, ManifestCatalogProvider, package_from_dict,
    TransferProvider, HttpTransferProvider, MemoryTransferProvider,
    InstallerProvider, NoopInstallerProvider, StagingInstallerProvider,
    create_catalog_provider, create_transfer_provider, create_installer_provider
)

__all__ = [
    'UpdateSessionManager',
    'UpdateState',
    'UpdateSession',
    'UpdatePackage',
    'UpdateCheckResult',
    'UpdateMetrics',
    'SessionKind',
    'PackageKind',
    'UpdateConfig',
    'VersionProvider',
    'CatalogProvider',
    'StaticCatalogProvider',
    'ManifestCatalogProvider',
    'package_from_dict',
    'TransferProvider',
    'HttpTransferProvider',
    'MemoryTransferProvider',
    'InstallerProvider',
    'NoopInstallerProvider',
    'StagingInstallerProvider',
    'create_catalog_provider',
    'create_transfer_provider',
    'create_installer_provider'
]
__version__ = '1.0.0'

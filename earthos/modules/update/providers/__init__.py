"""
Провайдеры Update Module
"""

from typing import Optional

from .version_provider import VersionProvider
from .catalog_provider import (
    CatalogProvider, StaticCatalogProvider, ManifestCatalogProvider, package_from_dict
)
from .transfer_provider import TransferProvider, HttpTransferProvider, MemoryTransferProvider
from .installer_provider import InstallerProvider, NoopInstallerProvider, StagingInstallerProvider


def create_catalog_provider(update_config,
                            version_provider: Optional[VersionProvider] = None) -> CatalogProvider:
    """Каталог манифестов если задан catalog_dir, иначе пустой статический"""
    if update_config.catalog_dir:
        return ManifestCatalogProvider(update_config.to_dict(), version_provider=version_provider)
    return StaticCatalogProvider(version_provider=version_provider)


def create_transfer_provider(update_config) -> TransferProvider:
    return HttpTransferProvider(update_config.to_dict())


def create_installer_provider(update_config) -> InstallerProvider:
    """Установщик в каталог образов если задан staging_dir, иначе noop"""
    if update_config.staging_dir:
        return StagingInstallerProvider(update_config.to_dict())
    return NoopInstallerProvider()


__all__ = [
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

"""
EarthOSSystem - сборка модулей EarthOS и управление их жизненным циклом
"""

import logging
from typing import Dict, Any, Optional

from .config.unified_config import UnifiedConfig, get_config
from .integrations.core.device_locks import DeviceLockManager
from .modules.device_registry import DeviceRegistry, create_storage_provider
from .modules.identity import IdentityGenerator
from .modules.installation_ledger import InstallationLedger
from .modules.integrity import IntegrityChecker
from .modules.update import (
    UpdateSessionManager, VersionProvider, CatalogProvider, TransferProvider, InstallerProvider,
    create_catalog_provider, create_transfer_provider, create_installer_provider
)

logger = logging.getLogger(__name__)


class EarthOSSystem:
    """
    Реестр устройств, журнал установок и менеджер обновлений поверх
    общего хранилища и общих блокировок устройств

    Провайдеры каталога, передачи и установки можно передать явно,
    иначе они создаются по конфигурации.
    """

    def __init__(self, config: Optional[UnifiedConfig] = None,
                 catalog: Optional[CatalogProvider] = None,
                 transfer: Optional[TransferProvider] = None,
                 installer: Optional[InstallerProvider] = None):
        self.config = config or get_config()
        self.is_initialized = False

        identity = IdentityGenerator()
        version_provider = VersionProvider()
        self.locks = DeviceLockManager()

        self.registry = DeviceRegistry(
            storage=create_storage_provider(self.config.storage),
            locks=self.locks,
            identity=identity
        )
        self.ledger = InstallationLedger(self.registry)
        self.updates = UpdateSessionManager(
            device_registry=self.registry,
            catalog=catalog or create_catalog_provider(self.config.update, version_provider),
            transfer=transfer or create_transfer_provider(self.config.update),
            installer=installer or create_installer_provider(self.config.update),
            integrity=IntegrityChecker(),
            identity=identity,
            version_provider=version_provider,
            config=self.config.update
        )

        # Порядок важен: ledger и updates требуют инициализированный registry
        self.modules = {
            'device_registry': self.registry,
            'installation_ledger': self.ledger,
            'update': self.updates
        }

    async def initialize(self) -> bool:
        """
        Инициализация модулей по порядку

        Returns:
            True если все модули готовы, False иначе
        """
        logger.info("🚀 Инициализация EarthOS...")
        for module_name, module in self.modules.items():
            if not await module.initialize():
                logger.error(f"❌ Модуль {module_name} не инициализирован")
                await self.cleanup()
                return False

        self.is_initialized = True
        logger.info("✅ EarthOS готова к работе")
        return True

    async def cleanup(self) -> bool:
        """Очистка модулей в обратном порядке"""
        logger.info("🧹 Остановка EarthOS...")
        success = True
        for module_name, module in reversed(list(self.modules.items())):
            if not await module.cleanup():
                logger.error(f"❌ Ошибка очистки модуля {module_name}")
                success = False

        self.is_initialized = False
        return success

    async def __aenter__(self) -> 'EarthOSSystem':
        if not await self.initialize():
            raise RuntimeError("EarthOS initialization failed")
        return self

    async def __aexit__(self, exc_type, exc, tb):
        await self.cleanup()

    def get_status(self) -> Dict[str, Any]:
        return {
            'is_initialized': self.is_initialized,
            'config': self.config.get_status(),
            'modules': {name: module.get_status() for name, module in self.modules.items()}
        }

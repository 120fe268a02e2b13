"""
Installation Ledger - установка и удаление приложений на устройствах

Инварианты:
- appId уникален в наборе приложений устройства
- защищенные приложения удалить нельзя; защищенность всегда вычисляется
  по фиксированному списку, флагу из запроса или из хранилища не доверяем
"""

import logging
from typing import Dict, Any, Optional, List

from ....errors import ValidationError, ConflictError, ForbiddenError, NotFoundError
from ....integrations.core.universal_module_interface import UniversalModuleInterface, ModuleStatus
from ....utils.validators import is_valid_app_id, is_protected_app
from ...device_registry.core.device_registry import DeviceRegistry
from ...device_registry.core.types import InstalledApp, utc_now

logger = logging.getLogger(__name__)

DEFAULT_ICON = "default.png"


class InstallationLedger(UniversalModuleInterface):
    """Журнал установленных приложений поверх DeviceRegistry"""

    def __init__(self, device_registry: DeviceRegistry, config: Optional[Dict[str, Any]] = None):
        super().__init__(name="installation_ledger", config=config or {})
        self.device_registry = device_registry
        self.locks = device_registry.locks

        self.total_installs = 0
        self.total_removals = 0
        self.rejected_requests = 0

    async def initialize(self) -> bool:
        """Журнал готов, когда готов реестр устройств"""
        if not self.device_registry.is_initialized:
            logger.error("❌ DeviceRegistry не инициализирован")
            self.set_status(ModuleStatus.ERROR)
            return False

        self.is_initialized = True
        self.set_status(ModuleStatus.READY)
        logger.info("✅ InstallationLedger инициализирован")
        return True

    async def cleanup(self) -> bool:
        self.is_initialized = False
        self.set_status(ModuleStatus.STOPPED)
        return True

    async def install(self, device_id: str, app_id: str, metadata: Dict[str, Any]) -> InstalledApp:
        """
        Установка приложения

        Args:
            device_id: ID устройства
            app_id: ID приложения
            metadata: name и version (обязательны), icon и size (опционально).
                Поле protected в metadata игнорируется.

        Returns:
            InstalledApp: Добавленная запись

        Raises:
            ValidationError: Некорректный appId или метаданные
            NotFoundError: Устройство не найдено
            ConflictError: Приложение уже установлено
        """
        self.ensure_initialized()

        if not is_valid_app_id(app_id):
            self.rejected_requests += 1
            raise ValidationError("Invalid app ID", {"app_id": app_id})

        app = self._build_app(app_id, metadata)
        self.device_registry.validate_device_id(device_id)

        async with self.locks.hold(device_id):
            self.device_registry.require_device(device_id)
            apps = self.device_registry.load_apps(device_id)

            if any(existing.app_id == app_id for existing in apps):
                self.rejected_requests += 1
                logger.warning(f"⚠️ Приложение {app_id} уже установлено на {device_id[:12]}...")
                raise ConflictError("App already installed", {"device_id": device_id, "app_id": app_id})

            apps.append(app)
            self.device_registry.save_apps(device_id, apps)

        self.total_installs += 1
        logger.info(f"✅ Установлено {app_id} {app.version} на {device_id[:12]}... (protected={app.protected})")
        return app

    def _build_app(self, app_id: str, metadata: Dict[str, Any]) -> InstalledApp:
        if not isinstance(metadata, dict):
            raise ValidationError("App metadata must be a mapping", {"app_id": app_id})

        name = metadata.get("name")
        version = metadata.get("version")
        if not isinstance(name, str) or not name.strip():
            raise ValidationError("Missing app name", {"app_id": app_id})
        if not isinstance(version, str) or not version.strip():
            raise ValidationError("Missing app version", {"app_id": app_id})

        icon = metadata.get("icon")
        size = metadata.get("size")

        return InstalledApp(
            app_id=app_id,
            name=name.strip(),
            version=version.strip(),
            icon=icon if isinstance(icon, str) and icon else DEFAULT_ICON,
            protected=is_protected_app(app_id),
            installed_at=utc_now(),
            size=size if type(size) is int and size >= 0 else 0
        )

    async def remove(self, device_id: str, app_id: str) -> InstalledApp:
        """
        Удаление приложения

        Проверка защищенности идет первой: удалить приложение из защищенного
        списка нельзя, даже если оно не установлено или устройство неизвестно.

        Returns:
            InstalledApp: Удаленная запись

        Raises:
            ForbiddenError: Приложение защищено
            NotFoundError: Устройство или приложение не найдено
        """
        self.ensure_initialized()

        if is_protected_app(app_id):
            self.rejected_requests += 1
            logger.warning(f"⚠️ Попытка удалить защищенное приложение {app_id}")
            raise ForbiddenError("Cannot remove protected app", {"app_id": app_id})

        self.device_registry.validate_device_id(device_id)
        async with self.locks.hold(device_id):
            self.device_registry.require_device(device_id)
            apps = self.device_registry.load_apps(device_id)

            index = next((i for i, app in enumerate(apps) if app.app_id == app_id), None)
            if index is None:
                self.rejected_requests += 1
                raise NotFoundError("App not found", {"device_id": device_id, "app_id": app_id})

            removed = apps.pop(index)
            self.device_registry.save_apps(device_id, apps)

        self.total_removals += 1
        logger.info(f"🗑️ Удалено {app_id} с {device_id[:12]}...")
        return removed

    async def list(self, device_id: str) -> List[InstalledApp]:
        """
        Установленные приложения в порядке установки

        Raises:
            NotFoundError: Устройство не найдено
        """
        self.ensure_initialized()
        self.device_registry.require_device(device_id)
        return self.device_registry.load_apps(device_id)

    async def get(self, device_id: str, app_id: str) -> InstalledApp:
        """Одно установленное приложение"""
        for app in await self.list(device_id):
            if app.app_id == app_id:
                return app
        raise NotFoundError("App not found", {"device_id": device_id, "app_id": app_id})

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status["statistics"] = {
            "total_installs": self.total_installs,
            "total_removals": self.total_removals,
            "rejected_requests": self.rejected_requests
        }
        return status

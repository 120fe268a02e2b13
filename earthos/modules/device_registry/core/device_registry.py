"""
Device Registry - источник истины о состоянии устройств

Реестр единолично владеет записью устройства и набором установленных
приложений. Других писателей у этих данных нет: InstallationLedger
работает через load_apps/save_apps под блокировкой устройства, а
UpdateSessionManager меняет версию ОС только через set_version.
"""

import logging
from typing import Dict, Any, Optional, List

from ....errors import ValidationError, InvalidVersion, NotFoundError, InternalError
from ....integrations.core.device_locks import DeviceLockManager
from ....integrations.core.universal_module_interface import UniversalModuleInterface, ModuleStatus
from ....utils.validators import is_valid_device_id, is_valid_theme, is_valid_version
from ...identity.core.identity_generator import IdentityGenerator
from ..providers.storage_provider import StorageProvider
from .types import Device, InstalledApp, build_protected_apps, utc_now

logger = logging.getLogger(__name__)

MAX_DEVICE_NAME_LENGTH = 128
MAX_ID_ATTEMPTS = 5


def _is_bool(value: Any) -> bool:
    return type(value) is bool


def _is_device_name(value: Any) -> bool:
    return isinstance(value, str) and 0 < len(value.strip()) <= MAX_DEVICE_NAME_LENGTH


# Ключ запроса -> (поле Device, проверка значения)
CONFIG_FIELDS: Dict[str, tuple] = {
    'name': ('name', _is_device_name),
    'deviceName': ('name', _is_device_name),
    'theme': ('theme', is_valid_theme),
    'auto_sync': ('auto_sync', _is_bool),
    'autoSync': ('auto_sync', _is_bool),
    'auto_update': ('auto_update', _is_bool),
    'autoUpdate': ('auto_update', _is_bool),
    'crash_reports': ('crash_reports', _is_bool),
    'crashReports': ('crash_reports', _is_bool),
}


class DeviceRegistry(UniversalModuleInterface):
    """Реестр устройств EarthOS"""

    def __init__(self, storage: StorageProvider,
                 locks: Optional[DeviceLockManager] = None,
                 identity: Optional[IdentityGenerator] = None,
                 config: Optional[Dict[str, Any]] = None):
        """
        Args:
            storage: Провайдер долговременного хранилища
            locks: Общий реестр блокировок по устройствам
            identity: Генератор ID устройств
            config: Дополнительная конфигурация модуля
        """
        super().__init__(name="device_registry", config=config or {})
        self.storage = storage
        self.locks = locks or DeviceLockManager()
        self.identity = identity or IdentityGenerator()

    async def initialize(self) -> bool:
        """Инициализация реестра и хранилища"""
        try:
            logger.info("🔧 Инициализация DeviceRegistry...")
            self.set_status(ModuleStatus.INITIALIZING)

            if not await self.storage.initialize():
                logger.error("❌ Хранилище устройств не инициализировано")
                self.set_status(ModuleStatus.ERROR)
                return False

            self.is_initialized = True
            self.set_status(ModuleStatus.READY)
            logger.info("✅ DeviceRegistry инициализирован")
            return True

        except Exception as e:
            logger.error(f"❌ Ошибка инициализации DeviceRegistry: {e}")
            self.set_status(ModuleStatus.ERROR)
            return False

    async def cleanup(self) -> bool:
        """Очистка ресурсов реестра"""
        try:
            await self.storage.cleanup()
            self.is_initialized = False
            self.set_status(ModuleStatus.STOPPED)
            logger.info("✅ DeviceRegistry остановлен")
            return True
        except Exception as e:
            logger.error(f"❌ Ошибка очистки DeviceRegistry: {e}")
            return False

    # Регистрация и чтение

    async def register(self, name: str) -> Device:
        """
        Регистрация нового устройства

        Создает запись с конфигурацией по умолчанию и шестью
        предустановленными защищенными приложениями.

        Args:
            name: Имя устройства

        Returns:
            Device: Созданное устройство

        Raises:
            ValidationError: Если имя пустое или не строка
        """
        self.ensure_initialized()

        if not _is_device_name(name):
            raise ValidationError("Invalid device name", {"name": name})

        device_id = self._allocate_device_id()

        async with self.locks.hold(device_id):
            device = Device(device_id=device_id, name=name.strip(), created_at=utc_now())
            self.storage.save_device(device_id, device.to_dict())
            self.save_apps(device_id, build_protected_apps())

        logger.info(f"✅ Устройство зарегистрировано: {device_id[:12]}...")
        return device

    def _allocate_device_id(self) -> str:
        """ID никогда не переиспользуется: при совпадении генерируем заново"""
        for _ in range(MAX_ID_ATTEMPTS):
            device_id = self.identity.new_device_id()
            if self.storage.load_device(device_id) is None:
                return device_id
            logger.warning("⚠️ Коллизия ID устройства, генерируем заново")
        raise InternalError("Could not allocate a unique device id")

    async def get(self, device_id: str) -> Device:
        """
        Получение устройства (без блокировки)

        Raises:
            ValidationError: Некорректный формат ID
            NotFoundError: Устройство не найдено
        """
        self.ensure_initialized()
        return self.require_device(device_id)

    async def exists(self, device_id: str) -> bool:
        self.ensure_initialized()
        return is_valid_device_id(device_id) and self.storage.load_device(device_id) is not None

    async def list_devices(self) -> List[Device]:
        """Все зарегистрированные устройства"""
        self.ensure_initialized()
        devices = []
        for device_id in self.storage.list_device_ids():
            data = self.storage.load_device(device_id)
            if data is not None:
                devices.append(Device.from_dict(data))
        return devices

    def require_device(self, device_id: str) -> Device:
        """Загрузка устройства с проверкой ID и существования"""
        self.validate_device_id(device_id)

        data = self.storage.load_device(device_id)
        if data is None:
            raise NotFoundError("Device not found", {"device_id": device_id})
        return Device.from_dict(data)

    def validate_device_id(self, device_id: str):
        if not is_valid_device_id(device_id):
            raise ValidationError("Invalid device ID", {"device_id": device_id})

    # Изменение устройства

    async def update_config(self, device_id: str, partial: Dict[str, Any]) -> Device:
        """
        Частичное обновление конфигурации

        Применяются только известные поля с корректным типом. Неизвестные
        и некорректные поля пропускаются без ошибки.

        Args:
            device_id: ID устройства
            partial: Словарь изменяемых полей

        Returns:
            Device: Обновленное устройство
        """
        self.ensure_initialized()
        self.validate_device_id(device_id)

        async with self.locks.hold(device_id):
            device = self.require_device(device_id)
            applied = self._apply_config(device, partial if isinstance(partial, dict) else {})
            if applied:
                self.storage.save_device(device_id, device.to_dict())

        logger.info(f"✅ Конфигурация {device_id[:12]}... обновлена: {sorted(applied) or 'без изменений'}")
        return device

    def _apply_config(self, device: Device, partial: Dict[str, Any]) -> List[str]:
        applied = []
        for key, value in partial.items():
            field_spec = CONFIG_FIELDS.get(key)
            if field_spec is None:
                logger.debug(f"Неизвестное поле конфигурации пропущено: {key}")
                continue

            field_name, is_valid = field_spec
            if not is_valid(value):
                logger.debug(f"Некорректное значение поля {key} пропущено")
                continue

            if field_name == 'name':
                value = value.strip()
            setattr(device, field_name, value)
            applied.append(field_name)
        return applied

    async def set_version(self, device_id: str, version: str, build_number: int) -> Device:
        """
        Запись новой версии ОС

        Вызывается только на шаге коммита UpdateSessionManager.

        Raises:
            InvalidVersion: Если версия не соответствует semver
        """
        self.ensure_initialized()
        self.validate_device_id(device_id)

        if not is_valid_version(version):
            raise InvalidVersion("Invalid version format", {"version": version})

        async with self.locks.hold(device_id):
            device = self.require_device(device_id)
            previous = device.os_version
            device.os_version = version
            device.build_number = build_number
            self.storage.save_device(device_id, device.to_dict())

        logger.info(f"✅ Версия ОС {device_id[:12]}...: {previous} -> {version}")
        return device

    async def delete(self, device_id: str) -> None:
        """Удаление устройства вместе с установленными приложениями"""
        self.ensure_initialized()
        self.validate_device_id(device_id)

        async with self.locks.hold(device_id):
            self.require_device(device_id)
            self.storage.delete_device(device_id)

        self.locks.discard(device_id)
        logger.info(f"🗑️ Устройство удалено: {device_id[:12]}...")

    # Набор приложений (только для InstallationLedger, под блокировкой устройства)

    def load_apps(self, device_id: str) -> List[InstalledApp]:
        return [InstalledApp.from_dict(item) for item in self.storage.load_apps(device_id)]

    def save_apps(self, device_id: str, apps: List[InstalledApp]) -> None:
        self.storage.save_apps(device_id, [app.to_dict() for app in apps])

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status["storage"] = self.storage.get_status()
        status["locks"] = len(self.locks)
        return status

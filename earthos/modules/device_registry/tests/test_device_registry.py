"""
Тесты для DeviceRegistry
"""

import asyncio
from unittest.mock import AsyncMock

import pytest

from earthos.errors import ValidationError, InvalidVersion, NotFoundError, InternalError
from earthos.modules.device_registry import DeviceRegistry, MemoryStorageProvider
from earthos.modules.device_registry.core.types import PROTECTED_APP_DEFAULTS
from earthos.modules.identity import IdentityGenerator
from earthos.utils.validators import is_valid_device_id


def make_registry(**kwargs) -> DeviceRegistry:
    return DeviceRegistry(storage=MemoryStorageProvider(), **kwargs)


class TestDeviceRegistryLifecycle:
    """Тесты жизненного цикла реестра"""

    def test_registry_creation(self):
        """Тест создания реестра"""
        registry = make_registry()

        assert registry.name == "device_registry"
        assert registry.is_initialized is False
        assert len(registry.locks) == 0

    @pytest.mark.asyncio
    async def test_initialize_success(self):
        """Тест успешной инициализации"""
        registry = make_registry()

        result = await registry.initialize()

        assert result is True
        assert registry.is_initialized is True
        assert registry.get_status()["status"] == "ready"

    @pytest.mark.asyncio
    async def test_initialize_storage_failure(self):
        """Тест неудачной инициализации хранилища"""
        storage = MemoryStorageProvider()
        storage.initialize = AsyncMock(return_value=False)
        registry = DeviceRegistry(storage=storage)

        result = await registry.initialize()

        assert result is False
        assert registry.is_initialized is False

    @pytest.mark.asyncio
    async def test_operations_require_initialization(self):
        """Тест операций до инициализации"""
        registry = make_registry()

        with pytest.raises(InternalError):
            await registry.register("Pixel")

    @pytest.mark.asyncio
    async def test_cleanup(self):
        """Тест очистки ресурсов"""
        registry = make_registry()
        await registry.initialize()

        assert await registry.cleanup() is True
        assert registry.is_initialized is False


class TestDeviceRegistration:
    """Тесты регистрации устройств"""

    @pytest.mark.asyncio
    async def test_register_defaults(self):
        """Тест значений по умолчанию нового устройства"""
        registry = make_registry()
        await registry.initialize()

        device = await registry.register("My Earth")

        assert is_valid_device_id(device.device_id)
        assert device.name == "My Earth"
        assert device.theme == "dark"
        assert device.os_version == "1.0.0"
        assert device.auto_sync is True
        assert device.auto_update is True
        assert device.crash_reports is True
        assert device.created_at

    @pytest.mark.asyncio
    async def test_register_installs_protected_apps(self):
        """Тест предустановленных защищенных приложений"""
        registry = make_registry()
        await registry.initialize()

        device = await registry.register("Phone")
        apps = registry.load_apps(device.device_id)

        assert [app.app_id for app in apps] == [item[0] for item in PROTECTED_APP_DEFAULTS]
        assert all(app.protected for app in apps)

    @pytest.mark.asyncio
    async def test_register_trims_name(self):
        """Тест обрезки пробелов в имени"""
        registry = make_registry()
        await registry.initialize()

        device = await registry.register("  Tablet  ")

        assert device.name == "Tablet"

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name", ["", "   ", None, 42, "x" * 129])
    async def test_register_invalid_name(self, name):
        """Тест некорректного имени устройства"""
        registry = make_registry()
        await registry.initialize()

        with pytest.raises(ValidationError):
            await registry.register(name)

        assert await registry.list_devices() == []

    @pytest.mark.asyncio
    async def test_register_retries_on_collision(self):
        """Тест повторной генерации ID при коллизии"""
        identity = IdentityGenerator()
        ids = iter(["earth-aaaaaaaaaaaaaaaa", "earth-aaaaaaaaaaaaaaaa", "earth-bbbbbbbbbbbbbbbb"])
        identity.new_device_id = lambda: next(ids)
        registry = make_registry(identity=identity)
        await registry.initialize()

        first = await registry.register("First")
        second = await registry.register("Second")

        assert first.device_id == "earth-aaaaaaaaaaaaaaaa"
        assert second.device_id == "earth-bbbbbbbbbbbbbbbb"

    @pytest.mark.asyncio
    async def test_register_gives_up_after_repeated_collisions(self):
        """Тест отказа после исчерпания попыток генерации ID"""
        identity = IdentityGenerator()
        identity.new_device_id = lambda: "earth-aaaaaaaaaaaaaaaa"
        registry = make_registry(identity=identity)
        await registry.initialize()
        await registry.register("First")

        with pytest.raises(InternalError):
            await registry.register("Second")


class TestDeviceLookup:
    """Тесты чтения устройств"""

    @pytest.mark.asyncio
    async def test_get_existing(self):
        """Тест получения устройства"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        loaded = await registry.get(device.device_id)

        assert loaded == device

    @pytest.mark.asyncio
    async def test_get_malformed_id(self):
        """Тест некорректного формата ID"""
        registry = make_registry()
        await registry.initialize()

        with pytest.raises(ValidationError):
            await registry.get("not-a-device")

        assert len(registry.locks) == 0

    @pytest.mark.asyncio
    async def test_get_id_with_trailing_newline(self):
        """Тест ID с переводом строки в конце"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        with pytest.raises(ValidationError):
            await registry.get(device.device_id + "\n")

        assert is_valid_device_id(device.device_id + "\n") is False

    @pytest.mark.asyncio
    async def test_get_unknown(self):
        """Тест неизвестного устройства"""
        registry = make_registry()
        await registry.initialize()

        with pytest.raises(NotFoundError):
            await registry.get("earth-0000000000000000")

    @pytest.mark.asyncio
    async def test_exists(self):
        """Тест проверки существования"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        assert await registry.exists(device.device_id) is True
        assert await registry.exists("earth-0000000000000000") is False
        assert await registry.exists("garbage") is False

    @pytest.mark.asyncio
    async def test_list_devices(self):
        """Тест списка устройств"""
        registry = make_registry()
        await registry.initialize()
        first = await registry.register("One")
        second = await registry.register("Two")

        devices = await registry.list_devices()

        assert {d.device_id for d in devices} == {first.device_id, second.device_id}


class TestUpdateConfig:
    """Тесты частичного обновления конфигурации"""

    @pytest.mark.asyncio
    async def test_update_known_fields(self):
        """Тест обновления известных полей"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        updated = await registry.update_config(device.device_id, {
            "name": "Renamed",
            "theme": "neon",
            "auto_sync": False
        })

        assert updated.name == "Renamed"
        assert updated.theme == "neon"
        assert updated.auto_sync is False
        assert (await registry.get(device.device_id)).theme == "neon"

    @pytest.mark.asyncio
    async def test_update_camel_case_aliases(self):
        """Тест ключей в camelCase"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        updated = await registry.update_config(device.device_id, {
            "deviceName": "Camel",
            "autoUpdate": False,
            "crashReports": False
        })

        assert updated.name == "Camel"
        assert updated.auto_update is False
        assert updated.crash_reports is False

    @pytest.mark.asyncio
    async def test_update_ignores_unknown_and_invalid(self):
        """Тест пропуска неизвестных и некорректных полей"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        updated = await registry.update_config(device.device_id, {
            "theme": "purple",
            "auto_sync": "yes",
            "os_version": "9.9.9",
            "hacker": True
        })

        assert updated.theme == "dark"
        assert updated.auto_sync is True
        assert updated.os_version == "1.0.0"

    @pytest.mark.asyncio
    async def test_update_non_mapping_partial(self):
        """Тест пустого изменения при некорректном типе"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        updated = await registry.update_config(device.device_id, ["theme", "neon"])

        assert updated == device

    @pytest.mark.asyncio
    async def test_update_unknown_device(self):
        """Тест обновления неизвестного устройства"""
        registry = make_registry()
        await registry.initialize()

        with pytest.raises(NotFoundError):
            await registry.update_config("earth-0000000000000000", {"theme": "neon"})


class TestSetVersion:
    """Тесты записи версии ОС"""

    @pytest.mark.asyncio
    async def test_set_version(self):
        """Тест записи версии и номера сборки"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        updated = await registry.set_version(device.device_id, "1.0.1", 10001)

        assert updated.os_version == "1.0.1"
        assert updated.build_number == 10001
        assert (await registry.get(device.device_id)).os_version == "1.0.1"

    @pytest.mark.asyncio
    async def test_set_invalid_version(self):
        """Тест некорректной версии"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        with pytest.raises(InvalidVersion):
            await registry.set_version(device.device_id, "1.0", 100)
        with pytest.raises(InvalidVersion):
            await registry.set_version(device.device_id, "1.0.1\n", 10001)

        assert (await registry.get(device.device_id)).os_version == "1.0.0"


class TestDeleteDevice:
    """Тесты удаления устройств"""

    @pytest.mark.asyncio
    async def test_delete(self):
        """Тест удаления устройства и его блокировки"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        await registry.delete(device.device_id)

        assert await registry.exists(device.device_id) is False
        assert registry.load_apps(device.device_id) == []
        assert len(registry.locks) == 0

    @pytest.mark.asyncio
    async def test_delete_unknown(self):
        """Тест удаления неизвестного устройства"""
        registry = make_registry()
        await registry.initialize()

        with pytest.raises(NotFoundError):
            await registry.delete("earth-0000000000000000")


class TestConcurrentConfigUpdates:
    """Тесты параллельных изменений одного устройства"""

    @pytest.mark.asyncio
    async def test_parallel_updates_do_not_lose_fields(self):
        """Тест: параллельные изменения разных полей не теряются"""
        registry = make_registry()
        await registry.initialize()
        device = await registry.register("Phone")

        await asyncio.gather(
            registry.update_config(device.device_id, {"theme": "light"}),
            registry.update_config(device.device_id, {"auto_sync": False}),
            registry.update_config(device.device_id, {"name": "Parallel"}),
        )

        loaded = await registry.get(device.device_id)
        assert loaded.theme == "light"
        assert loaded.auto_sync is False
        assert loaded.name == "Parallel"

"""
Storage Provider - интерфейс долговременного хранилища устройств
"""

from abc import abstractmethod
from typing import Dict, Any, List, Optional

from ....integrations.core.universal_provider_interface import UniversalProviderInterface


class StorageProvider(UniversalProviderInterface):
    """
    Хранилище ключ-значение по deviceId

    Хранит две записи на устройство: конфигурацию устройства и список
    установленных приложений. Методы синхронные, блокировку по устройству
    обеспечивает DeviceRegistry.
    """

    @abstractmethod
    def load_device(self, device_id: str) -> Optional[Dict[str, Any]]:
        """Запись устройства или None"""

    @abstractmethod
    def save_device(self, device_id: str, data: Dict[str, Any]) -> None:
        """Сохранение записи устройства"""

    @abstractmethod
    def load_apps(self, device_id: str) -> List[Dict[str, Any]]:
        """Список установленных приложений (пустой если записи нет)"""

    @abstractmethod
    def save_apps(self, device_id: str, apps: List[Dict[str, Any]]) -> None:
        """Сохранение списка установленных приложений"""

    @abstractmethod
    def delete_device(self, device_id: str) -> None:
        """Удаление устройства вместе со списком приложений"""

    @abstractmethod
    def list_device_ids(self) -> List[str]:
        """Все известные deviceId"""

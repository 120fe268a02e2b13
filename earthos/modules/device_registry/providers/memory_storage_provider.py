"""
Memory Storage Provider - хранилище в памяти процесса (для тестов и демо)
"""

import copy
import logging
from typing import Dict, Any, List, Optional

from .storage_provider import StorageProvider

logger = logging.getLogger(__name__)


class MemoryStorageProvider(StorageProvider):
    """Хранилище в памяти, данные не переживают перезапуск"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(name="memory_storage", config=config or {})
        self._devices: Dict[str, Dict[str, Any]] = {}
        self._apps: Dict[str, List[Dict[str, Any]]] = {}

    async def initialize(self) -> bool:
        self.is_initialized = True
        logger.info("✅ MemoryStorageProvider инициализирован")
        return True

    async def cleanup(self) -> bool:
        self._devices.clear()
        self._apps.clear()
        self.is_initialized = False
        return True

    def load_device(self, device_id: str) -> Optional[Dict[str, Any]]:
        data = self._devices.get(device_id)
        self.report_success()
        return copy.deepcopy(data) if data is not None else None

    def save_device(self, device_id: str, data: Dict[str, Any]) -> None:
        self._devices[device_id] = copy.deepcopy(data)
        self.report_success()

    def load_apps(self, device_id: str) -> List[Dict[str, Any]]:
        self.report_success()
        return copy.deepcopy(self._apps.get(device_id, []))

    def save_apps(self, device_id: str, apps: List[Dict[str, Any]]) -> None:
        self._apps[device_id] = copy.deepcopy(apps)
        self.report_success()

    def delete_device(self, device_id: str) -> None:
        self._devices.pop(device_id, None)
        self._apps.pop(device_id, None)
        self.report_success()

    def list_device_ids(self) -> List[str]:
        return list(self._devices.keys())

"""
JSON Storage Provider - хранение устройств в JSON файлах

Структура каталога данных:
    <data_dir>/devices/<deviceId>.json       - конфигурация устройства
    <data_dir>/apps/<deviceId>-apps.json     - установленные приложения
"""

import json
import logging
import os
import tempfile
from pathlib import Path
from typing import Dict, Any, List, Optional

from ....errors import InternalError
from .storage_provider import StorageProvider

logger = logging.getLogger(__name__)


class JsonStorageProvider(StorageProvider):
    """Хранилище устройств на файловой системе"""

    def __init__(self, config: Dict[str, Any]):
        """
        Args:
            config: Конфигурация провайдера, ключ 'data_dir' обязателен
        """
        super().__init__(name="json_storage", config=config)
        self.data_dir = Path(config['data_dir'])
        self.devices_dir = self.data_dir / "devices"
        self.apps_dir = self.data_dir / "apps"

    async def initialize(self) -> bool:
        """Создание каталогов хранилища"""
        try:
            self.devices_dir.mkdir(parents=True, exist_ok=True)
            self.apps_dir.mkdir(parents=True, exist_ok=True)
            self.is_initialized = True
            logger.info(f"✅ JsonStorageProvider инициализирован: {self.data_dir}")
            return True
        except OSError as e:
            logger.error(f"❌ Ошибка инициализации JsonStorageProvider: {e}")
            self.report_error(str(e))
            return False

    def _device_path(self, device_id: str) -> Path:
        return self.devices_dir / f"{device_id}.json"

    def _apps_path(self, device_id: str) -> Path:
        return self.apps_dir / f"{device_id}-apps.json"

    def _read_json(self, path: Path) -> Optional[Any]:
        if not path.exists():
            return None
        try:
            with open(path, 'r', encoding='utf-8') as f:
                data = json.load(f)
            self.report_success()
            return data
        except (OSError, ValueError) as e:
            logger.error(f"❌ Ошибка чтения {path}: {e}")
            self.report_error(str(e))
            raise InternalError(f"Storage read failed: {path.name}") from e

    def _write_json(self, path: Path, data: Any) -> None:
        """Атомарная запись: временный файл в том же каталоге + os.replace"""
        tmp_path = None
        try:
            fd, tmp_path = tempfile.mkstemp(dir=str(path.parent), prefix=f".{path.name}.", suffix=".tmp")
            with os.fdopen(fd, 'w', encoding='utf-8') as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
                f.flush()
                os.fsync(f.fileno())
            os.replace(tmp_path, path)
            tmp_path = None
            self.report_success()
        except OSError as e:
            logger.error(f"❌ Ошибка записи {path}: {e}")
            self.report_error(str(e))
            raise InternalError(f"Storage write failed: {path.name}") from e
        finally:
            if tmp_path is not None and os.path.exists(tmp_path):
                os.unlink(tmp_path)

    def load_device(self, device_id: str) -> Optional[Dict[str, Any]]:
        return self._read_json(self._device_path(device_id))

    def save_device(self, device_id: str, data: Dict[str, Any]) -> None:
        self._write_json(self._device_path(device_id), data)

    def load_apps(self, device_id: str) -> List[Dict[str, Any]]:
        return self._read_json(self._apps_path(device_id)) or []

    def save_apps(self, device_id: str, apps: List[Dict[str, Any]]) -> None:
        self._write_json(self._apps_path(device_id), apps)

    def delete_device(self, device_id: str) -> None:
        try:
            self._apps_path(device_id).unlink(missing_ok=True)
            self._device_path(device_id).unlink(missing_ok=True)
            self.report_success()
        except OSError as e:
            logger.error(f"❌ Ошибка удаления устройства {device_id}: {e}")
            self.report_error(str(e))
            raise InternalError(f"Storage delete failed: {device_id}") from e

    def list_device_ids(self) -> List[str]:
        return sorted(path.stem for path in self.devices_dir.glob("*.json"))

    def get_status(self) -> Dict[str, Any]:
        status = super().get_status()
        status["data_dir"] = str(self.data_dir)
        return status

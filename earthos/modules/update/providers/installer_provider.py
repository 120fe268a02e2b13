"""
Installer Provider - применение проверенного пакета к устройству

Менеджер сессий вызывает install() только после успешной проверки SHA256.
"""

import asyncio
import logging
import os
import shutil
from abc import abstractmethod
from pathlib import Path
from typing import Dict, Any, Optional, List, Tuple

from ....errors import InternalError
from ....integrations.core.universal_provider_interface import UniversalProviderInterface
from ..core.types import UpdatePackage

logger = logging.getLogger(__name__)


class InstallerProvider(UniversalProviderInterface):
    """Базовый установщик"""

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None):
        super().__init__(name=name, config=config or {})

    async def initialize(self) -> bool:
        self.is_initialized = True
        return True

    @abstractmethod
    async def install(self, device_id: str, package: UpdatePackage, payload: bytes) -> None:
        """
        Замена активного образа ОС устройства

        Raises:
            InternalError: Установка не удалась, активный образ не изменен
        """


class NoopInstallerProvider(InstallerProvider):
    """Установщик без побочных эффектов, только журнал установок"""

    def __init__(self, config: Optional[Dict[str, Any]] = None):
        super().__init__(name="noop_installer", config=config)
        self.installed: List[Tuple[str, str]] = []

    async def install(self, device_id: str, package: UpdatePackage, payload: bytes) -> None:
        self.installed.append((device_id, package.version))
        self.report_success()
        logger.debug(f"Пакет {package.version} применен для {device_id[:12]}... (noop)")


class StagingInstallerProvider(InstallerProvider):
    """
    Установщик в каталог образов

    Структура:
        <staging_dir>/<deviceId>/<version>.img    - образ версии
        <staging_dir>/<deviceId>/current.img      - активный образ
    """

    def __init__(self, config: Dict[str, Any]):
        super().__init__(name="staging_installer", config=config)
        self.staging_dir = Path(config['staging_dir'])

    async def initialize(self) -> bool:
        try:
            self.staging_dir.mkdir(parents=True, exist_ok=True)
            self.is_initialized = True
            logger.info(f"✅ StagingInstallerProvider инициализирован: {self.staging_dir}")
            return True
        except OSError as e:
            logger.error(f"❌ Ошибка инициализации StagingInstallerProvider: {e}")
            return False

    def device_dir(self, device_id: str) -> Path:
        return self.staging_dir / device_id

    def active_image(self, device_id: str) -> Path:
        return self.device_dir(device_id) / "current.img"

    async def install(self, device_id: str, package: UpdatePackage, payload: bytes) -> None:
        try:
            await asyncio.to_thread(self._replace_image, device_id, package.version, payload)
            self.report_success()
        except OSError as e:
            logger.error(f"❌ Ошибка установки {package.version} на {device_id[:12]}...: {e}")
            self.report_error(str(e))
            raise InternalError(f"Install failed: {e}", {"version": package.version}) from e

    def _replace_image(self, device_id: str, version: str, payload: bytes):
        """Атомарная замена активного образа с возможностью отката"""
        device_dir = self.device_dir(device_id)
        device_dir.mkdir(parents=True, exist_ok=True)

        image_path = device_dir / f"{version}.img"
        tmp_path = device_dir / f"{version}.img.tmp"
        with open(tmp_path, "wb") as f:
            f.write(payload)
            f.flush()
            os.fsync(f.fileno())
        os.replace(tmp_path, image_path)

        current = self.active_image(device_id)
        backup = device_dir / "current.img.backup"
        staged = device_dir / "current.img.new"

        try:
            shutil.copyfile(image_path, staged)
            if current.exists():
                shutil.copyfile(current, backup)
            os.replace(staged, current)
            logger.info(f"✅ Активный образ {device_id[:12]}... заменен на {version}")
        except OSError:
            if staged.exists():
                staged.unlink()
            if backup.exists():
                os.replace(backup, current)
                logger.info("Выполнен откат к предыдущему образу")
            raise
        else:
            if backup.exists():
                backup.unlink()

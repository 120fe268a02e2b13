"""
Catalog Provider - источник опубликованных пакетов обновлений

Ядро использует только контракт чтения: list_packages() возвращает
пакеты, упорядоченные по приоритету semver (от старых к новым).
"""

import json
import logging
from abc import abstractmethod
from pathlib import Path
from typing import Dict, Any, List, Optional, Iterable

from ....errors import ValidationError, NotFoundError
from ....integrations.core.universal_provider_interface import UniversalProviderInterface
from ....utils.validators import is_valid_version, is_valid_checksum
from ..core.types import UpdatePackage, PackageKind
from .version_provider import VersionProvider

logger = logging.getLogger(__name__)


def package_from_dict(data: Dict[str, Any]) -> UpdatePackage:
    """
    Создание UpdatePackage из словаря манифеста

    Принимает плоский формат и вложенный формат с блоком "artifact".

    Raises:
        ValidationError: Некорректная версия, checksum, размер или тип пакета
    """
    if not isinstance(data, dict):
        raise ValidationError("Package manifest must be a mapping")

    artifact = data.get("artifact") or {}
    version = data.get("version")
    checksum = data.get("checksum") or artifact.get("sha256") or ""
    checksum = checksum.lower() if isinstance(checksum, str) else checksum
    download_url = data.get("download_url") or artifact.get("url") or ""
    size = data.get("size", artifact.get("size", 0))
    kind = data.get("kind") or data.get("type") or artifact.get("type") or PackageKind.FULL.value

    if not is_valid_version(version):
        raise ValidationError("Invalid package version", {"version": version})
    if not is_valid_checksum(checksum):
        raise ValidationError("Invalid package checksum", {"version": version})
    if not isinstance(download_url, str) or not download_url:
        raise ValidationError("Missing package download URL", {"version": version})
    if type(size) is not int or size < 0:
        raise ValidationError("Invalid package size", {"version": version})
    try:
        package_kind = PackageKind(kind)
    except ValueError:
        raise ValidationError("Invalid package kind", {"version": version, "kind": kind}) from None

    return UpdatePackage(
        version=version,
        release_date=str(data.get("release_date", "")),
        changelog=str(data.get("changelog", "")),
        download_url=download_url,
        checksum=checksum,
        size=size,
        kind=package_kind
    )


class CatalogProvider(UniversalProviderInterface):
    """Базовый каталог пакетов"""

    def __init__(self, name: str, config: Optional[Dict[str, Any]] = None,
                 version_provider: Optional[VersionProvider] = None):
        super().__init__(name=name, config=config or {})
        self.version_provider = version_provider or VersionProvider()

    async def initialize(self) -> bool:
        self.is_initialized = True
        return True

    @abstractmethod
    async def list_packages(self) -> List[UpdatePackage]:
        """Все пакеты по возрастанию версии"""

    async def get_package(self, version: str) -> UpdatePackage:
        """
        Пакет конкретной версии

        Raises:
            NotFoundError: Пакета с такой версией нет
        """
        for package in await self.list_packages():
            if self.version_provider.compare_versions(package.version, version) == 0:
                return package
        raise NotFoundError("Update package not found", {"version": version})

    def _sorted(self, packages: Iterable[UpdatePackage]) -> List[UpdatePackage]:
        return sorted(packages, key=lambda p: self.version_provider.sort_key(p.version))


class StaticCatalogProvider(CatalogProvider):
    """Каталог из заранее известного списка пакетов"""

    def __init__(self, packages: Optional[Iterable[UpdatePackage]] = None,
                 version_provider: Optional[VersionProvider] = None):
        super().__init__(name="static_catalog", version_provider=version_provider)
        self._packages: List[UpdatePackage] = self._sorted(packages or [])

    def publish(self, package: UpdatePackage):
        """
        Публикация нового пакета

        Raises:
            ValidationError: Пакет с такой версией уже опубликован
        """
        if any(self.version_provider.compare_versions(p.version, package.version) == 0
               for p in self._packages):
            raise ValidationError("Package version already published", {"version": package.version})
        self._packages = self._sorted([*self._packages, package])
        logger.info(f"📦 Опубликован пакет {package.version} ({package.kind.value})")

    async def list_packages(self) -> List[UpdatePackage]:
        self.report_success()
        return list(self._packages)


class ManifestCatalogProvider(CatalogProvider):
    """Каталог из файлов manifest_*.json в каталоге"""

    def __init__(self, config: Dict[str, Any], version_provider: Optional[VersionProvider] = None):
        super().__init__(name="manifest_catalog", config=config, version_provider=version_provider)
        self.manifests_dir = Path(config['catalog_dir'])

    async def initialize(self) -> bool:
        """Инициализация провайдера"""
        try:
            logger.info("🔧 Инициализация ManifestCatalogProvider...")
            self.manifests_dir.mkdir(parents=True, exist_ok=True)
            self.is_initialized = True
            return True
        except OSError as e:
            logger.error(f"❌ Ошибка инициализации ManifestCatalogProvider: {e}")
            self.report_error(str(e))
            return False

    def load_manifest(self, file_path: Path) -> Optional[UpdatePackage]:
        """
        Загрузка одного манифеста

        Returns:
            UpdatePackage или None если манифест поврежден
        """
        try:
            with open(file_path, 'r', encoding='utf-8') as f:
                return package_from_dict(json.load(f))
        except (OSError, ValueError, ValidationError) as e:
            logger.warning(f"⚠️ Манифест пропущен {file_path.name}: {e}")
            self.report_error(str(e))
            return None

    async def list_packages(self) -> List[UpdatePackage]:
        packages: Dict[str, UpdatePackage] = {}
        for file_path in sorted(self.manifests_dir.glob("manifest_*.json")):
            package = self.load_manifest(file_path)
            if package is None:
                continue
            if package.version in packages:
                logger.warning(f"⚠️ Дублирующийся манифест версии {package.version}: {file_path.name}")
                continue
            packages[package.version] = package

        self.report_success()
        return self._sorted(packages.values())

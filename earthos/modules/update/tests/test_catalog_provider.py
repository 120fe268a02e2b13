"""
Тесты для провайдеров каталога пакетов
"""

import hashlib
import json

import pytest

from earthos.errors import ValidationError, NotFoundError
from earthos.modules.update import (
    StaticCatalogProvider, ManifestCatalogProvider, UpdatePackage, PackageKind, package_from_dict
)


def make_package(version: str, data: bytes = b"image") -> UpdatePackage:
    return UpdatePackage(
        version=version,
        release_date="2026-01-01",
        changelog=f"EarthOS {version}",
        download_url=f"memory://earthos-{version}.img",
        checksum=hashlib.sha256(data).hexdigest(),
        size=len(data)
    )


def write_manifest(directory, name: str, payload) -> None:
    (directory / name).write_text(json.dumps(payload), encoding="utf-8")


class TestPackageFromDict:
    """Тесты разбора манифеста"""

    def test_flat_format(self):
        """Тест плоского формата"""
        package = package_from_dict({
            "version": "1.0.1",
            "release_date": "2026-01-01",
            "changelog": "fixes",
            "download_url": "https://example.com/1.0.1.img",
            "checksum": "A" * 64,
            "size": 10
        })

        assert package.version == "1.0.1"
        assert package.checksum == "a" * 64
        assert package.kind is PackageKind.FULL

    def test_artifact_format(self):
        """Тест формата с блоком artifact"""
        package = package_from_dict({
            "version": "1.1.0",
            "artifact": {
                "type": "delta",
                "url": "https://example.com/1.1.0.delta",
                "size": 20,
                "sha256": "b" * 64
            }
        })

        assert package.kind is PackageKind.DELTA
        assert package.download_url == "https://example.com/1.1.0.delta"
        assert package.size == 20

    @pytest.mark.parametrize("override", [
        {"version": "1.0"},
        {"checksum": "xyz"},
        {"download_url": ""},
        {"size": -1},
        {"size": "10"},
        {"kind": "patch"},
    ])
    def test_invalid_manifest(self, override):
        """Тест некорректного манифеста"""
        data = {
            "version": "1.0.1",
            "download_url": "https://example.com/1.0.1.img",
            "checksum": "a" * 64,
            "size": 10
        }
        data.update(override)

        with pytest.raises(ValidationError):
            package_from_dict(data)


class TestStaticCatalogProvider:
    """Тесты статического каталога"""

    @pytest.mark.asyncio
    async def test_packages_sorted(self):
        """Тест сортировки пакетов по версии"""
        catalog = StaticCatalogProvider([make_package("1.1.0"), make_package("1.0.1"), make_package("1.0.1-rc1")])

        versions = [p.version for p in await catalog.list_packages()]

        assert versions == ["1.0.1-rc1", "1.0.1", "1.1.0"]

    @pytest.mark.asyncio
    async def test_get_package(self):
        """Тест поиска пакета по версии"""
        catalog = StaticCatalogProvider([make_package("1.0.1")])

        assert (await catalog.get_package("1.0.1")).version == "1.0.1"
        with pytest.raises(NotFoundError):
            await catalog.get_package("9.9.9")

    @pytest.mark.asyncio
    async def test_publish(self):
        """Тест публикации пакета"""
        catalog = StaticCatalogProvider()

        catalog.publish(make_package("2.0.0"))

        assert [p.version for p in await catalog.list_packages()] == ["2.0.0"]
        with pytest.raises(ValidationError):
            catalog.publish(make_package("2.0.0"))


class TestManifestCatalogProvider:
    """Тесты каталога из файлов манифестов"""

    @pytest.mark.asyncio
    async def test_loads_manifests(self, tmp_path):
        """Тест загрузки манифестов из каталога"""
        write_manifest(tmp_path, "manifest_1.0.1.json", make_package("1.0.1").to_dict())
        write_manifest(tmp_path, "manifest_1.0.2.json", make_package("1.0.2").to_dict())
        write_manifest(tmp_path, "other.json", make_package("3.0.0").to_dict())
        catalog = ManifestCatalogProvider({"catalog_dir": str(tmp_path)})
        await catalog.initialize()

        versions = [p.version for p in await catalog.list_packages()]

        assert versions == ["1.0.1", "1.0.2"]

    @pytest.mark.asyncio
    async def test_skips_broken_manifests(self, tmp_path):
        """Тест пропуска поврежденных манифестов"""
        write_manifest(tmp_path, "manifest_1.0.1.json", make_package("1.0.1").to_dict())
        (tmp_path / "manifest_broken.json").write_text("{not json", encoding="utf-8")
        write_manifest(tmp_path, "manifest_bad.json", {"version": "oops"})
        catalog = ManifestCatalogProvider({"catalog_dir": str(tmp_path)})
        await catalog.initialize()

        versions = [p.version for p in await catalog.list_packages()]

        assert versions == ["1.0.1"]
        assert catalog.metrics.failed >= 2

    @pytest.mark.asyncio
    async def test_duplicate_versions(self, tmp_path):
        """Тест: дублирующаяся версия берется из первого файла"""
        first = make_package("1.0.1", b"first")
        second = make_package("1.0.1", b"second")
        write_manifest(tmp_path, "manifest_a.json", first.to_dict())
        write_manifest(tmp_path, "manifest_b.json", second.to_dict())
        catalog = ManifestCatalogProvider({"catalog_dir": str(tmp_path)})
        await catalog.initialize()

        packages = await catalog.list_packages()

        assert len(packages) == 1
        assert packages[0].checksum == first.checksum

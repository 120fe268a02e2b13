"""
Тесты для VersionProvider
"""

import pytest

from earthos.errors import InvalidVersion, ValidationError
from earthos.modules.update import VersionProvider


class TestVersionProvider:
    """Тесты разбора и сравнения версий"""

    def test_parse_version(self):
        """Тест разбора версии"""
        provider = VersionProvider()

        assert provider.parse_version("1.2.3") == (1, 2, 3, None)
        assert provider.parse_version("2.0.0-beta1+build7") == (2, 0, 0, "beta1")

    @pytest.mark.parametrize("version", ["1.2", "v1.2.3", "1.2.3.4", "1.2.3-", "1.2.3\n", "", None, 123])
    def test_parse_invalid(self, version):
        """Тест некорректных версий"""
        provider = VersionProvider()

        with pytest.raises(InvalidVersion):
            provider.parse_version(version)

    def test_invalid_version_is_validation_error(self):
        """Тест иерархии ошибок"""
        with pytest.raises(ValidationError):
            VersionProvider().parse_version("bad")

    @pytest.mark.parametrize("older,newer", [
        ("1.0.0", "1.0.1"),
        ("1.0.9", "1.1.0"),
        ("1.9.9", "2.0.0"),
        ("1.0.0", "1.0.10"),
        ("1.0.0-alpha", "1.0.0"),
        ("1.0.0-1", "1.0.0-alpha"),
        ("1.0.0-2", "1.0.0-10"),
        ("1.0.0-alpha", "1.0.0-beta"),
    ])
    def test_ordering(self, older, newer):
        """Тест порядка версий по semver"""
        provider = VersionProvider()

        assert provider.compare_versions(older, newer) == -1
        assert provider.compare_versions(newer, older) == 1
        assert provider.is_newer_version(older, newer) is True
        assert provider.is_newer_version(newer, older) is False

    def test_build_metadata_ignored(self):
        """Тест: метаданные сборки не влияют на порядок"""
        provider = VersionProvider()

        assert provider.compare_versions("1.0.0+a", "1.0.0+b") == 0
        assert provider.is_newer_version("1.0.0", "1.0.0+build5") is False

    def test_version_to_build(self):
        """Тест преобразования версии в номер сборки"""
        provider = VersionProvider()

        assert provider.version_to_build("1.0.0") == 10000
        assert provider.version_to_build("1.0.1") == 10001
        assert provider.version_to_build("2.3.4") == 20304

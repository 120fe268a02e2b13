"""
Version Provider - разбор и сравнение версий (semver)
"""

import logging
from typing import Tuple, Optional

from ....errors import InvalidVersion
from ....utils.validators import VERSION_PATTERN

logger = logging.getLogger(__name__)

VersionKey = Tuple[int, int, int, int, Tuple[int, int, str]]


class VersionProvider:
    """Провайдер для работы с версиями ОС"""

    def parse_version(self, version_string: str) -> Tuple[int, int, int, Optional[str]]:
        """
        Парсинг версии из строки

        Args:
            version_string: Строка версии (например, "1.2.3" или "1.2.3-beta1+build7")

        Returns:
            Tuple: (major, minor, patch, prerelease)

        Raises:
            InvalidVersion: Если версия неверного формата
        """
        match = VERSION_PATTERN.fullmatch(version_string) if isinstance(version_string, str) else None
        if not match:
            raise InvalidVersion(f"Invalid version format: {version_string}", {"version": version_string})

        major, minor, patch, prerelease, _build = match.groups()
        return int(major), int(minor), int(patch), prerelease

    def sort_key(self, version: str) -> VersionKey:
        """
        Ключ сортировки по правилам приоритета semver

        Метаданные сборки (+...) не влияют на порядок. Версия с prerelease
        младше той же версии без него; числовой prerelease младше буквенного.
        """
        major, minor, patch, prerelease = self.parse_version(version)
        if prerelease is None:
            return major, minor, patch, 1, (0, 0, "")
        if prerelease.isdigit():
            return major, minor, patch, 0, (0, int(prerelease), "")
        return major, minor, patch, 0, (1, 0, prerelease)

    def compare_versions(self, version1: str, version2: str) -> int:
        """
        Сравнение версий

        Returns:
            int: -1 если version1 < version2, 0 если равны, 1 если version1 > version2
        """
        key1 = self.sort_key(version1)
        key2 = self.sort_key(version2)

        if key1 < key2:
            return -1
        if key1 > key2:
            return 1
        return 0

    def is_newer_version(self, current_version: str, new_version: str) -> bool:
        """True если new_version строго новее current_version"""
        return self.compare_versions(new_version, current_version) > 0

    def version_to_build(self, version: str) -> int:
        """
        Преобразование версии в номер сборки

        Формула: major * 10000 + minor * 100 + patch
        """
        major, minor, patch, _ = self.parse_version(version)
        return major * 10000 + minor * 100 + patch

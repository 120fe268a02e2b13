"""
Integrity Checker - контрольные суммы SHA256 для пакетов обновлений
"""

import hashlib
import logging
import re
from typing import Any

logger = logging.getLogger(__name__)

_HEX64 = re.compile(r'[0-9a-fA-F]{64}')
FILE_CHUNK_SIZE = 4096


class IntegrityChecker:
    """Вычисление и проверка SHA256"""

    def checksum(self, data: bytes) -> str:
        """
        SHA256 от всего содержимого

        Args:
            data: Байты payload

        Returns:
            str: SHA256 в шестнадцатеричном формате, нижний регистр
        """
        return hashlib.sha256(data).hexdigest()

    def file_checksum(self, file_path: str) -> str:
        """
        SHA256 файла, читается по частям

        Raises:
            OSError: Если файл не найден
        """
        sha256_hash = hashlib.sha256()
        with open(file_path, "rb") as f:
            for chunk in iter(lambda: f.read(FILE_CHUNK_SIZE), b""):
                sha256_hash.update(chunk)
        return sha256_hash.hexdigest()

    def verify(self, data: bytes, expected: Any) -> bool:
        """
        Проверка содержимого по ожидаемому SHA256

        Ожидаемое значение сравнивается без учета регистра. Некорректное
        значение (не строка, не 64 символа, не hex) - это провал проверки,
        а не исключение.

        Args:
            data: Байты payload
            expected: Ожидаемый SHA256

        Returns:
            bool: True если хеш совпадает
        """
        if not isinstance(expected, str) or not _HEX64.fullmatch(expected):
            logger.warning("⚠️ Некорректный формат ожидаемой контрольной суммы")
            return False

        actual = self.checksum(data)
        if actual == expected.lower():
            logger.debug("✅ SHA256 хеш совпадает")
            return True

        logger.error(
            f"❌ SHA256 хеш не совпадает: ожидался {expected.lower()[:16]}..., "
            f"получен {actual[:16]}..."
        )
        return False

"""
Тесты для IntegrityChecker
"""

import hashlib

import pytest

from earthos.modules.integrity import IntegrityChecker


class TestIntegrityChecker:
    """Тесты проверки SHA256"""

    def test_checksum_known_value(self):
        """Тест SHA256 пустых данных"""
        checker = IntegrityChecker()

        assert checker.checksum(b"") == (
            "e3b0c44298fc1c149afbf4c8996fb92427ae41e4649b934ca495991b7852b855"
        )

    def test_verify_matching(self):
        """Тест совпадающей контрольной суммы"""
        checker = IntegrityChecker()
        data = b"earthos image 1.0.1"

        assert checker.verify(data, hashlib.sha256(data).hexdigest()) is True

    def test_verify_case_insensitive(self):
        """Тест сравнения без учета регистра"""
        checker = IntegrityChecker()
        data = b"payload"

        assert checker.verify(data, hashlib.sha256(data).hexdigest().upper()) is True

    def test_verify_single_bit_flip(self):
        """Тест изменения одного бита данных"""
        checker = IntegrityChecker()
        data = bytearray(b"payload bytes")
        expected = hashlib.sha256(bytes(data)).hexdigest()

        data[0] ^= 0x01

        assert checker.verify(bytes(data), expected) is False

    @pytest.mark.parametrize("expected", [
        None,
        "",
        "abc",
        "g" * 64,
        "a" * 63,
        "a" * 65,
        "a" * 64 + "\n",
        12345,
    ])
    def test_verify_malformed_expected(self, expected):
        """Тест некорректного ожидаемого значения - это провал, а не исключение"""
        checker = IntegrityChecker()

        assert checker.verify(b"data", expected) is False

    def test_file_checksum(self, tmp_path):
        """Тест SHA256 файла, читаемого по частям"""
        checker = IntegrityChecker()
        data = b"x" * 10000
        file_path = tmp_path / "image.img"
        file_path.write_bytes(data)

        assert checker.file_checksum(str(file_path)) == hashlib.sha256(data).hexdigest()

    def test_file_checksum_missing(self, tmp_path):
        """Тест отсутствующего файла"""
        checker = IntegrityChecker()

        with pytest.raises(OSError):
            checker.file_checksum(str(tmp_path / "missing.img"))

"""
Тесты для IdentityGenerator
"""

import uuid

from earthos.modules.identity import IdentityGenerator
from earthos.utils.validators import is_valid_device_id


class TestIdentityGenerator:
    """Тесты генератора идентификаторов"""

    def test_device_id_format(self):
        """Тест формата ID устройства"""
        generator = IdentityGenerator()

        device_id = generator.new_device_id()

        assert device_id.startswith("earth-")
        assert len(device_id) == 22
        assert is_valid_device_id(device_id)

    def test_device_ids_unique(self):
        """Тест уникальности ID устройств"""
        generator = IdentityGenerator()

        ids = {generator.new_device_id() for _ in range(1000)}

        assert len(ids) == 1000

    def test_session_id_is_uuid4(self):
        """Тест формата ID сессии"""
        generator = IdentityGenerator()

        session_id = generator.new_session_id()

        assert uuid.UUID(session_id).version == 4
        assert session_id != generator.new_session_id()

    def test_installation_id_is_uuid4(self):
        """Тест формата ID установки"""
        generator = IdentityGenerator()

        assert uuid.UUID(generator.new_installation_id()).version == 4

    def test_token_length(self):
        """Тест длины токена"""
        generator = IdentityGenerator()

        assert len(generator.new_token()) > 0
        assert generator.new_token() != generator.new_token()

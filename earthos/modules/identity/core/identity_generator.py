"""
Identity Generator - генерация идентификаторов устройств, сессий и установок
"""

import secrets
import uuid

DEVICE_ID_PREFIX = "earth-"
DEVICE_ID_RANDOM_BYTES = 8


class IdentityGenerator:
    """
    Генератор идентификаторов

    Состояния не хранит. Все значения берутся из криптографически стойкого
    источника (secrets / uuid4), а не из счетчика.
    """

    def new_device_id(self) -> str:
        """
        Новый ID устройства

        Returns:
            str: "earth-" + 16 шестнадцатеричных символов в нижнем регистре
        """
        return f"{DEVICE_ID_PREFIX}{secrets.token_hex(DEVICE_ID_RANDOM_BYTES)}"

    def new_session_id(self) -> str:
        """Новый ID сессии обновления (UUIDv4)"""
        return str(uuid.uuid4())

    def new_installation_id(self) -> str:
        """Новый ID установки приложения (UUIDv4)"""
        return str(uuid.uuid4())

    def new_token(self, length: int = 32) -> str:
        """
        Случайный токен

        Args:
            length: Количество случайных байт (в строке будет length * 2 символов)
        """
        return secrets.token_hex(length)

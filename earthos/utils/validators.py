"""
Общие валидаторы EarthOS
"""

import re
from typing import Any

DEVICE_ID_PATTERN = re.compile(r'earth-[a-zA-Z0-9]{16}')
APP_ID_PATTERN = re.compile(r'[a-z0-9-]+')
VERSION_PATTERN = re.compile(
    r'(\d+)\.(\d+)\.(\d+)(?:-([a-zA-Z0-9]+))?(?:\+([a-zA-Z0-9]+))?'
)
CHECKSUM_PATTERN = re.compile(r'[a-f0-9]{64}')

VALID_THEMES = ('dark', 'neon', 'light')

# Приложения, которые нельзя удалить ни при каких условиях
PROTECTED_APPS = frozenset({'camera', 'appstore', 'browser', 'aichat', 'settings', 'files'})


def is_valid_device_id(device_id: Any) -> bool:
    """Проверка формата ID устройства (earth-XXXXXXXXXXXXXXXX)"""
    return isinstance(device_id, str) and bool(DEVICE_ID_PATTERN.fullmatch(device_id))


def is_valid_app_id(app_id: Any) -> bool:
    """Проверка формата ID приложения"""
    return (
        isinstance(app_id, str)
        and 2 < len(app_id) <= 64
        and bool(APP_ID_PATTERN.fullmatch(app_id))
    )


def is_valid_version(version: Any) -> bool:
    """Проверка строки версии (semver)"""
    return isinstance(version, str) and bool(VERSION_PATTERN.fullmatch(version))


def is_valid_checksum(checksum: Any) -> bool:
    """Проверка SHA256 в шестнадцатеричном формате (64 символа, нижний регистр)"""
    return isinstance(checksum, str) and bool(CHECKSUM_PATTERN.fullmatch(checksum))


def is_valid_theme(theme: Any) -> bool:
    return isinstance(theme, str) and theme in VALID_THEMES


def is_protected_app(app_id: Any) -> bool:
    """
    Проверка принадлежности приложения к защищенному списку

    Вычисляется только по фиксированному списку, сохраненный флаг
    `protected` в расчет не берется.
    """
    return isinstance(app_id, str) and app_id in PROTECTED_APPS

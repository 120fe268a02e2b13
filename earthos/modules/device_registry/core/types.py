"""
Типы данных реестра устройств
"""

from dataclasses import dataclass, asdict
from datetime import datetime, timezone
from typing import Dict, Any, List

DEFAULT_THEME = "dark"
DEFAULT_OS_VERSION = "1.0.0"

# Предустановленные защищенные приложения: (id, имя, иконка, размер)
PROTECTED_APP_DEFAULTS = (
    ("camera", "Camera", "camera.png", 5242880),
    ("appstore", "App Store", "appstore.png", 10485760),
    ("browser", "Browser", "browser.png", 8388608),
    ("aichat", "AI Chat", "aichat.png", 12582912),
    ("settings", "Settings", "settings.png", 4194304),
    ("files", "Files", "files.png", 3145728),
)


def utc_now() -> str:
    """Текущее время в ISO формате (UTC)"""
    return datetime.now(timezone.utc).isoformat()


@dataclass
class Device:
    """Зарегистрированное устройство"""
    device_id: str
    name: str
    theme: str = DEFAULT_THEME
    os_version: str = DEFAULT_OS_VERSION
    build_number: int = 10000
    auto_sync: bool = True
    auto_update: bool = True
    crash_reports: bool = True
    created_at: str = ""

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'Device':
        return cls(
            device_id=data["device_id"],
            name=data["name"],
            theme=data.get("theme", DEFAULT_THEME),
            os_version=data.get("os_version", DEFAULT_OS_VERSION),
            build_number=int(data.get("build_number", 10000)),
            auto_sync=bool(data.get("auto_sync", True)),
            auto_update=bool(data.get("auto_update", True)),
            crash_reports=bool(data.get("crash_reports", True)),
            created_at=data.get("created_at", "")
        )


@dataclass
class InstalledApp:
    """Приложение, установленное на устройстве"""
    app_id: str
    name: str
    version: str
    icon: str = "default.png"
    protected: bool = False
    installed_at: str = ""
    size: int = 0

    def to_dict(self) -> Dict[str, Any]:
        return asdict(self)

    @classmethod
    def from_dict(cls, data: Dict[str, Any]) -> 'InstalledApp':
        return cls(
            app_id=data["app_id"],
            name=data["name"],
            version=data["version"],
            icon=data.get("icon", "default.png"),
            protected=bool(data.get("protected", False)),
            installed_at=data.get("installed_at", ""),
            size=int(data.get("size", 0))
        )


def build_protected_apps() -> List[InstalledApp]:
    """Набор защищенных приложений для нового устройства"""
    installed_at = utc_now()
    return [
        InstalledApp(
            app_id=app_id,
            name=name,
            version=DEFAULT_OS_VERSION,
            icon=icon,
            protected=True,
            installed_at=installed_at,
            size=size
        )
        for app_id, name, icon, size in PROTECTED_APP_DEFAULTS
    ]

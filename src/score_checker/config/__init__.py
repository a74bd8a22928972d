from .settings import (
    ServiceInstance,
    Settings,
    SettingsError,
    SettingsLoadResult,
    load_settings,
    parse_interval,
)

__all__ = [
    "ServiceInstance",
    "Settings",
    "SettingsError",
    "SettingsLoadResult",
    "load_settings",
    "parse_interval",
]

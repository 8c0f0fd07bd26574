# Settings package
from core.settings.app import AppSettings, get_app_settings
from core.settings.sections import LoggingSettings, MonitorSettings, RundeckSettings

__all__ = [
    "get_app_settings",
    "AppSettings",
    "LoggingSettings",
    "MonitorSettings",
    "RundeckSettings",
]

# core/settings/app.py
from functools import lru_cache

# Sections
from core.settings.sections.logs import LoggingSettings
from core.settings.sections.monitor import MonitorSettings
from core.settings.sections.rundeck import RundeckSettings


class AppSettings:
    """
    Connection, monitoring and logging settings in one object.
    Sections read the environment when AppSettings is built,
    never at import time.
    """

    def __init__(self):
        self.rundeck = RundeckSettings()
        self.monitor = MonitorSettings()
        self.logging = LoggingSettings()


@lru_cache()
def get_app_settings() -> AppSettings:
    """Return cached global settings for the entire app."""
    return AppSettings()

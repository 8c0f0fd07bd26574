# core/settings/base.py
from pydantic_settings import BaseSettings, SettingsConfigDict


class RundeckBaseSettings(BaseSettings):
    """
    Shared settings behaviour: read from the environment and .env,
    ignore unrelated variables, never change once loaded.
    """

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        frozen=True,
        populate_by_name=True,
    )

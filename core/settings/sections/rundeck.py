from typing import Optional

from pydantic import Field, field_validator

from core.settings.base import RundeckBaseSettings


class RundeckSettings(RundeckBaseSettings):
    """
    Settings for the RunDeck REST API connection.
    Loaded from .env with exact variable name matching.

    An auth token takes precedence over username/password.
    """

    url: str = Field(default="http://localhost:4440", alias="RUNDECK_URL")
    auth_token: Optional[str] = Field(default=None, alias="RUNDECK_AUTH_TOKEN")
    username: Optional[str] = Field(default=None, alias="RUNDECK_USERNAME")
    password: Optional[str] = Field(default=None, alias="RUNDECK_PASSWORD")
    api_version: int = Field(default=11, ge=1, alias="RUNDECK_API_VERSION")
    request_timeout: float = Field(default=30.0, gt=0, alias="RUNDECK_REQUEST_TIMEOUT")

    @field_validator("url")
    @classmethod
    def strip_trailing_slash(cls, v: str) -> str:
        return v.rstrip("/")

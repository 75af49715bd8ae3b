"""
Runtime settings.

Values come from keyword arguments or from the environment:
  HTML_ENTRY_LOG_LEVEL      logging level name (default: INFO)
  HTML_ENTRY_PARSER         BeautifulSoup parser; unset walks the
                            html5lib → lxml → html.parser chain
  HTML_ENTRY_ROOT_SELECTOR  implicit block of a whole document (default: body)

The CLI loads a .env file (python-dotenv) before reading them.
"""

from typing import Optional

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    """
    Engine settings that are not part of the instructions.

    Precedence (highest first): keyword arguments, HTML_ENTRY_* environment
    variables, class defaults.
    """

    model_config = SettingsConfigDict(env_prefix="HTML_ENTRY_", extra="ignore")

    log_level: str = "INFO"
    parser: Optional[str] = None
    root_selector: str = "body"

    @field_validator("log_level")
    @classmethod
    def _upper(cls, value: str) -> str:
        return value.upper()

    @field_validator("parser", mode="before")
    @classmethod
    def _empty_is_none(cls, value):
        return value or None

"""Configuration management for the Gemini client."""

from pathlib import Path

from dotenv import load_dotenv
from pydantic import Field
from pydantic_settings import BaseSettings, SettingsConfigDict


def _load_env_files() -> None:
    """Load .env.default and .env, the working directory winning over the checkout."""
    checkout = Path(__file__).resolve().parent.parent
    for directory in (Path.cwd(), checkout):
        defaults = directory / ".env.default"
        if defaults.is_file():
            load_dotenv(defaults)
        overrides = directory / ".env"
        if overrides.is_file():
            load_dotenv(overrides)
            return


_load_env_files()


class Config(BaseSettings):
    """Client configuration from environment variables."""

    model_config = SettingsConfigDict(
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        env_ignore_case=True,
    )

    # Exchange
    gemini_api_key: str = Field(default="")
    gemini_api_secret: str = Field(default="")
    gemini_base_url: str = Field(
        default="https://api.sandbox.gemini.com",
    )
    gemini_timeout: float = Field(default=10.0, gt=0)

    # Market data
    default_pair: str = Field(default="btcusd")

    def validate(self, require_credentials: bool = True) -> list[str]:
        """Validate configuration and return list of error messages."""
        errors = []
        if require_credentials:
            if not self.gemini_api_key:
                errors.append("GEMINI_API_KEY is required for private endpoints")
            if not self.gemini_api_secret:
                errors.append("GEMINI_API_SECRET is required for private endpoints")
        return errors

"""Configuration management for the application."""

from pathlib import Path
from typing import Any, Literal, Optional

from dotenv import load_dotenv
from pydantic import Field, field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

# Load environment variables from .env file
load_dotenv()

LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


class Settings(BaseSettings):
    """Application settings, read from TAROT_* environment variables."""

    app_name: str = "Tarot Divination"
    debug: bool = Field(default=False)
    log_level: LogLevel = Field(default="INFO")

    # Deck and resources
    resource_dir: Path = Field(default=Path("resource"))
    deck_file: Optional[Path] = Field(default=None)

    # Reading behaviour
    chain_reply: bool = Field(default=False)
    seed: Optional[int] = Field(default=None)

    # Where the CLI saves card images
    output_dir: Path = Field(default=Path("output"))

    model_config = SettingsConfigDict(
        env_prefix="TAROT_",
        env_file=".env",
        env_file_encoding="utf-8",
        case_sensitive=False,
        extra="ignore",
    )

    @field_validator("log_level", mode="before")
    @classmethod
    def _upper_log_level(cls, value: Any) -> Any:
        return value.strip().upper() if isinstance(value, str) else value

    def ensure_output_dir(self) -> Path:
        self.output_dir.mkdir(parents=True, exist_ok=True)
        return self.output_dir


# Global settings instance
settings = Settings()

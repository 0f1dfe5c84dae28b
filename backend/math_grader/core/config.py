"""
Core configuration module for the math submission grader.
Loads configuration from YAML file and environment variables.
"""

import os
from enum import Enum
from pathlib import Path
from typing import List, Optional

import yaml
from pydantic import BaseModel, Field, model_validator
from pydantic_settings import BaseSettings, SettingsConfigDict


DEFAULT_PLACEHOLDER_URL_PATTERNS = [
    "example.com",
    "placeholder",
    "mock",
    "test.com/test",
]


class ModelKind(str, Enum):
    """Capability class of the configured chat model."""

    STANDARD = "standard"
    # Text-only input, no temperature parameter
    REASONING = "reasoning"


def resolve_model_kind(model: str, reasoning_prefixes: List[str]) -> ModelKind:
    """Classify a model identifier by its name prefix."""
    name = (model or "").strip().lower()
    for prefix in reasoning_prefixes:
        if prefix and name.startswith(prefix.lower()):
            return ModelKind.REASONING
    return ModelKind.STANDARD


class ServerConfig(BaseModel):
    """Server configuration."""

    host: str = "0.0.0.0"
    port: int = 8000
    debug: bool = False
    cors_origins: List[str] = ["*"]


class LoggingConfig(BaseModel):
    """Logging configuration."""

    name: str = "math_grader"
    file: str = "app.log"
    level: str = os.getenv("LOG_LEVEL", "INFO")
    format: str = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"
    max_size: int = 10  # MB
    backup_count: int = 5
    console: bool = True
    # Level for the httpx/httpcore loggers, which log every request at INFO
    http_client_level: str = "WARNING"


class AISettings(BaseSettings):
    """
    AI provider settings.

    Read from OPENAI_* environment variables (and a .env file); values from
    the YAML ``ai`` section are used where no environment variable is set.
    """

    model_config = SettingsConfigDict(
        env_prefix="OPENAI_",
        env_file=".env",
        env_file_encoding="utf-8",
        extra="ignore",
        protected_namespaces=(),
    )

    api_key: str = ""
    base_url: str = "https://api.openai.com/v1"
    model: str = "gpt-4o-mini"
    model_kind: Optional[ModelKind] = None
    reasoning_model_prefixes: List[str] = Field(default_factory=lambda: ["o1"])
    temperature: float = 0.7
    max_retries: int = Field(default=3, ge=0)
    timeout: float = 120.0
    request_timeout_seconds: Optional[float] = None
    placeholder_url_patterns: List[str] = Field(
        default_factory=lambda: list(DEFAULT_PLACEHOLDER_URL_PATTERNS)
    )

    @classmethod
    def settings_customise_sources(
        cls,
        settings_cls,
        init_settings,
        env_settings,
        dotenv_settings,
        file_secret_settings,
    ):
        # Environment wins over values passed in from the YAML file
        return env_settings, dotenv_settings, init_settings, file_secret_settings

    @model_validator(mode="after")
    def _resolve_model_kind(self) -> "AISettings":
        if self.model_kind is None:
            self.model_kind = resolve_model_kind(
                self.model, self.reasoning_model_prefixes
            )
        return self

    @property
    def is_configured(self) -> bool:
        return bool(self.api_key and self.api_key.strip())

    @property
    def is_reasoning_model(self) -> bool:
        return self.model_kind == ModelKind.REASONING


class AppConfig(BaseModel):
    """Main application configuration."""

    server: ServerConfig = ServerConfig()
    logging: LoggingConfig = LoggingConfig()
    ai: AISettings = Field(default_factory=AISettings)


def get_project_root() -> Path:
    """Get the project root directory."""
    return Path(__file__).parent.parent.parent.parent


def load_config(config_path: Optional[str] = None) -> AppConfig:
    """
    Load configuration from YAML file.

    Args:
        config_path: Path to the configuration file. If None, uses
            $GRADER_CONFIG or config.yaml in the project root.

    Returns:
        AppConfig instance with loaded configuration.
    """
    if config_path is None:
        config_path = os.environ.get("GRADER_CONFIG")
        if config_path is None:
            config_path = get_project_root() / "config.yaml"

    config_path = Path(config_path)

    config_data = {}
    if config_path.exists():
        with open(config_path, "r", encoding="utf-8") as f:
            config_data = yaml.safe_load(f) or {}

    ai_settings = AISettings(**(config_data.pop("ai", None) or {}))
    return AppConfig(**config_data, ai=ai_settings)


# Global configuration instance
_config: Optional[AppConfig] = None


def get_config() -> AppConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = load_config()
    return _config


def reset_config() -> None:
    """Drop the cached configuration so the next get_config() reloads it."""
    global _config
    _config = None


def get_log_path() -> Path:
    """
    Get the absolute path to the log file.

    Uses $LOGS_DIR when set (container mode), otherwise project_root/logs.
    """
    config = get_config()

    logs_dir_env = os.environ.get("LOGS_DIR")
    if logs_dir_env:
        log_dir = Path(logs_dir_env)
    else:
        log_dir = get_project_root() / "logs"

    log_dir.mkdir(parents=True, exist_ok=True)

    # Use only the filename from config so logs never go outside logs/
    name = Path(config.logging.file).name or "app.log"
    return log_dir / name

# Settings for access_testkit, loaded from environment variables
from pydantic_settings import BaseSettings, SettingsConfigDict
from pydantic import BaseModel, Field, field_validator
from enum import Enum


class Environment(str, Enum):
    DEVELOPMENT = "development"
    PRODUCTION = "production"
    TESTING = "testing"


_VALID_LEVELS = {"CRITICAL", "ERROR", "WARNING", "INFO", "DEBUG", "NOTSET"}


class LoggingSettings(BaseModel):
    level: str = "INFO"
    console_json_format: bool = False  # Plain text for console by default
    # Redaction
    redact_keys: list[str] = [
        "authorization", "cookie", "set-cookie", "password", "secret", "token"
    ]

    @field_validator("level")
    @classmethod
    def validate_level(cls, v: str) -> str:
        level = v.strip().upper()
        if level not in _VALID_LEVELS:
            raise ValueError(f"Unsupported log level: {v}")
        return level


class AccessLogSettings(BaseModel):
    """Where access records are emitted and how their message is laid out"""
    logger_name: str = "uvicorn.access"
    # Line shape parse_access_line expects; usable as uvicorn access_log_format
    format: str = Field(
        default='h=%(h)s u=%(u)s r="%(r)s" s=%(s)s b=%(b)s L=%(L)f a="%(a)s"',
        description="Access log line format (gunicorn-style atoms)",
    )


class Settings(BaseSettings):
    """Main settings, loaded from environment variables"""
    model_config = SettingsConfigDict(
        env_file=".env",
        env_nested_delimiter="__",
        case_sensitive=False,
        extra="ignore"
    )

    app_name: str = "access-testkit"
    environment: Environment = Environment.DEVELOPMENT

    logging: LoggingSettings = LoggingSettings()
    access_log: AccessLogSettings = AccessLogSettings()

import os
from typing import List

from pydantic import BaseModel, Field


# Helper functions for parsing environment variables
def get_str_env(key: str, default: str = "") -> str:
    return os.environ.get(key, default)

def get_int_env(key: str, default: int) -> int:
    try:
        return int(os.environ.get(key, str(default)))
    except ValueError:
        return default

def get_bool_env(key: str, default: bool) -> bool:
    value = os.environ.get(key, str(default)).lower()
    return value == "true"

def get_str_list_env(key: str, default: str = "") -> List[str]:
    return [p.strip() for p in os.environ.get(key, default).split(",") if p.strip()]


# Default factory functions
def default_db_engine() -> str:
    return get_str_env("DB_ENGINE", "sqlite")

def default_db_name() -> str:
    return get_str_env("DB_NAME", "drive_journal.db")

def default_db_host() -> str:
    return get_str_env("DB_HOST", "localhost")

def default_db_port() -> int:
    return get_int_env("DB_PORT", 5432)

def default_db_user() -> str:
    return get_str_env("DB_USER", "teslamate")

def default_db_password() -> str:
    return get_str_env("DB_PASSWORD", "")

def default_log_level() -> str:
    return get_str_env("LOG_LEVEL", "INFO")

def default_log_dir() -> str:
    return get_str_env("LOG_DIR", "logs")

def default_max_size_mb() -> int:
    return get_int_env("LOG_MAX_SIZE_MB", 10)

def default_backup_count() -> int:
    return get_int_env("LOG_BACKUP_COUNT", 5)

def default_use_color() -> bool:
    return get_bool_env("LOG_USE_COLOR", True)

def default_http_port() -> int:
    return get_int_env("HTTP_PORT", 4001)

def default_car_id() -> int:
    return get_int_env("DEFAULT_CAR_ID", 1)

def default_debug() -> bool:
    return get_bool_env("DEBUG", False)

def default_secret_key() -> str:
    return get_str_env("SECRET_KEY", "drive-journal-insecure-development-key")

def default_allowed_hosts() -> List[str]:
    return get_str_list_env("ALLOWED_HOSTS", "localhost,127.0.0.1")


class DbConfig(BaseModel):
    """Database connection configuration."""
    engine: str = Field(default_factory=default_db_engine)
    name: str = Field(default_factory=default_db_name)
    host: str = Field(default_factory=default_db_host)
    port: int = Field(default_factory=default_db_port)
    user: str = Field(default_factory=default_db_user)
    password: str = Field(default_factory=default_db_password)


class LoggingConfig(BaseModel):
    """Logging configuration."""
    level: str = Field(default_factory=default_log_level)
    log_dir: str = Field(default_factory=default_log_dir)
    max_size_mb: int = Field(default_factory=default_max_size_mb)
    backup_count: int = Field(default_factory=default_backup_count)
    use_color: bool = Field(default_factory=default_use_color)


class ServiceConfig(BaseModel):
    """HTTP service configuration."""
    http_port: int = Field(default_factory=default_http_port)
    default_car_id: int = Field(default_factory=default_car_id)
    debug: bool = Field(default_factory=default_debug)
    secret_key: str = Field(default_factory=default_secret_key)
    allowed_hosts: List[str] = Field(default_factory=default_allowed_hosts)


class AppConfig(BaseModel):
    """Application configuration."""
    db: DbConfig = Field(default_factory=DbConfig)
    logging: LoggingConfig = Field(default_factory=LoggingConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)


# Create a singleton config instance
config = AppConfig()

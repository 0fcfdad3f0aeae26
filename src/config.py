"""
Configuration Module
--------------
Loads service settings from a local .env file and the process environment.
Settings are read once at startup and passed explicitly to the geocoding service.
"""
import os
import logging
from pathlib import Path
from typing import Optional, Union

from dotenv import load_dotenv
from pydantic import BaseModel, ConfigDict, Field, SecretStr, ValidationError, field_validator

from src.geocoding.client import GOOGLE_GEOCODE_URL

# Get logger
logger = logging.getLogger(__name__)

# Environment variables
API_KEY_ENV = "GOOGLE_MAPS_API_KEY"
PORT_ENV = "PORT"
HOST_ENV = "HOST"
CACHE_TTL_ENV = "GEOCODE_CACHE_TTL"
REQUEST_TIMEOUT_ENV = "GEOCODE_REQUEST_TIMEOUT"
UPSTREAM_TIMEOUT_ENV = "GEOCODE_UPSTREAM_TIMEOUT"
UPSTREAM_URL_ENV = "GEOCODE_UPSTREAM_URL"
UPSTREAM_WORKERS_ENV = "GEOCODE_UPSTREAM_WORKERS"

DEFAULT_PORT = "8080"
DEFAULT_HOST = "0.0.0.0"
DEFAULT_CACHE_TTL = 30 * 60
DEFAULT_REQUEST_TIMEOUT = 3.0
DEFAULT_UPSTREAM_TIMEOUT = 5.0
DEFAULT_UPSTREAM_WORKERS = 8


class ConfigurationError(Exception):
    """Raised at startup when the environment cannot produce valid settings."""


class Settings(BaseModel):
    model_config = ConfigDict(frozen=True)

    api_key: SecretStr
    port: str = DEFAULT_PORT
    host: str = DEFAULT_HOST
    cache_ttl: float = Field(DEFAULT_CACHE_TTL, gt=0)
    request_timeout: float = Field(DEFAULT_REQUEST_TIMEOUT, gt=0)
    upstream_timeout: float = Field(DEFAULT_UPSTREAM_TIMEOUT, gt=0)
    upstream_url: str = GOOGLE_GEOCODE_URL
    upstream_workers: int = Field(DEFAULT_UPSTREAM_WORKERS, gt=0)

    @field_validator("port")
    @classmethod
    def port_must_be_numeric(cls, value: str) -> str:
        if not value.isdigit() or not 0 < int(value) < 65536:
            raise ValueError(f"invalid port: {value!r}")
        return value


def load_env_file(path: Union[str, Path] = ".env") -> bool:
    """
    Load key=value pairs from an env file into the process environment.
    Values in the file override variables that are already set.

    Returns:
        True if the file existed and was loaded, False if it was missing.
    """
    path = Path(path)
    if not path.is_file():
        logger.debug(f"No env file found at {path}, using process environment only")
        return False

    load_dotenv(path, override=True)
    logger.info(f"Loaded environment from {path}")
    return True


def load_settings(env_file: Optional[Union[str, Path]] = ".env") -> Settings:
    """
    Build Settings from the env file (if any) and the process environment.

    Raises:
        ConfigurationError: If the API key is missing or a value does not parse.
    """
    if env_file is not None:
        load_env_file(env_file)

    api_key = os.getenv(API_KEY_ENV, "").strip()
    if not api_key:
        raise ConfigurationError(f"{API_KEY_ENV} is required")

    values = {
        "api_key": api_key,
        "port": os.getenv(PORT_ENV) or DEFAULT_PORT,
        "host": os.getenv(HOST_ENV) or DEFAULT_HOST,
        "cache_ttl": os.getenv(CACHE_TTL_ENV) or DEFAULT_CACHE_TTL,
        "request_timeout": os.getenv(REQUEST_TIMEOUT_ENV) or DEFAULT_REQUEST_TIMEOUT,
        "upstream_timeout": os.getenv(UPSTREAM_TIMEOUT_ENV) or DEFAULT_UPSTREAM_TIMEOUT,
        "upstream_url": os.getenv(UPSTREAM_URL_ENV) or GOOGLE_GEOCODE_URL,
        "upstream_workers": os.getenv(UPSTREAM_WORKERS_ENV) or DEFAULT_UPSTREAM_WORKERS,
    }

    try:
        return Settings(**values)
    except ValidationError as e:
        raise ConfigurationError(f"Invalid configuration: {e}") from e

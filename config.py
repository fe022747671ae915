"""
Configuration module for the Helpdesk chat backend.

This module centralizes all configuration settings, loading values from
environment variables (and a local ``.env`` file) with sensible defaults.
"""
import os
import sys
import logging
from dataclasses import dataclass, field
from typing import List, Optional

from dotenv import load_dotenv
from loguru import logger

# Load environment variables from .env file
load_dotenv()

REQUIRED_ENV_VARS = [
    "DATABASE_URL",
    "OPENAI_API_KEY",
]

# Defaults
DEFAULT_COMPLETION_MODEL = "gpt-4o-mini"
DEFAULT_POLICY = "storefront"
DEFAULT_HISTORY_LIMIT = 10
DEFAULT_PORT = 4000
DEFAULT_BACKEND_URL = "http://localhost:4000"


class ConfigurationError(RuntimeError):
    """Raised at startup when required settings are missing or malformed."""
    pass


@dataclass(frozen=True)
class Settings:
    database_url: str
    openai_api_key: str
    completion_model: str = DEFAULT_COMPLETION_MODEL
    policy_name: str = DEFAULT_POLICY
    policy_file: Optional[str] = None
    history_limit: int = DEFAULT_HISTORY_LIMIT
    cors_origins: List[str] = field(default_factory=lambda: ["*"])
    log_level: str = "INFO"
    port: int = DEFAULT_PORT


def _check_required_env_vars() -> None:
    """Check that required environment variables are set."""
    missing_vars = [var for var in REQUIRED_ENV_VARS if not os.getenv(var)]

    if missing_vars:
        raise ConfigurationError(
            f"Missing required environment variables: {', '.join(missing_vars)}. "
            "Set them in your .env file or environment (see .env.example)."
        )


def _int_env(name: str, default: int) -> int:
    raw = os.getenv(name)
    if not raw:
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}")


def load_settings() -> Settings:
    """Read the process environment into a :class:`Settings` instance.

    Raises
    ------
    ConfigurationError
        If ``DATABASE_URL`` or ``OPENAI_API_KEY`` is missing, or a numeric
        variable cannot be parsed. Callers treat this as fatal.
    """
    _check_required_env_vars()

    history_limit = _int_env("HELPDESK_HISTORY_LIMIT", DEFAULT_HISTORY_LIMIT)
    if history_limit < 1:
        raise ConfigurationError("HELPDESK_HISTORY_LIMIT must be at least 1")

    origins = os.getenv("HELPDESK_CORS_ORIGINS", "*")

    return Settings(
        database_url=os.environ["DATABASE_URL"],
        openai_api_key=os.environ["OPENAI_API_KEY"],
        completion_model=os.getenv("OPENAI_COMPLETION_MODEL", DEFAULT_COMPLETION_MODEL),
        policy_name=os.getenv("HELPDESK_POLICY", DEFAULT_POLICY),
        policy_file=os.getenv("HELPDESK_POLICY_FILE") or None,
        history_limit=history_limit,
        cors_origins=[o.strip() for o in origins.split(",") if o.strip()],
        log_level=os.getenv("HELPDESK_LOG_LEVEL", "INFO").upper(),
        port=_int_env("PORT", DEFAULT_PORT),
    )


def get_backend_url() -> str:
    """Base URL the Streamlit frontend uses to reach the backend."""
    return os.getenv("HELPDESK_BACKEND_URL", DEFAULT_BACKEND_URL).rstrip("/")


def setup_logging(level: str = "INFO") -> None:
    """Configure the loguru sink for the backend and the stdlib root level."""
    logger.remove()
    logger.add(
        sys.stderr,
        level=level,
        format="[{time:YYYY-MM-DD HH:mm:ss}] [{level}] {name}: {message}",
    )
    logging.getLogger().setLevel(getattr(logging, level, logging.INFO))

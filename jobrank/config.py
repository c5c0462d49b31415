"""
Runtime configuration.

Settings are resolved in three layers: built‑in defaults, an optional
YAML file (non‑secret keys only) and environment variables, which win.
A ``.env`` file in the working directory is loaded first via
python‑dotenv so API keys can live outside the shell profile.

API keys are never read from the YAML file.  A missing key simply means
the corresponding provider is not constructed; see
:func:`jobrank.rank.llm_providers.get_ranking_provider`.
"""

from __future__ import annotations

import logging
import os
from dataclasses import dataclass, fields
from typing import Dict, Mapping, Optional

import yaml  # type: ignore
from dotenv import load_dotenv

from .errors import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_OPENAI_MODEL = "gpt-3.5-turbo"
DEFAULT_GEMINI_MODEL = "gemini-1.5-pro"
DEFAULT_GROQ_MODEL = "llama-3.1-8b-instant"
DEFAULT_SEARCH_DEADLINE = 2.0
DEFAULT_DESCRIPTION_EXCERPT = 200
DEFAULT_REQUEST_TIMEOUT = 30.0
DEFAULT_MAX_RETRIES = 2

# Keys that may be set from the YAML file.
_FILE_KEYS = (
    "openai_model",
    "gemini_model",
    "groq_model",
    "llm_provider",
    "rank_timeout",
    "search_deadline",
    "request_timeout",
    "max_retries",
    "description_excerpt",
    "log_level",
)


@dataclass
class Settings:
    """Resolved configuration for providers and engine limits."""

    openai_api_key: Optional[str] = None
    openai_model: str = DEFAULT_OPENAI_MODEL
    gemini_api_key: Optional[str] = None
    gemini_model: str = DEFAULT_GEMINI_MODEL
    llm_provider: Optional[str] = None
    groq_api_key: Optional[str] = None
    groq_model: str = DEFAULT_GROQ_MODEL
    rank_timeout: Optional[float] = None
    search_deadline: Optional[float] = DEFAULT_SEARCH_DEADLINE
    request_timeout: Optional[float] = DEFAULT_REQUEST_TIMEOUT   # per HTTP request
    max_retries: int = DEFAULT_MAX_RETRIES
    description_excerpt: int = DEFAULT_DESCRIPTION_EXCERPT
    log_level: str = "INFO"

    @property
    def numeric_log_level(self) -> int:
        level = logging.getLevelName(self.log_level.upper())
        if isinstance(level, int):
            return level
        logger.warning("Unknown LOG_LEVEL '%s'; using INFO", self.log_level)
        return logging.INFO


def _optional_float(name: str, value: object) -> Optional[float]:
    if value is None or (isinstance(value, str) and not value.strip()):
        return None
    try:
        number = float(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be a number, got {value!r}") from exc
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return number


def _positive_int(name: str, value: object) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc
    if number <= 0:
        raise ConfigError(f"{name} must be positive, got {value!r}")
    return number


def _non_negative_int(name: str, value: object) -> int:
    try:
        number = int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError) as exc:
        raise ConfigError(f"{name} must be an integer, got {value!r}") from exc
    if number < 0:
        raise ConfigError(f"{name} must not be negative, got {value!r}")
    return number


def _load_file(config_path: str) -> Dict[str, object]:
    try:
        with open(config_path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as exc:
        raise ConfigError(f"Cannot read config file {config_path}: {exc}") from exc
    if not isinstance(data, dict):
        raise ConfigError(f"Config file {config_path} must contain a mapping")
    unknown = set(data) - set(_FILE_KEYS)
    if unknown:
        logger.warning("Ignoring unknown config keys: %s", ", ".join(sorted(unknown)))
    return {key: data[key] for key in _FILE_KEYS if key in data}


def _env(environ: Mapping[str, str], *names: str) -> Optional[str]:
    for name in names:
        value = (environ.get(name) or "").strip()
        if value:
            return value
    return None


def load_settings(
    config_path: Optional[str] = None,
    environ: Optional[Mapping[str, str]] = None,
) -> Settings:
    """Build :class:`Settings` from defaults, a YAML file and the environment.

    Args:
        config_path: Optional YAML file with non‑secret settings.
        environ: Mapping to read variables from.  When omitted, ``.env``
            is loaded and ``os.environ`` is used.

    Returns:
        The resolved settings.

    Raises:
        ConfigError: If a numeric setting cannot be parsed.
    """
    if environ is None:
        load_dotenv()
        environ = os.environ
    values: Dict[str, object] = {}
    if config_path:
        values.update(_load_file(config_path))

    env_values = {
        "openai_api_key": _env(environ, "OPENAI_API_KEY"),
        "openai_model": _env(environ, "OPENAI_MODEL"),
        "gemini_api_key": _env(environ, "GEMINI_API_KEY", "GOOGLE_API_KEY"),
        "gemini_model": _env(environ, "GEMINI_MODEL", "GOOGLE_MODEL"),
        "llm_provider": _env(environ, "LLM_PROVIDER"),
        "groq_api_key": _env(environ, "GROQ_API_KEY"),
        "groq_model": _env(environ, "GROQ_MODEL"),
        "rank_timeout": _env(environ, "JOBRANK_RANK_TIMEOUT"),
        "search_deadline": _env(environ, "JOBRANK_SEARCH_DEADLINE"),
        "request_timeout": _env(environ, "JOBRANK_REQUEST_TIMEOUT"),
        "max_retries": _env(environ, "JOBRANK_MAX_RETRIES"),
        "log_level": _env(environ, "LOG_LEVEL"),
    }
    values.update({key: value for key, value in env_values.items() if value is not None})

    known = {f.name for f in fields(Settings)}
    settings = Settings(**{key: value for key, value in values.items() if key in known})
    settings.rank_timeout = _optional_float("rank_timeout", settings.rank_timeout)
    settings.search_deadline = _optional_float("search_deadline", settings.search_deadline)
    settings.request_timeout = _optional_float("request_timeout", settings.request_timeout)
    settings.max_retries = _non_negative_int("max_retries", settings.max_retries)
    settings.description_excerpt = _positive_int("description_excerpt", settings.description_excerpt)
    if settings.llm_provider:
        settings.llm_provider = settings.llm_provider.lower()
    return settings

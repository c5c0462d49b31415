"""Tests for settings resolution."""

from __future__ import annotations

import logging

import pytest  # type: ignore

from jobrank.config import (
    DEFAULT_GROQ_MODEL,
    DEFAULT_MAX_RETRIES,
    DEFAULT_OPENAI_MODEL,
    DEFAULT_REQUEST_TIMEOUT,
    DEFAULT_SEARCH_DEADLINE,
    Settings,
    load_settings,
)
from jobrank.errors import ConfigError


def test_defaults_with_empty_environment() -> None:
    settings = load_settings(environ={})
    assert settings.openai_api_key is None
    assert settings.gemini_api_key is None
    assert settings.groq_api_key is None
    assert settings.openai_model == DEFAULT_OPENAI_MODEL
    assert settings.groq_model == DEFAULT_GROQ_MODEL
    assert settings.search_deadline == DEFAULT_SEARCH_DEADLINE
    assert settings.rank_timeout is None
    assert settings.description_excerpt == 200


def test_environment_values() -> None:
    settings = load_settings(
        environ={
            "OPENAI_API_KEY": "sk-1",
            "GOOGLE_API_KEY": "g-1",
            "GROQ_API_KEY": "gsk-1",
            "GROQ_MODEL": "llama-test",
            "LLM_PROVIDER": "Gemini",
            "JOBRANK_RANK_TIMEOUT": "15",
            "JOBRANK_SEARCH_DEADLINE": "0.5",
            "LOG_LEVEL": "debug",
        }
    )
    assert settings.openai_api_key == "sk-1"
    assert settings.gemini_api_key == "g-1"
    assert settings.groq_api_key == "gsk-1"
    assert settings.groq_model == "llama-test"
    assert settings.llm_provider == "gemini"
    assert settings.rank_timeout == 15.0
    assert settings.search_deadline == 0.5
    assert settings.numeric_log_level == logging.DEBUG


def test_gemini_key_takes_precedence_over_google_key() -> None:
    settings = load_settings(environ={"GEMINI_API_KEY": "gem", "GOOGLE_API_KEY": "goo"})
    assert settings.gemini_api_key == "gem"


def test_blank_environment_values_are_ignored() -> None:
    settings = load_settings(environ={"OPENAI_API_KEY": "  ", "JOBRANK_SEARCH_DEADLINE": ""})
    assert settings.openai_api_key is None
    assert settings.search_deadline == DEFAULT_SEARCH_DEADLINE


def test_yaml_file_then_environment(tmp_path) -> None:
    path = tmp_path / "jobrank.yaml"
    path.write_text(
        "openai_model: gpt-4o-mini\n"
        "search_deadline: 1.5\n"
        "description_excerpt: 120\n"
        "openai_api_key: should-not-load\n",
        encoding="utf-8",
    )
    settings = load_settings(str(path), environ={"JOBRANK_SEARCH_DEADLINE": "3"})
    assert settings.openai_model == "gpt-4o-mini"
    assert settings.description_excerpt == 120
    assert settings.search_deadline == 3.0
    assert settings.openai_api_key is None


def test_null_deadline_in_file_disables_it(tmp_path) -> None:
    path = tmp_path / "jobrank.yaml"
    path.write_text("search_deadline: null\n", encoding="utf-8")
    assert load_settings(str(path), environ={}).search_deadline is None


@pytest.mark.parametrize(
    "environ",
    [
        {"JOBRANK_SEARCH_DEADLINE": "soon"},
        {"JOBRANK_SEARCH_DEADLINE": "0"},
        {"JOBRANK_RANK_TIMEOUT": "-1"},
    ],
)
def test_invalid_numbers_raise(environ) -> None:
    with pytest.raises(ConfigError):
        load_settings(environ=environ)


def test_invalid_excerpt_in_file_raises(tmp_path) -> None:
    path = tmp_path / "jobrank.yaml"
    path.write_text("description_excerpt: zero\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(str(path), environ={})


def test_unreadable_config_file_raises(tmp_path) -> None:
    with pytest.raises(ConfigError):
        load_settings(str(tmp_path / "missing.yaml"), environ={})
    path = tmp_path / "list.yaml"
    path.write_text("- a\n- b\n", encoding="utf-8")
    with pytest.raises(ConfigError):
        load_settings(str(path), environ={})


def test_unknown_log_level_defaults_to_info() -> None:
    assert Settings(log_level="chatty").numeric_log_level == logging.INFO


def test_request_limits_default_and_override(tmp_path) -> None:
    settings = load_settings(environ={})
    assert settings.request_timeout == DEFAULT_REQUEST_TIMEOUT
    assert settings.max_retries == DEFAULT_MAX_RETRIES

    path = tmp_path / "jobrank.yaml"
    path.write_text("request_timeout: 12\nmax_retries: 0\n", encoding="utf-8")
    settings = load_settings(str(path), environ={"JOBRANK_REQUEST_TIMEOUT": "8"})
    assert settings.request_timeout == 8.0
    assert settings.max_retries == 0


@pytest.mark.parametrize(
    "environ",
    [{"JOBRANK_REQUEST_TIMEOUT": "0"}, {"JOBRANK_MAX_RETRIES": "-1"}, {"JOBRANK_MAX_RETRIES": "many"}],
)
def test_invalid_request_limits_raise(environ) -> None:
    with pytest.raises(ConfigError):
        load_settings(environ=environ)

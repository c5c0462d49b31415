"""
LLM provider abstractions.

This module defines a common interface for the chat completion services
jobrank talks to: OpenAI or Gemini for ranking listings, Groq for
interpreting search phrases.  Providers never raise on upstream
problems.  Every call returns either :class:`Ok` with the reply text or
:class:`Failed` with a human readable reason, and callers branch on the
result type instead of catching exceptions.

Providers are built once from :class:`jobrank.config.Settings` and
passed to the ranking and search components.  An unconfigured service
is represented by the factory returning ``None``.
"""

from __future__ import annotations

import logging
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import List, Optional, Tuple, Union

import google.generativeai as genai  # type: ignore
from openai import OpenAI

from ..config import Settings

logger = logging.getLogger(__name__)

GROQ_BASE_URL = "https://api.groq.com/openai/v1"


@dataclass(frozen=True)
class Ok:
    """Successful upstream call."""

    data: object


@dataclass(frozen=True)
class Failed:
    """Upstream call that did not produce a usable reply."""

    reason: str


Result = Union[Ok, Failed]


class ChatProvider(ABC):
    """Abstract base class for chat completion providers."""

    name = "base"

    @abstractmethod
    def complete(
        self,
        system: str,
        prompt: str,
        *,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
    ) -> Result:
        """Send one system + user message pair.

        Args:
            system: System instruction.
            prompt: User message.
            temperature: Sampling temperature.
            max_tokens: Optional cap on the reply length.

        Returns:
            ``Ok(text)`` with the stripped reply or ``Failed(reason)``.
        """
        raise NotImplementedError


class OpenAIProvider(ChatProvider):
    """Provider that uses the OpenAI chat completions API."""

    name = "openai"

    def __init__(
        self,
        api_key: str,
        model: str = "gpt-3.5-turbo",
        base_url: Optional[str] = None,
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ) -> None:
        if not api_key:
            raise ValueError(f"API key not provided for {self.name} provider")
        self.model = model
        # Unset values keep the SDK defaults (600s, 2 retries).
        client_kwargs = {}
        if timeout is not None:
            client_kwargs["timeout"] = timeout
        if max_retries is not None:
            client_kwargs["max_retries"] = max_retries
        self.client = OpenAI(api_key=api_key, base_url=base_url, **client_kwargs)

    def complete(
        self,
        system: str,
        prompt: str,
        *,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
    ) -> Result:
        logger.debug("Sending prompt to %s: %s", self.name, prompt[:200])
        kwargs = {}
        if max_tokens is not None:
            kwargs["max_tokens"] = max_tokens
        try:
            response = self.client.chat.completions.create(
                model=self.model,
                messages=[
                    {"role": "system", "content": system},
                    {"role": "user", "content": prompt},
                ],
                temperature=temperature,
                **kwargs,
            )
            content = response.choices[0].message.content if response.choices else None
        except Exception as exc:  # noqa: BLE001
            logger.warning("%s API call failed: %s", self.name, exc)
            return Failed(f"{self.name} request failed: {exc}")
        if not content or not content.strip():
            return Failed(f"No response from {self.name}")
        return Ok(content.strip())


class GroqProvider(OpenAIProvider):
    """Groq exposes an OpenAI compatible endpoint; only the base URL differs."""

    name = "groq"

    def __init__(
        self,
        api_key: str,
        model: str = "llama-3.1-8b-instant",
        timeout: Optional[float] = None,
        max_retries: Optional[int] = None,
    ) -> None:
        super().__init__(
            api_key, model=model, base_url=GROQ_BASE_URL, timeout=timeout, max_retries=max_retries
        )


class GeminiProvider(ChatProvider):
    """Provider that uses Google Generative AI (Gemini) via google‑generativeai."""

    name = "gemini"

    def __init__(self, api_key: str, model: str = "gemini-1.5-pro", timeout: Optional[float] = None) -> None:
        if not api_key:
            raise ValueError("GEMINI_API_KEY/GOOGLE_API_KEY not provided")
        genai.configure(api_key=api_key)
        self.model_name = model
        self.timeout = timeout

    def complete(
        self,
        system: str,
        prompt: str,
        *,
        temperature: float = 0.0,
        max_tokens: Optional[int] = None,
    ) -> Result:
        logger.debug("Sending prompt to Gemini: %s", prompt[:200])
        generation_config = {"temperature": temperature}
        if max_tokens is not None:
            generation_config["max_output_tokens"] = max_tokens
        request_kwargs = {}
        if self.timeout is not None:
            request_kwargs["request_options"] = {"timeout": self.timeout}
        try:
            model = genai.GenerativeModel(self.model_name, system_instruction=system)
            response = model.generate_content(prompt, generation_config=generation_config, **request_kwargs)
            content = response.text
        except Exception as exc:  # noqa: BLE001
            logger.warning("Gemini API call failed: %s", exc)
            return Failed(f"gemini request failed: {exc}")
        if not content or not content.strip():
            return Failed("No response from gemini")
        return Ok(content.strip())


def complete_with_deadline(
    provider: ChatProvider,
    system: str,
    prompt: str,
    deadline: Optional[float] = None,
    **kwargs: object,
) -> Result:
    """Call ``provider.complete`` and give up after ``deadline`` seconds.

    With ``deadline=None`` the call runs inline and may block for as long
    as the provider does.  Otherwise it runs on a daemon worker thread;
    when the deadline passes first a :class:`Failed` is returned
    immediately and the worker's eventual reply is never read.  The
    abandoned worker does not keep the process alive, and the provider's
    own client timeout bounds how long it lingers.
    """
    if deadline is None:
        return _complete(provider, system, prompt, kwargs)

    outcome: List[Result] = []
    worker = threading.Thread(
        target=lambda: outcome.append(_complete(provider, system, prompt, kwargs)),
        name=f"jobrank-{provider.name}",
        daemon=True,
    )
    worker.start()
    worker.join(deadline)
    if not outcome:
        logger.warning("%s did not answer within %.1fs", provider.name, deadline)
        return Failed(f"{provider.name} timeout after {deadline:g}s")
    return outcome[0]


def _complete(provider: ChatProvider, system: str, prompt: str, kwargs: dict) -> Result:
    try:
        return provider.complete(system, prompt, **kwargs)
    except Exception as exc:  # noqa: BLE001
        logger.exception("%s provider raised: %s", provider.name, exc)
        return Failed(f"{provider.name} provider raised: {exc}")


def _client_limits(settings: Settings, deadline: Optional[float]) -> Tuple[Optional[float], int]:
    """Transport timeout and retry count for a client raced against ``deadline``.

    A call abandoned at the deadline is closed by its own client no
    later than the deadline, and is not retried.
    """
    if deadline is None:
        return settings.request_timeout, settings.max_retries
    if settings.request_timeout is None:
        return deadline, 0
    return min(settings.request_timeout, deadline), 0


def get_ranking_provider(settings: Settings) -> Optional[ChatProvider]:
    """Return the provider used to rank listings, or ``None``.

    The resolution order is:

    1. If ``settings.llm_provider`` is ``"openai"``, ``"gemini"`` or
       ``"none"``, the corresponding choice is made.  If the requested
       provider cannot be initialised (e.g. missing API key), a warning
       is logged and the automatic detection logic is used.
    2. If an OpenAI key is present, return :class:`OpenAIProvider`.
    3. If a Gemini key is present, return :class:`GeminiProvider`.
    4. Otherwise return ``None``; ranking then uses term weighting only.
    """
    timeout, max_retries = _client_limits(settings, settings.rank_timeout)
    preferred = settings.llm_provider
    if preferred:
        if preferred == "openai":
            try:
                return OpenAIProvider(
                    settings.openai_api_key or "",
                    model=settings.openai_model,
                    timeout=timeout,
                    max_retries=max_retries,
                )
            except Exception as exc:  # noqa: BLE001
                logger.warning("LLM_PROVIDER=openai but failed to initialise OpenAIProvider: %s", exc)
        elif preferred == "gemini":
            try:
                return GeminiProvider(settings.gemini_api_key or "", model=settings.gemini_model, timeout=timeout)
            except Exception as exc:  # noqa: BLE001
                logger.warning("LLM_PROVIDER=gemini but failed to initialise GeminiProvider: %s", exc)
        elif preferred == "none":
            logger.info("LLM_PROVIDER=none; ranking uses term weighting only")
            return None
        else:
            logger.warning("Unknown LLM_PROVIDER value '%s'; falling back to automatic detection", preferred)
    if settings.openai_api_key:
        try:
            return OpenAIProvider(
                settings.openai_api_key,
                model=settings.openai_model,
                timeout=timeout,
                max_retries=max_retries,
            )
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to initialise OpenAIProvider: %s", exc)
    if settings.gemini_api_key:
        try:
            return GeminiProvider(settings.gemini_api_key, model=settings.gemini_model, timeout=timeout)
        except Exception as exc:  # noqa: BLE001
            logger.warning("Failed to initialise GeminiProvider: %s", exc)
    logger.info("No ranking API keys found; ranking uses term weighting only")
    return None


def get_search_provider(settings: Settings) -> Optional[ChatProvider]:
    """Return the Groq provider used to interpret searches, or ``None``."""
    if not settings.groq_api_key:
        logger.info("No GROQ_API_KEY; search interpretation uses keyword extraction")
        return None
    timeout, max_retries = _client_limits(settings, settings.search_deadline)
    try:
        return GroqProvider(
            settings.groq_api_key, model=settings.groq_model, timeout=timeout, max_retries=max_retries
        )
    except Exception as exc:  # noqa: BLE001
        logger.warning("Failed to initialise GroqProvider: %s", exc)
        return None

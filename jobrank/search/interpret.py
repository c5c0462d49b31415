"""
Search phrase interpretation.

Sends the raw search text to a chat provider (Groq in production) and
asks for a one line JSON object describing the search: keywords,
skills, job title, job level, intent and an improved phrasing.  The
call can be raced against a deadline.  Whenever the provider is
missing, slow, unreachable or answers with something that is not JSON,
the interpreter falls back to deterministic keyword extraction, so
:meth:`QueryInterpreter.interpret` always returns a usable intent.
"""

from __future__ import annotations

import logging
from typing import List, Mapping, Optional

from ..rank.llm_providers import ChatProvider, Ok, complete_with_deadline
from ..rank.llm_schema import parse_json_object
from ..schema import GENERAL_INTENT, JOB_LEVELS, StructuredIntent
from ..text import extract_keywords

logger = logging.getLogger(__name__)

SEARCH_SYSTEM_PROMPT = (
    "Return valid JSON only. Extract keywords, skills, job title, level, intent, "
    "and refined query from job searches."
)
SEARCH_TEMPERATURE = 0.1
SEARCH_MAX_TOKENS = 150
FAST_SEARCH_INTENT = "Fast search - matching your description"

_NULL_STRINGS = {"", "null", "none"}


def build_search_prompt(search_text: str) -> str:
    return (
        f'Extract job search info from: "{search_text}"\n\n'
        "Return JSON only:\n"
        '{"keywords":["term1","term2"],"skills":["skill1"],"jobTitle":"title or null",'
        '"jobLevel":"entry|mid|senior|executive or null","intent":"brief",'
        '"improvedQuery":"refined query","searchTerms":["term1"]}'
    )


def _text_list(value: object) -> List[str]:
    if not isinstance(value, list):
        return []
    items = [item.strip() for item in value if isinstance(item, str)]
    return [item for item in items if item]


def _optional_text(value: object) -> Optional[str]:
    if not isinstance(value, str) or value.strip().lower() in _NULL_STRINGS:
        return None
    return value.strip()


def _job_level(value: object) -> Optional[str]:
    level = _optional_text(value)
    if level is None:
        return None
    level = level.lower()
    return level if level in JOB_LEVELS else None


def intent_from_reply(search_text: str, data: Mapping[str, object]) -> StructuredIntent:
    """Build an intent from a parsed reply, defaulting any missing key."""
    return StructuredIntent(
        original_query=search_text,
        keywords=_text_list(data.get("keywords")),
        skills=_text_list(data.get("skills")),
        job_title=_optional_text(data.get("jobTitle")),
        job_level=_job_level(data.get("jobLevel")),
        intent=_optional_text(data.get("intent")) or GENERAL_INTENT,
        improved_query=_optional_text(data.get("improvedQuery")) or search_text,
        search_terms=_text_list(data.get("searchTerms")),
        used_external_service=True,
    )


def keyword_intent(search_text: str, error: Optional[str] = None, fast: bool = False) -> StructuredIntent:
    """The deterministic intent used whenever the provider is not used.

    ``fast`` marks the deadline caller: extracted keywords are also
    used as search terms so each one is matched on its own.
    """
    keywords = extract_keywords(search_text)
    return StructuredIntent(
        original_query=search_text,
        keywords=keywords,
        intent=FAST_SEARCH_INTENT if fast else GENERAL_INTENT,
        improved_query=search_text,
        search_terms=list(keywords) if fast else [],
        used_external_service=False,
        error=error,
    )


class QueryInterpreter:
    """Interprets search phrases with an optional provider and deadline.

    Args:
        provider: Chat provider, or ``None`` when no credential is set.
        deadline: Seconds to wait for the provider; ``None`` waits for as
            long as the provider takes.
    """

    def __init__(self, provider: Optional[ChatProvider] = None, deadline: Optional[float] = None) -> None:
        self.provider = provider
        self.deadline = deadline

    def interpret(self, search_text: Optional[str]) -> StructuredIntent:
        if not isinstance(search_text, str) or not search_text.strip():
            return StructuredIntent(original_query=search_text if isinstance(search_text, str) else "")

        if self.provider is None:
            return keyword_intent(search_text)

        try:
            result = complete_with_deadline(
                self.provider,
                SEARCH_SYSTEM_PROMPT,
                build_search_prompt(search_text),
                self.deadline,
                temperature=SEARCH_TEMPERATURE,
                max_tokens=SEARCH_MAX_TOKENS,
            )
            if isinstance(result, Ok):
                result = parse_json_object(str(result.data))
            if isinstance(result, Ok):
                intent = intent_from_reply(search_text, result.data)  # type: ignore[arg-type]
                logger.info(
                    "Interpreted search %r -> %r (keywords=%s, intent=%s)",
                    search_text, intent.improved_query, intent.keywords, intent.intent,
                )
                return intent
            reason = result.reason
        except Exception as exc:  # noqa: BLE001
            logger.exception("Search interpretation raised: %s", exc)
            reason = str(exc)

        logger.warning("Search interpretation failed (%s); using keyword extraction", reason)
        return keyword_intent(search_text, error=reason, fast=self.deadline is not None)


def interpret(
    search_text: Optional[str],
    provider: Optional[ChatProvider] = None,
    deadline: Optional[float] = None,
) -> StructuredIntent:
    """Interpret ``search_text``; see :class:`QueryInterpreter`."""
    return QueryInterpreter(provider, deadline).interpret(search_text)

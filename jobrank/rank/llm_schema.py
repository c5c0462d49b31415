"""
LLM reply parsing.

Language models are asked for bare JSON but regularly wrap it in a
Markdown code fence or surround it with prose.  The helpers here turn a
reply into Python data or a :class:`Failed` result; none of them raise.
"""

from __future__ import annotations

import json
import logging
import re
from typing import Dict, List

from .llm_providers import Failed, Ok, Result

logger = logging.getLogger(__name__)

_FENCED_OBJECT = re.compile(r"```(?:json)?\s*(\{[\s\S]*\})\s*```", re.IGNORECASE)


def parse_ranked_ids(content: str) -> Result:
    """Parse a JSON array of listing identifiers, most relevant first.

    Integers are accepted and converted to strings; anything else in the
    array, or a reply that is not a JSON array, is a failure.
    """
    try:
        data = json.loads(content)
    except (TypeError, ValueError) as exc:
        return Failed(f"ranking reply is not JSON: {exc}")
    if not isinstance(data, list):
        return Failed(f"ranking reply is a {type(data).__name__}, expected an array")
    ids: List[str] = []
    for item in data:
        if isinstance(item, bool) or not isinstance(item, (str, int)):
            return Failed(f"ranking reply contains a non-identifier: {item!r}")
        ids.append(str(item))
    return Ok(ids)


def _first_object(content: str) -> Dict[str, object] | None:
    decoder = json.JSONDecoder()
    for match in re.finditer(r"\{", content):
        try:
            data, _ = decoder.raw_decode(content, match.start())
        except ValueError:
            continue
        if isinstance(data, dict):
            return data
    return None


def parse_json_object(content: str) -> Result:
    """Recover a JSON object from a model reply.

    Tries, in order: the whole reply, the body of a fenced code block,
    and the first ``{...}`` span that decodes to an object.
    """
    try:
        data = json.loads(content)
        if isinstance(data, dict):
            return Ok(data)
    except (TypeError, ValueError):
        pass
    if not isinstance(content, str):
        return Failed("Unable to parse JSON from reply")

    fenced = _FENCED_OBJECT.search(content)
    if fenced:
        try:
            data = json.loads(fenced.group(1))
            if isinstance(data, dict):
                return Ok(data)
        except ValueError as exc:
            logger.debug("Fenced JSON block did not parse: %s", exc)

    data = _first_object(content)
    if data is not None:
        return Ok(data)
    return Failed("Unable to parse JSON from reply")

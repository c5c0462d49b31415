"""Shared fixtures: canned chat providers and a small set of listings.

No test talks to a real LLM.  ``StubProvider`` answers with a fixed
reply (or failure, or exception) after an optional delay and records
every call so tests can inspect the prompts.
"""

from __future__ import annotations

import time
from typing import Dict, List, Optional

import pytest  # type: ignore

from jobrank.rank.llm_providers import ChatProvider, Failed, Ok, Result
from jobrank.schema import Listing, Profile


class StubProvider(ChatProvider):
    name = "stub"

    def __init__(
        self,
        reply: Optional[str] = None,
        failure: Optional[str] = None,
        delay: float = 0.0,
        error: Optional[Exception] = None,
    ) -> None:
        self.reply = reply
        self.failure = failure
        self.delay = delay
        self.error = error
        self.calls: List[Dict[str, object]] = []

    def complete(self, system, prompt, *, temperature=0.0, max_tokens=None) -> Result:
        self.calls.append(
            {"system": system, "prompt": prompt, "temperature": temperature, "max_tokens": max_tokens}
        )
        if self.delay:
            time.sleep(self.delay)
        if self.error is not None:
            raise self.error
        if self.failure is not None:
            return Failed(self.failure)
        return Ok(self.reply)


@pytest.fixture
def python_profile() -> Profile:
    return Profile(skills=["Python", "Django"], keywords=[], experience=3, user_id="u1")


@pytest.fixture
def listings() -> List[Listing]:
    return [
        Listing(
            id="b",
            title="Java Engineer",
            company="Enterprise Co",
            description="Java enterprise role",
            skills=["Java"],
            experience=6,
        ),
        Listing(
            id="a",
            title="Backend Engineer",
            company="Snake Labs",
            description="Python backend role",
            skills=["Python", "AWS"],
            experience=3,
        ),
        Listing(
            id="c",
            title="Full Stack Developer",
            company="Web Shop",
            description="Django and React full stack work",
            skills=["Django", "React"],
            requirements=["Python experience"],
            experience=1,
        ),
    ]

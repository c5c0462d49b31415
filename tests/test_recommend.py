"""Tests for the listing recommendation orchestrator."""

from __future__ import annotations

import json
import time
import unittest
from typing import List

import pytest  # type: ignore

from conftest import StubProvider
from jobrank.errors import UserNotFound
from jobrank.rank.llm_rank import RANKING_SYSTEM_PROMPT, build_ranking_prompt
from jobrank.rank.recommend import Recommender, rank_listings
from jobrank.schema import Listing, Profile
from jobrank.store import InMemoryStore


def _ids(jobs: List[Listing]) -> List[str]:
    return [job.id for job in jobs]


def test_fallback_places_python_listing_before_java(python_profile, listings) -> None:
    ranked = rank_listings(python_profile, listings)
    assert _ids(ranked).index("a") < _ids(ranked).index("b")


def test_fallback_is_deterministic(python_profile, listings) -> None:
    first = rank_listings(python_profile, listings)
    second = rank_listings(python_profile, listings)
    assert _ids(first) == _ids(second)


def test_fallback_ties_keep_input_order() -> None:
    profile = Profile(skills=["Rust"])
    jobs = [Listing(id=str(i), description="Generic role") for i in range(5)]
    assert _ids(rank_listings(profile, jobs)) == ["0", "1", "2", "3", "4"]


def test_provider_order_wins(python_profile, listings) -> None:
    provider = StubProvider(reply='["b", "c", "a"]')
    assert _ids(rank_listings(python_profile, listings, provider=provider)) == ["b", "c", "a"]
    assert provider.calls[0]["system"] == RANKING_SYSTEM_PROMPT


def test_unknown_and_repeated_ids_are_dropped(python_profile, listings) -> None:
    provider = StubProvider(reply='["ghost", "c", "c", "a", "phantom"]')
    assert _ids(rank_listings(python_profile, listings, provider=provider)) == ["c", "a"]


def test_only_hallucinated_ids_fall_back_to_term_weighting(python_profile, listings) -> None:
    provider = StubProvider(reply='["x1", "x2"]')
    ranked = rank_listings(python_profile, listings, provider=provider)
    assert _ids(ranked) == _ids(rank_listings(python_profile, listings))


@pytest.mark.parametrize(
    "provider",
    [
        StubProvider(reply="I think job a is best."),
        StubProvider(reply='{"ranking": ["a"]}'),
        StubProvider(failure="service unavailable"),
        StubProvider(error=RuntimeError("socket closed")),
    ],
)
def test_unusable_provider_reply_falls_back(python_profile, listings, provider) -> None:
    ranked = rank_listings(python_profile, listings, provider=provider)
    assert _ids(ranked) == _ids(rank_listings(python_profile, listings))


def test_limit_truncates(python_profile, listings) -> None:
    assert len(rank_listings(python_profile, listings, limit=2)) == 2
    provider = StubProvider(reply='["c", "b", "a"]')
    assert _ids(rank_listings(python_profile, listings, limit=1, provider=provider)) == ["c"]


@pytest.mark.parametrize("limit", [0, -3])
def test_non_positive_limit_returns_nothing(python_profile, listings, limit) -> None:
    provider = StubProvider(reply='["a"]')
    assert rank_listings(python_profile, listings, limit=limit, provider=provider) == []
    assert provider.calls == []


def test_empty_universe_returns_nothing(python_profile) -> None:
    assert rank_listings(python_profile, []) == []


def test_result_is_subsequence_without_repeats(python_profile) -> None:
    jobs = [
        Listing(id=f"j{i}", description=desc, skills=skills)
        for i, (desc, skills) in enumerate(
            [
                ("Python data work", ["Pandas"]),
                ("Go services", ["Go"]),
                ("Django web app", ["Python", "Django"]),
                ("Python", []),
                ("", []),
                ("Sales", ["CRM"]),
            ]
        )
    ]
    replies = [None, '["j5", "j5", "j2", "nope"]', '["j0","j1","j2","j3","j4","j5"]']
    for reply in replies:
        provider = None if reply is None else StubProvider(reply=reply)
        for limit in (1, 3, 10):
            ranked = rank_listings(python_profile, jobs, limit=limit, provider=provider)
            ids = _ids(ranked)
            assert len(ids) <= min(limit, len(jobs))
            assert len(ids) == len(set(ids))
            assert set(ids) <= {job.id for job in jobs}


def test_duplicate_ids_in_universe_are_returned_once(python_profile) -> None:
    jobs = [Listing(id="dup", description="Python role"), Listing(id="dup", description="Python role")]
    assert _ids(rank_listings(python_profile, jobs)) == ["dup"]


def test_timeout_falls_back_without_waiting(python_profile, listings) -> None:
    provider = StubProvider(reply='["b", "c", "a"]', delay=1.0)
    started = time.monotonic()
    ranked = rank_listings(python_profile, listings, provider=provider, timeout=0.05)
    assert time.monotonic() - started < 0.8
    assert _ids(ranked) == _ids(rank_listings(python_profile, listings))


def test_ranking_prompt_summarises_listings(python_profile) -> None:
    listing = Listing(
        id="long",
        title="Data Engineer",
        description="x" * 200 + "y" * 300,
        skills=["Spark"],
        requirements=["3+ years"],
    )
    prompt = build_ranking_prompt(python_profile, [listing], excerpt=200)
    assert "- ID: long" in prompt
    assert "- Title: Data Engineer" in prompt
    assert "x" * 200 + "..." in prompt
    assert "y" not in prompt.split("- Description:")[1].split("\n")[0]
    assert "- Required Skills: Spark" in prompt
    assert "- Requirements: 3+ years" in prompt
    assert "- Skills: Python, Django" in prompt
    assert "- Experience: 3 years" in prompt


class TestRecommender(unittest.TestCase):
    """Recommender against an in-memory store."""

    def setUp(self) -> None:
        self.store = InMemoryStore(
            {
                "u1": Profile(skills=["Python"], keywords=["backend"], experience=2),
                "u2": Profile(),
            },
            [
                Listing(id="j1", description="Java role", skills=["Java"]),
                Listing(id="j2", description="Python backend role", skills=["Python"]),
                Listing(id="j3", description="Python backend role", skills=["Python"], status="closed"),
            ],
        )

    def test_unknown_user_raises(self) -> None:
        recommender = Recommender(self.store, provider=StubProvider(reply='["j1"]'))
        with self.assertRaises(UserNotFound) as ctx:
            recommender.recommend("missing")
        self.assertEqual(ctx.exception.user_id, "missing")
        self.assertIsInstance(ctx.exception, LookupError)

    def test_only_active_listings_are_ranked(self) -> None:
        ranked = Recommender(self.store).recommend("u1")
        self.assertEqual(_ids(ranked), ["j2", "j1"])

    def test_provider_sees_only_active_listings(self) -> None:
        provider = StubProvider(reply=json.dumps(["j3", "j1", "j2"]))
        ranked = Recommender(self.store, provider=provider).recommend("u1")
        self.assertEqual(_ids(ranked), ["j1", "j2"])
        self.assertNotIn("j3", provider.calls[0]["prompt"])

    def test_no_active_listings_skips_provider(self) -> None:
        store = InMemoryStore({"u1": Profile()}, [Listing(id="old", status="closed")])
        provider = StubProvider(reply='["old"]')
        self.assertEqual(Recommender(store, provider=provider).recommend("u1"), [])
        self.assertEqual(provider.calls, [])

    def test_empty_profile_still_returns_listings(self) -> None:
        ranked = Recommender(self.store).recommend("u2", limit=5)
        self.assertEqual(_ids(ranked), ["j1", "j2"])


if __name__ == "__main__":
    unittest.main()

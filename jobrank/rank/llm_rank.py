"""
LLM ranking stage.

Asks the configured chat provider to order a set of listings for one
candidate.  The provider sees the candidate's skills, experience and
résumé keywords plus a short summary of each listing, and must answer
with a JSON array of listing identifiers, most relevant first.
"""

from __future__ import annotations

import logging
from typing import Optional, Sequence

from ..config import DEFAULT_DESCRIPTION_EXCERPT
from ..schema import Listing, Profile
from .llm_providers import ChatProvider, Ok, Result, complete_with_deadline
from .llm_schema import parse_ranked_ids

logger = logging.getLogger(__name__)

RANKING_SYSTEM_PROMPT = "You are a helpful assistant that returns only valid JSON arrays."
RANKING_TEMPERATURE = 0.3


def _listing_summary(index: int, listing: Listing, excerpt: int) -> str:
    return (
        f"Job {index}:\n"
        f"- ID: {listing.id}\n"
        f"- Title: {listing.title}\n"
        f"- Description: {listing.description[:excerpt]}...\n"
        f"- Required Skills: {', '.join(listing.skills)}\n"
        f"- Requirements: {', '.join(listing.requirements)}\n"
    )


def build_ranking_prompt(
    profile: Profile,
    listings: Sequence[Listing],
    excerpt: int = DEFAULT_DESCRIPTION_EXCERPT,
) -> str:
    """Build the ranking instruction for ``profile`` and ``listings``.

    Descriptions are cut to ``excerpt`` characters to bound the prompt.
    """
    jobs = "\n".join(_listing_summary(i, job, excerpt) for i, job in enumerate(listings, start=1))
    return (
        "You are a job recommendation system. Based on the following user profile and "
        "available jobs, rank the jobs from most relevant to least relevant.\n\n"
        "User Profile:\n"
        f"- Skills: {', '.join(profile.skills)}\n"
        f"- Experience: {profile.experience} years\n"
        f"- Resume Keywords: {', '.join(profile.keywords)}\n\n"
        "Available Jobs:\n"
        f"{jobs}\n"
        "Return a JSON array of job IDs ranked by relevance (most relevant first). "
        'Format: ["job_id_1", "job_id_2", ...]'
    )


def rank_with_llm(
    provider: ChatProvider,
    profile: Profile,
    listings: Sequence[Listing],
    timeout: Optional[float] = None,
    excerpt: int = DEFAULT_DESCRIPTION_EXCERPT,
) -> Result:
    """Ask ``provider`` for an ordering of ``listings``.

    Args:
        provider: Chat provider used for ranking.
        profile: Candidate profile.
        listings: Listings to order.
        timeout: Seconds to wait for the reply; ``None`` waits indefinitely.
        excerpt: Number of description characters sent per listing.

    Returns:
        ``Ok(list_of_ids)`` or ``Failed(reason)``.
    """
    prompt = build_ranking_prompt(profile, listings, excerpt)
    result = complete_with_deadline(
        provider,
        RANKING_SYSTEM_PROMPT,
        prompt,
        timeout,
        temperature=RANKING_TEMPERATURE,
    )
    if not isinstance(result, Ok):
        return result
    parsed = parse_ranked_ids(str(result.data))
    if isinstance(parsed, Ok):
        logger.debug("%s ranked %d of %d listings", provider.name, len(parsed.data), len(listings))  # type: ignore[arg-type]
    return parsed

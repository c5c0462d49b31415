"""
Listing recommendation.

Orders the active listings for a candidate.  The configured LLM
provider is consulted first; if there is none, or its reply cannot be
used, every listing is scored by term weight and sorted.  Whichever
ordering wins is mapped back onto the listings that were passed in, so
an identifier the model invented never reaches the caller.
"""

from __future__ import annotations

import logging
from typing import TYPE_CHECKING, Dict, Iterable, List, Optional, Sequence

from ..config import DEFAULT_DESCRIPTION_EXCERPT
from ..errors import UserNotFound
from ..schema import Listing, Profile
from .llm_providers import ChatProvider, Ok
from .llm_rank import rank_with_llm
from .tfidf import score_listings

if TYPE_CHECKING:
    from ..store import ListingStore

logger = logging.getLogger(__name__)

DEFAULT_LIMIT = 10


def _fallback_order(profile: Profile, listings: Sequence[Listing]) -> List[str]:
    scored = score_listings(profile, listings)
    # sorted() is stable, so equal scores keep their input order.
    scored = sorted(scored, key=lambda item: item.score, reverse=True)
    return [item.listing.id for item in scored]


def _merge(ranked_ids: Iterable[str], listings: Sequence[Listing], limit: int) -> List[Listing]:
    lookup: Dict[str, Listing] = {}
    for listing in listings:
        lookup.setdefault(listing.id, listing)
    seen = set()
    ordered: List[Listing] = []
    for job_id in ranked_ids:
        if len(ordered) >= limit:
            break
        listing = lookup.get(job_id)
        if listing is None or job_id in seen:
            continue
        seen.add(job_id)
        ordered.append(listing)
    return ordered


def rank_listings(
    profile: Profile,
    listings: Sequence[Listing],
    limit: int = DEFAULT_LIMIT,
    provider: Optional[ChatProvider] = None,
    timeout: Optional[float] = None,
    excerpt: int = DEFAULT_DESCRIPTION_EXCERPT,
) -> List[Listing]:
    """Return at most ``limit`` of ``listings`` ordered by relevance.

    Args:
        profile: Candidate profile snapshot.
        listings: The listings that may be returned.
        limit: Maximum number of listings to return.
        provider: LLM provider for semantic ranking, or ``None``.
        timeout: Seconds to wait for the provider; ``None`` waits indefinitely.
        excerpt: Description characters sent to the provider per listing.

    Returns:
        A subsequence of ``listings`` without repeated identifiers.
    """
    if limit <= 0 or not listings:
        return []

    if provider is None:
        logger.debug("No ranking provider configured; using term weighting")
    else:
        result = rank_with_llm(provider, profile, listings, timeout=timeout, excerpt=excerpt)
        if isinstance(result, Ok):
            ranked = _merge(result.data, listings, limit)  # type: ignore[arg-type]
            if ranked:
                logger.info("Ranked %d listings with %s", len(ranked), provider.name)
                return ranked
            logger.warning("%s returned no known listing ids; using term weighting", provider.name)
        else:
            logger.warning("LLM ranking failed (%s); using term weighting", result.reason)

    ranked = _merge(_fallback_order(profile, listings), listings, limit)
    logger.info("Ranked %d listings by term weight", len(ranked))
    return ranked


class Recommender:
    """Recommends active listings to users of a :class:`ListingStore`."""

    def __init__(
        self,
        store: ListingStore,
        provider: Optional[ChatProvider] = None,
        timeout: Optional[float] = None,
        excerpt: int = DEFAULT_DESCRIPTION_EXCERPT,
    ) -> None:
        self.store = store
        self.provider = provider
        self.timeout = timeout
        self.excerpt = excerpt

    def recommend(self, user_id: str, limit: int = DEFAULT_LIMIT) -> List[Listing]:
        """Return the most relevant active listings for ``user_id``.

        Raises:
            UserNotFound: If the store has no such user.
        """
        profile = self.store.find_user(user_id)
        if profile is None:
            raise UserNotFound(user_id)
        listings = self.store.find_active_listings()
        if not listings:
            return []
        return rank_listings(
            profile,
            listings,
            limit=limit,
            provider=self.provider,
            timeout=self.timeout,
            excerpt=self.excerpt,
        )

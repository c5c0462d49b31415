"""
Term weighting fallback scorer.

Scores a single listing against a candidate's skills and résumé
keywords.  The listing is the only document of the weighting corpus, so
the inverse document frequency is the same constant for every term and
the score reduces to how often the candidate's terms occur in the
listing.  Scores are only meaningful for ordering listings against
each other.
"""

from __future__ import annotations

import logging
from typing import Iterable, List, Optional

from sklearn.feature_extraction.text import TfidfVectorizer  # type: ignore

from ..schema import Listing, Profile, ScoredListing

logger = logging.getLogger(__name__)

# Every run of word characters is a token, single characters included.
TOKEN_PATTERN = r"(?u)\b\w+\b"


def _vectorizer() -> TfidfVectorizer:
    return TfidfVectorizer(token_pattern=TOKEN_PATTERN, lowercase=True, norm=None)


def listing_text(
    description: Optional[str],
    skills: Optional[Iterable[str]] = None,
    requirements: Optional[Iterable[str]] = None,
) -> str:
    """Combine description, skills and requirements into one lowercase text."""
    parts = [description or "", *(skills or []), *(requirements or [])]
    return " ".join(parts).lower()


def profile_terms(profile: Profile) -> List[str]:
    return list(profile.skills) + list(profile.keywords)


def score_listing(
    terms: Optional[Iterable[str]],
    description: Optional[str],
    skills: Optional[Iterable[str]] = None,
    requirements: Optional[Iterable[str]] = None,
) -> float:
    """Return the term weight of ``terms`` within one listing.

    Args:
        terms: Profile side terms (skills and keywords).
        description: Listing description.
        skills: Listing skills.
        requirements: Listing requirements.

    Returns:
        A score >= 0.  Exactly 0.0 when either side has no tokens.
    """
    job_text = listing_text(description, skills, requirements)
    user_text = " ".join(terms or []).lower()
    if not job_text.strip() or not user_text.strip():
        return 0.0

    vectorizer = _vectorizer()
    analyze = vectorizer.build_analyzer()
    user_tokens = analyze(user_text)
    if not user_tokens or not analyze(job_text):
        return 0.0

    weights = vectorizer.fit_transform([job_text])
    vocabulary = vectorizer.vocabulary_
    score = 0.0
    for token in dict.fromkeys(user_tokens):
        column = vocabulary.get(token)
        if column is None:
            continue
        weight = float(weights[0, column])
        if weight > 0:
            score += weight
    return score


def score_listings(profile: Profile, listings: Iterable[Listing]) -> List[ScoredListing]:
    """Score every listing independently against the profile."""
    terms = profile_terms(profile)
    scored = [
        ScoredListing(
            listing=listing,
            score=score_listing(terms, listing.description, listing.skills, listing.requirements),
        )
        for listing in listings
    ]
    logger.debug("Scored %d listings by term weight", len(scored))
    return scored

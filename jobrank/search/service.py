"""
Job listing and AI search use cases.

Both use cases start from the caller's filters (status, location,
skills, maximum required experience), optionally interpret a search
phrase, add the resulting predicates and query the store:

* :func:`list_jobs` interprets without a deadline; the listing page can
  afford to wait for the language model.
* :func:`search_jobs` uses the interactive search interpreter (2 second
  deadline by default) and returns the intent and external links along
  with the jobs.
"""

from __future__ import annotations

import logging
import re
from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Dict, List, Optional, Sequence, Union

from ..schema import Listing, StructuredIntent
from .external_links import external_links
from .interpret import QueryInterpreter
from .predicates import build_query

if TYPE_CHECKING:
    from ..store import ListingStore

logger = logging.getLogger(__name__)


@dataclass
class SearchResult:
    intent: StructuredIntent
    jobs: List[Listing] = field(default_factory=list)
    external_links: List[Dict[str, str]] = field(default_factory=list)

    @property
    def total_results(self) -> int:
        return len(self.jobs)

    def to_dict(self) -> Dict[str, object]:
        return {
            "processedSearch": self.intent.to_dict(),
            "jobs": [job.to_document() for job in self.jobs],
            "totalResults": self.total_results,
            "externalLinks": self.external_links,
        }


def _split_skills(skills: Union[str, Sequence[str], None]) -> List[str]:
    if not skills:
        return []
    if isinstance(skills, str):
        skills = skills.split(",")
    return [s.strip() for s in skills if s and s.strip()]


def base_filters(
    status: Optional[str] = None,
    location: Optional[str] = None,
    skills: Union[str, Sequence[str], None] = None,
    min_experience: Optional[int] = None,
) -> Dict[str, object]:
    """Translate listing page filters into a filter document.

    ``min_experience`` keeps listings that require at most that many
    years, i.e. jobs the candidate already qualifies for.
    """
    query: Dict[str, object] = {"status": status or "active"}
    if location:
        query["location"] = {"$regex": re.escape(location), "$options": "i"}
    skill_list = _split_skills(skills)
    if skill_list:
        query["skills"] = {"$in": skill_list}
    if min_experience is not None:
        query["experience"] = {"$lte": int(min_experience)}
    return query


def list_jobs(
    store: "ListingStore",
    search: Optional[str] = None,
    interpreter: Optional[QueryInterpreter] = None,
    status: Optional[str] = None,
    location: Optional[str] = None,
    skills: Union[str, Sequence[str], None] = None,
    min_experience: Optional[int] = None,
) -> List[Listing]:
    """Return listings matching the filters and optional search text."""
    filters = base_filters(status, location, skills, min_experience)
    if search and search.strip():
        intent = (interpreter or QueryInterpreter()).interpret(search)
        query = build_query(intent, filters).to_query()
    else:
        query = filters
    jobs = store.find(query)
    logger.debug("Listing query %s matched %d jobs", query, len(jobs))
    return jobs


def search_jobs(
    store: "ListingStore",
    query_text: Optional[str],
    interpreter: QueryInterpreter,
    status: Optional[str] = None,
    location: Optional[str] = None,
    skills: Union[str, Sequence[str], None] = None,
    min_experience: Optional[int] = None,
) -> SearchResult:
    """Run an interactive search.

    A blank ``query_text`` returns an empty result with a neutral intent
    without touching the store.
    """
    if not query_text or not query_text.strip():
        return SearchResult(intent=StructuredIntent(original_query=query_text or ""))

    intent = interpreter.interpret(query_text)
    filters = base_filters(status, location, skills, min_experience)
    query = build_query(intent, filters).to_query()
    jobs = store.find(query)
    logger.info(
        "Search %r (useAI=%s) matched %d jobs", query_text, intent.used_external_service, len(jobs)
    )
    return SearchResult(intent=intent, jobs=jobs, external_links=external_links(query_text))

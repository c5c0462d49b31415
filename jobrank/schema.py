# jobrank/schema.py
from __future__ import annotations

from dataclasses import asdict, dataclass, field
from typing import Dict, List, Mapping, Optional

JOB_LEVELS = ("entry", "mid", "senior", "executive")
LISTING_STATUSES = ("active", "closed", "draft")
GENERAL_INTENT = "general"


def _str_list(value: object) -> List[str]:
    if not isinstance(value, (list, tuple)):
        return []
    return [str(item) for item in value if item is not None and str(item).strip()]


def _int(value: object, default: int = 0) -> int:
    try:
        return int(value)  # type: ignore[arg-type]
    except (TypeError, ValueError):
        return default


@dataclass
class Profile:
    skills: List[str] = field(default_factory=list)
    keywords: List[str] = field(default_factory=list)  # résumé keywords
    experience: int = 0                                 # years
    user_id: Optional[str] = None

    @classmethod
    def from_dict(cls, data: Mapping[str, object], user_id: Optional[str] = None) -> "Profile":
        keywords = data.get("keywords", data.get("resume_keywords"))
        if user_id is None and data.get("id") is not None:
            user_id = str(data["id"])
        return cls(
            skills=_str_list(data.get("skills")),
            keywords=_str_list(keywords),
            experience=_int(data.get("experience")),
            user_id=user_id,
        )


@dataclass
class Listing:
    id: str
    title: str = ""
    company: str = ""
    description: str = ""
    skills: List[str] = field(default_factory=list)
    requirements: List[str] = field(default_factory=list)
    experience: int = 0                   # years required
    location: Optional[str] = None
    status: str = "active"                # 'active' | 'closed' | 'draft'
    created_at: Optional[str] = None      # ISO8601

    @classmethod
    def from_dict(cls, data: Mapping[str, object]) -> "Listing":
        return cls(
            id=str(data.get("id", data.get("_id", ""))),
            title=str(data.get("title") or ""),
            company=str(data.get("company") or ""),
            description=str(data.get("description") or ""),
            skills=_str_list(data.get("skills")),
            requirements=_str_list(data.get("requirements")),
            experience=_int(data.get("experience")),
            location=data.get("location"),  # type: ignore[arg-type]
            status=str(data.get("status") or "active"),
            created_at=data.get("created_at"),  # type: ignore[arg-type]
        )

    def to_document(self) -> Dict[str, object]:
        return asdict(self)


@dataclass
class ScoredListing:
    listing: Listing
    score: float


@dataclass
class StructuredIntent:
    """Normalised representation of a free‑text search.

    ``used_external_service`` is only true when the language model reply
    was received in time and parsed; every other path leaves
    ``improved_query`` equal to the text the user typed.
    """

    original_query: str = ""
    keywords: List[str] = field(default_factory=list)
    skills: List[str] = field(default_factory=list)
    job_title: Optional[str] = None
    job_level: Optional[str] = None       # one of JOB_LEVELS
    intent: str = GENERAL_INTENT
    improved_query: str = ""
    search_terms: List[str] = field(default_factory=list)
    used_external_service: bool = False
    error: Optional[str] = None

    def to_dict(self) -> Dict[str, object]:
        """Render the payload shape the job board API returns."""
        return {
            "originalQuery": self.original_query,
            "processedQuery": self.improved_query,
            "keywords": list(self.keywords),
            "skills": list(self.skills),
            "intent": self.intent,
            "jobTitle": self.job_title,
            "jobLevel": self.job_level,
            "searchTerms": list(self.search_terms),
            "useAI": self.used_external_service,
        }

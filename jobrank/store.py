"""
Listing store interface.

jobrank does not own persistence.  The ranking and search components
talk to a :class:`ListingStore`, which the embedding application backs
with its database.  :class:`InMemoryStore` is a small implementation
over a YAML or JSON data file, used by the command line and the tests.

Data file layout::

    users:
      u1: {skills: [Python], keywords: [backend], experience: 4}
    jobs:
      - {id: j1, title: Backend Engineer, description: ..., skills: [...]}
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Dict, Iterable, List, Mapping, Optional

import yaml  # type: ignore

from .errors import DataFileError
from .schema import Listing, Profile
from .search.predicates import evaluate

logger = logging.getLogger(__name__)


class ListingStore(ABC):
    """Read access to users and job listings."""

    @abstractmethod
    def find_user(self, user_id: str) -> Optional[Profile]:
        """Return the profile of ``user_id`` or ``None``."""
        raise NotImplementedError

    @abstractmethod
    def find(self, query: Mapping[str, object]) -> List[Listing]:
        """Return listings matching a MongoDB style filter, newest first."""
        raise NotImplementedError

    def find_active_listings(self) -> List[Listing]:
        return self.find({"status": "active"})


class InMemoryStore(ListingStore):
    def __init__(self, users: Mapping[str, Profile], listings: Iterable[Listing]) -> None:
        self.users: Dict[str, Profile] = dict(users)
        self.listings: List[Listing] = list(listings)

    @classmethod
    def from_file(cls, path: str) -> "InMemoryStore":
        """Load users and jobs from a YAML (or JSON) data file.

        Raises:
            DataFileError: If the file cannot be read or has the wrong shape.
        """
        try:
            with open(path, "r", encoding="utf-8") as f:
                data = yaml.safe_load(f) or {}
        except (OSError, yaml.YAMLError) as exc:
            raise DataFileError(f"Cannot read data file {path}: {exc}") from exc
        if not isinstance(data, dict):
            raise DataFileError(f"Data file {path} must contain a mapping")

        users = data.get("users") or {}
        jobs = data.get("jobs") or []
        if not isinstance(users, dict) or not isinstance(jobs, list):
            raise DataFileError(f"Data file {path} needs a 'users' mapping and a 'jobs' list")
        try:
            profiles = {str(uid): Profile.from_dict(doc or {}, user_id=str(uid)) for uid, doc in users.items()}
            listings = [Listing.from_dict(doc) for doc in jobs]
        except AttributeError as exc:
            raise DataFileError(f"Malformed entry in {path}: {exc}") from exc
        logger.debug("Loaded %d users and %d jobs from %s", len(profiles), len(listings), path)
        return cls(profiles, listings)

    def find_user(self, user_id: str) -> Optional[Profile]:
        return self.users.get(str(user_id))

    def find(self, query: Mapping[str, object]) -> List[Listing]:
        matched = [job for job in self.listings if evaluate(query, job.to_document())]
        # Newest first; listings without a timestamp go last in file order.
        dated = sorted((job for job in matched if job.created_at), key=lambda job: str(job.created_at), reverse=True)
        return dated + [job for job in matched if not job.created_at]

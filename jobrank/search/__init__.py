"""
Search subsystem.

* `interpret` – Turns a search phrase into a structured intent, using a
  chat provider when one is configured and keyword extraction otherwise.
* `predicates` – Turns an intent plus caller filters into a predicate
  set for the listing store.
* `external_links` – Links running the same search on public job boards.
* `service` – The job listing and AI search use cases built from the
  pieces above and a :class:`jobrank.store.ListingStore`.
"""

from .predicates import PredicateSet, build_query, evaluate  # noqa: F401
from .interpret import QueryInterpreter, interpret  # noqa: F401
from .external_links import external_links  # noqa: F401

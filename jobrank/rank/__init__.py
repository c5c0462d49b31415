"""
Ranking subsystem.

The `rank` package orders listings for a candidate.  The stages are:

* `llm_rank` – Asks an LLM provider for an ordering of listing ids.
* `tfidf` – Scores each listing by term weight when the LLM is not
  available or its answer is unusable.
* `recommend` – Chooses between the two, maps the winning order back
  onto the known listings and applies the limit.

`llm_providers` holds the provider classes shared with the search
package.
"""

from .llm_providers import (  # noqa: F401
    ChatProvider,
    Failed,
    Ok,
    get_ranking_provider,
    get_search_provider,
)
from .tfidf import score_listing, score_listings  # noqa: F401
from .llm_rank import rank_with_llm  # noqa: F401
from .recommend import Recommender, rank_listings  # noqa: F401

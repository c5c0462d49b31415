"""
Ranking and search interpretation engine for the job board.

This package contains the parts of the job board that decide *which*
listings a candidate sees and in *what order*.  Each submodule
implements one step:

1. **text** – Deterministic keyword extraction used whenever the
   language model is not available.
2. **rank** – Orders the active listings for a candidate.  An LLM
   provider (OpenAI or Gemini) is asked for an ordering first; when it
   is not configured or fails, every listing is scored with a term
   weighting scorer and sorted.
3. **search** – Interprets a free‑text search phrase through Groq,
   racing the call against an optional deadline, and turns the
   resulting intent into a predicate set for the listing store.
4. **resume** – Extracts keywords from résumé files to populate the
   candidate profile.
5. **cli** – Command line entry point wiring the above together with
   a file backed listing store.

None of the public entry points raise on upstream (LLM) problems; the
only error a caller must handle is :class:`jobrank.errors.UserNotFound`.
"""

from importlib import metadata

from .errors import UserNotFound  # noqa: F401
from .schema import Listing, Profile, StructuredIntent  # noqa: F401

try:
    __version__ = metadata.version("jobrank")
except metadata.PackageNotFoundError:
    # Running from a source checkout.
    __version__ = "0.0.0"

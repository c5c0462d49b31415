"""
Exception types raised by jobrank.

Upstream (LLM) problems have no exception type here: an unconfigured
provider is modelled as ``None`` and a failed call as a
:class:`jobrank.rank.llm_providers.Failed` result, so neither ever
surfaces as an exception.
"""

from __future__ import annotations


class JobRankError(Exception):
    """Base class for all jobrank errors."""


class UserNotFound(JobRankError, LookupError):
    """The user whose listings should be ranked does not exist."""

    def __init__(self, user_id: str) -> None:
        super().__init__(f"User not found: {user_id}")
        self.user_id = user_id


class ConfigError(JobRankError):
    """A configuration value could not be interpreted."""


class DataFileError(JobRankError):
    """A listing store data file is missing or malformed."""

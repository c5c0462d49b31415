"""
Search predicate building.

Turns a :class:`StructuredIntent` into a :class:`PredicateSet`: one
OR‑group of case‑insensitive text matches plus optional experience
range filters, combined with whatever filters the caller already has.
The predicate set renders to a MongoDB style filter document and can
also be evaluated in memory against listing documents, which is what
:class:`jobrank.store.InMemoryStore` does.

Caller filters are never removed or overwritten.  When a new clause
would reuse a key the caller already set (``$or`` or ``experience``,
typically), it is AND‑ed through ``$and`` instead.
"""

from __future__ import annotations

import copy
import re
from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Optional, Tuple, Union

from ..schema import StructuredIntent

PHRASE_FIELDS = ("title", "description", "company")
TERM_FIELDS = ("title", "description")

# Years of required experience per job level, inclusive.  The shared
# boundaries (2 and 5) are part of the mapping.
LEVEL_EXPERIENCE: Dict[str, Tuple[int, Optional[int]]] = {
    "entry": (0, 2),
    "mid": (2, 5),
    "senior": (5, 10),
    "executive": (10, None),
}


@dataclass(frozen=True)
class TextMatch:
    """Case‑insensitive literal substring match on a text field."""

    field: str
    pattern: str

    def to_query(self) -> Dict[str, object]:
        return {self.field: {"$regex": re.escape(self.pattern), "$options": "i"}}


@dataclass(frozen=True)
class SkillMatch:
    """Match when any element of the skills array contains ``pattern``."""

    pattern: str
    field: str = "skills"

    def to_query(self) -> Dict[str, object]:
        return {self.field: {"$elemMatch": {"$regex": re.escape(self.pattern), "$options": "i"}}}


@dataclass(frozen=True)
class RangeFilter:
    """Inclusive numeric range; ``None`` leaves that side open."""

    field: str
    minimum: Optional[float] = None
    maximum: Optional[float] = None

    def to_query(self) -> Dict[str, object]:
        bounds: Dict[str, object] = {}
        if self.minimum is not None:
            bounds["$gte"] = self.minimum
        if self.maximum is not None:
            bounds["$lte"] = self.maximum
        return {self.field: bounds}


Condition = Union[TextMatch, SkillMatch]


@dataclass
class PredicateSet:
    base: Dict[str, object] = field(default_factory=dict)
    any_of: List[Condition] = field(default_factory=list)
    ranges: List[RangeFilter] = field(default_factory=list)

    def to_query(self) -> Dict[str, object]:
        """Render the MongoDB style filter document."""
        query = copy.deepcopy(self.base)
        clauses: List[Dict[str, object]] = []
        if self.any_of:
            clauses.append({"$or": [condition.to_query() for condition in self.any_of]})
        clauses.extend(r.to_query() for r in self.ranges)
        for clause in clauses:
            key = next(iter(clause))
            if key in query:
                query["$and"] = list(query.get("$and", [])) + [clause]  # type: ignore[call-overload]
            else:
                query.update(clause)
        return query

    def matches(self, document: Mapping[str, object]) -> bool:
        return evaluate(self.to_query(), document)


def _phrase_group(text: str, fields: Tuple[str, ...]) -> List[Condition]:
    return [TextMatch(name, text) for name in fields]


def build_query(
    intent: Optional[StructuredIntent],
    base_filters: Optional[Mapping[str, object]] = None,
) -> PredicateSet:
    """Build the predicate set for ``intent`` on top of ``base_filters``.

    Args:
        intent: Interpreted search.  ``None`` adds nothing.
        base_filters: Filters the caller already applies (status,
            location...).  They are copied, never modified.

    Returns:
        The combined :class:`PredicateSet`.
    """
    predicates = PredicateSet(base=copy.deepcopy(dict(base_filters or {})))
    if intent is None:
        return predicates

    if intent.improved_query:
        predicates.any_of.extend(_phrase_group(intent.improved_query, PHRASE_FIELDS))

    if not intent.used_external_service:
        # Only the deadline fallback seeds search terms.
        if len(intent.search_terms) > 1:
            for term in intent.search_terms:
                predicates.any_of.extend(_phrase_group(term, TERM_FIELDS))
        return predicates

    for keyword in intent.keywords:
        predicates.any_of.extend(_phrase_group(keyword, TERM_FIELDS))
    if intent.job_title:
        predicates.any_of.append(TextMatch("title", intent.job_title))
    for skill in intent.skills:
        predicates.any_of.append(SkillMatch(skill))

    if intent.job_level in LEVEL_EXPERIENCE:
        low, high = LEVEL_EXPERIENCE[intent.job_level]
        predicates.ranges.append(RangeFilter("experience", low, high))
    return predicates


# In-memory evaluation of the filter documents produced above.

def _regex(pattern: object, options: object) -> "re.Pattern[str]":
    if isinstance(pattern, re.Pattern):
        return pattern
    flags = re.IGNORECASE if "i" in str(options or "") else 0
    return re.compile(str(pattern), flags)


def _scalar_matches(value: object, expected: object) -> bool:
    if isinstance(expected, re.Pattern):
        return isinstance(value, str) and expected.search(value) is not None
    return value == expected


def _values(value: object) -> List[object]:
    return list(value) if isinstance(value, (list, tuple)) else [value]


def _compare(op: str, value: object, bound: object) -> bool:
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return False
    if op == "$gte":
        return value >= bound  # type: ignore[operator]
    if op == "$gt":
        return value > bound  # type: ignore[operator]
    if op == "$lte":
        return value <= bound  # type: ignore[operator]
    return value < bound  # type: ignore[operator]


def _operator_matches(op: str, arg: object, value: object, options: object) -> bool:
    if op == "$regex":
        regex = _regex(arg, options)
        return any(isinstance(v, str) and regex.search(v) for v in _values(value))
    if op == "$in":
        return any(_scalar_matches(v, candidate) for v in _values(value) for candidate in _values(arg))
    if op == "$nin":
        return not _operator_matches("$in", arg, value, options)
    if op == "$eq":
        return _field_matches(value, arg)
    if op == "$ne":
        return not _field_matches(value, arg)
    if op in ("$gte", "$gt", "$lte", "$lt"):
        return any(_compare(op, v, arg) for v in _values(value))
    if op == "$elemMatch":
        return isinstance(value, (list, tuple)) and any(_field_matches(v, arg) for v in value)
    raise ValueError(f"Unsupported query operator: {op}")


def _field_matches(value: object, condition: object) -> bool:
    if isinstance(condition, dict) and condition and all(str(k).startswith("$") for k in condition):
        options = condition.get("$options")
        return all(
            _operator_matches(op, arg, value, options)
            for op, arg in condition.items()
            if op != "$options"
        )
    if isinstance(value, (list, tuple)) and not isinstance(condition, (list, tuple)):
        return any(_scalar_matches(v, condition) for v in value)
    return _scalar_matches(value, condition)


def evaluate(query: Mapping[str, object], document: Mapping[str, object]) -> bool:
    """Return True when ``document`` satisfies the filter ``query``.

    Supports the subset of MongoDB query syntax jobrank produces:
    equality, ``$or``, ``$and``, ``$regex``/``$options``, ``$in``,
    ``$nin``, ``$eq``, ``$ne``, ``$elemMatch`` and numeric comparisons.
    """
    for key, condition in query.items():
        if key == "$or":
            if not any(evaluate(sub, document) for sub in condition):  # type: ignore[union-attr]
                return False
        elif key == "$and":
            if not all(evaluate(sub, document) for sub in condition):  # type: ignore[union-attr]
                return False
        elif not _field_matches(document.get(key), condition):
            return False
    return True

"""
Predicate builder for sparse search criteria.

A criteria mapping is folded into a list of field conditions joined with
AND. The same predicate is evaluated in memory (by calling it on an entity)
or rendered as a MongoDB filter document, so the matching rules live in one
place regardless of the storage backend.
"""

import re
from enum import Enum
from typing import Any, Dict, Iterable, Mapping, Optional, Tuple

import structlog

logger = structlog.get_logger(__name__)


class MatchKind(str, Enum):
    """How a criterion is compared against an entity attribute."""
    CONTAINS = "contains"
    EQUALS = "equals"


def _plain(value: Any) -> Any:
    """Reduce enum members to their stored value."""
    if isinstance(value, Enum):
        return value.value
    return value


def _read(item: Any, field: str) -> Any:
    if isinstance(item, Mapping):
        return item.get(field)
    return getattr(item, field, None)


def is_present(value: Any) -> bool:
    """Return True when a criterion value should take part in matching."""
    if value is None:
        return False
    if isinstance(value, str) and not value.strip():
        return False
    return True


class FieldCondition:
    """A single comparison between one entity field and one value."""

    def __init__(self, field: str, kind: MatchKind, value: Any):
        self.field = field
        self.kind = kind
        if kind == MatchKind.CONTAINS:
            value = str(_plain(value))
        self.value = value

    def __call__(self, item: Any) -> bool:
        actual = _read(item, self.field)
        if actual is None:
            return False

        if self.kind == MatchKind.CONTAINS:
            # simple per-character folding, as MongoDB applies for $options "i"
            actual = _plain(actual)
            if not isinstance(actual, str):
                return False
            return self.value.lower() in actual.lower()

        return _plain(actual) == _plain(self.value)

    def to_mongo(self) -> Dict[str, Any]:
        """Render as a MongoDB filter document."""
        if self.kind == MatchKind.CONTAINS:
            return {self.field: {"$regex": re.escape(self.value), "$options": "i"}}
        return {self.field: _plain(self.value)}

    def __repr__(self) -> str:
        return f"FieldCondition({self.field!r}, {self.kind.value}, {self.value!r})"


class Predicate:
    """
    Conjunction of field conditions.

    An empty predicate accepts every item.
    """

    def __init__(self, conditions: Iterable[FieldCondition] = ()):
        self.conditions: Tuple[FieldCondition, ...] = tuple(conditions)

    @property
    def is_identity(self) -> bool:
        return not self.conditions

    def __call__(self, item: Any) -> bool:
        return all(condition(item) for condition in self.conditions)

    def __and__(self, other: "Predicate") -> "Predicate":
        return Predicate(self.conditions + other.conditions)

    def to_mongo(self) -> Dict[str, Any]:
        """
        Render as a MongoDB filter document.

        Conditions on distinct fields are merged into one document; repeated
        fields fall back to an explicit $and.
        """
        fields = [condition.field for condition in self.conditions]
        if len(fields) != len(set(fields)):
            return {"$and": [condition.to_mongo() for condition in self.conditions]}

        query: Dict[str, Any] = {}
        for condition in self.conditions:
            query.update(condition.to_mongo())
        return query

    def __repr__(self) -> str:
        return f"Predicate({list(self.conditions)!r})"


# Matching rules for the searchable book fields.
BOOK_FILTER_RULES: Dict[str, MatchKind] = {
    "name": MatchKind.CONTAINS,
    "author_name": MatchKind.CONTAINS,
    "genre": MatchKind.EQUALS,
    "edition": MatchKind.EQUALS,
}


def build_predicate(
    criteria: Optional[Mapping[str, Any]],
    rules: Mapping[str, MatchKind] = BOOK_FILTER_RULES,
) -> Predicate:
    """
    Build a predicate from sparse criteria.

    Args:
        criteria: Field name to comparison value; None means no criteria
        rules: Match kind per searchable field

    Returns:
        Predicate combining every present criterion with AND
    """
    if not criteria:
        return Predicate()

    conditions = []
    for field, value in criteria.items():
        kind = rules.get(field)
        if kind is None:
            # unknown fields never narrow the result
            continue
        if not is_present(value):
            continue
        conditions.append(FieldCondition(field, kind, value))

    predicate = Predicate(conditions)
    logger.debug("Predicate built", conditions=len(predicate.conditions))
    return predicate

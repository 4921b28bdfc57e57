"""Person domain shape and the mapping from stored rows to it."""
from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any, Dict, Iterable, Optional, Union

AttributeValue = Union[str, int, float]


@dataclass(frozen=True)
class Person:
    id: str
    environment_id: str
    attributes: Dict[str, AttributeValue] = field(default_factory=dict)
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        return {
            "id": self.id,
            "environment_id": self.environment_id,
            "attributes": dict(self.attributes),
            "created_at": self.created_at.isoformat() if self.created_at else None,
            "updated_at": self.updated_at.isoformat() if self.updated_at else None,
        }


def attributes_to_dict(pairs: Iterable[tuple[str, AttributeValue]]) -> Dict[str, AttributeValue]:
    """Fold (name, value) pairs into a mapping; a repeated name keeps the last value."""
    attributes: Dict[str, AttributeValue] = {}
    for name, value in pairs:
        attributes[name] = value
    return attributes


def transform_person(entity: Any) -> Person:
    """
    Build a Person from a loaded ORM row.

    Attributes whose class is archived are skipped, so callers never see them
    even though the rows are still stored.
    """
    pairs = (
        (attribute.attribute_class.name, attribute.value)
        for attribute in entity.attributes
        if not attribute.attribute_class.archived
    )
    return Person(
        id=entity.id,
        environment_id=entity.environment_id,
        attributes=attributes_to_dict(pairs),
        created_at=entity.created_at,
        updated_at=entity.updated_at,
    )

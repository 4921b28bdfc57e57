"""
People use cases returning explicit results.

Routers and scripts call these instead of catching repository exceptions:
every known failure comes back as ``Failure(kind, message)``; anything the
repository does not classify still raises.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Generic, Optional, TypeVar, Union

from people_api.core.request_context import RequestContext
from people_api.domain.errors import PersonError
from people_api.domain.person import AttributeValue, Person
from people_api.repositories.person_repository import PersonRepository

T = TypeVar("T")

FAILURE_KINDS = ("validation", "database", "not_found", "configuration")


@dataclass(frozen=True)
class Ok(Generic[T]):
    value: T

    ok = True


@dataclass(frozen=True)
class Failure:
    kind: str
    message: str

    ok = False


Result = Union[Ok[T], Failure]


def _attempt(call: Callable[[], T]) -> Result:
    try:
        return Ok(call())
    except PersonError as exc:
        return Failure(exc.kind, exc.message)


class PersonService:
    """Thin use-case layer over PersonRepository."""

    def __init__(self, repository: PersonRepository) -> None:
        self.repository = repository

    def get(self, person_id: str, ctx: RequestContext | None = None) -> Result:
        return _attempt(lambda: self.repository.get(person_id, ctx))

    def get_cached(self, person_id: str) -> Result:
        return _attempt(lambda: self.repository.get_cached(person_id))

    def list(self, environment_id: str, ctx: RequestContext | None = None) -> Result:
        return _attempt(lambda: self.repository.list(environment_id, ctx))

    def create(self, environment_id: str) -> Result:
        return _attempt(lambda: self.repository.create(environment_id))

    def delete(self, person_id: str) -> Result:
        return _attempt(lambda: self.repository.delete(person_id))

    def get_or_create_by_user_id(self, user_id: str, environment_id: str) -> Result:
        return _attempt(lambda: self.repository.get_or_create_by_user_id(user_id, environment_id))

    def update_attribute(self, person_id: str, attribute_class_id: str, value: AttributeValue) -> Result:
        return _attempt(lambda: self.repository.update_attribute(person_id, attribute_class_id, value))

    def get_monthly_active_count(self, environment_id: str) -> Result:
        return _attempt(lambda: self.repository.get_monthly_active_count(environment_id))


def person_payload(person: Optional[Person]) -> Optional[dict[str, Any]]:
    return person.to_dict() if person is not None else None

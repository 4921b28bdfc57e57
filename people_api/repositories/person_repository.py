"""
Data access for people.

PersonRepository is the only place that talks to the store about Person rows.
It maps stored rows to the ``Person`` domain shape, rewraps the store's
operational failures into ``DatabaseError`` and invalidates the shared cache
whenever a person changes.

Reads can be memoized two ways:

- per request, by passing a ``RequestContext`` (``get``/``list``);
- process-wide, through the injected ``TagCache`` (``get_cached`` and the
  monthly active count).

Multi-step operations are not wrapped in a transaction. In particular
``get_or_create_by_user_id`` checks and then creates, so two concurrent calls
for the same user id can both create a person.
"""
from __future__ import annotations

import logging
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import Callable, Iterator, Optional

from sqlalchemy import delete, func, select
from sqlalchemy.exc import DBAPIError
from sqlalchemy.orm import selectinload

from people_api.core.cache import TagCache
from people_api.core.config import Settings, get_settings
from people_api.core.request_context import RequestContext
from people_api.db.models import Attribute, AttributeClass, Person as PersonRow, PersonSession
from people_api.db.session import get_session
from people_api.domain.errors import (
    ConfigurationError,
    DatabaseError,
    ResourceNotFoundError,
    ValidationError,
)
from people_api.domain.ids import validate_ids
from people_api.domain.person import AttributeValue, Person, transform_person
from people_api.repositories.sql_repository import SQLRepository

logger = logging.getLogger(__name__)

USER_ID_ATTRIBUTE = "userId"
GENERIC_DB_MESSAGE = "Database operation failed"


@contextmanager
def _store_errors(message: Optional[str] = GENERIC_DB_MESSAGE) -> Iterator[None]:
    """Rewrap store operational failures; ``message=None`` keeps the original text."""
    try:
        yield
    except DBAPIError as exc:
        logger.warning("Store operation failed: %s", exc)
        raise DatabaseError(message or str(exc)) from exc


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def month_start(now: datetime) -> datetime:
    """First instant of now's calendar month, in UTC. Naive values are read as UTC."""
    if now.tzinfo is None:
        now = now.replace(tzinfo=timezone.utc)
    now = now.astimezone(timezone.utc)
    return now.replace(day=1, hour=0, minute=0, second=0, microsecond=0)


def person_cache_key(person_id: str) -> list[str]:
    return ["person", person_id]


def monthly_active_cache_key(environment_id: str) -> str:
    return f"env-{environment_id}-mau"


def _select_person():
    return select(PersonRow).options(
        selectinload(PersonRow.attributes).selectinload(Attribute.attribute_class)
    )


class PersonRepository:
    """CRUD and lookups for people, with cache invalidation on every write."""

    def __init__(
        self,
        cache: TagCache,
        attribute_classes: SQLRepository | None = None,
        *,
        session_factory=get_session,
        clock: Callable[[], datetime] = _utc_now,
        settings: Settings | None = None,
    ) -> None:
        self._cache = cache
        self._session = session_factory
        self._attribute_classes = attribute_classes or SQLRepository(session_factory)
        self._clock = clock
        self.settings = settings or get_settings()

    # -------------------------------------- reads --------------------------------------
    def get(self, person_id: str, ctx: RequestContext | None = None) -> Optional[Person]:
        validate_ids(person_id)
        if ctx is not None:
            return ctx.memoize(("person.get", person_id), lambda: self._fetch(person_id))
        return self._fetch(person_id)

    def get_cached(self, person_id: str) -> Optional[Person]:
        validate_ids(person_id)
        return self._cache.run_cached(
            person_cache_key(person_id),
            self.settings.person_cache_ttl_seconds,
            [person_id],
            lambda: self._fetch(person_id),
        )

    def list(self, environment_id: str, ctx: RequestContext | None = None) -> list[Person]:
        validate_ids(environment_id)
        if ctx is not None:
            return ctx.memoize(("person.list", environment_id), lambda: self._fetch_all(environment_id))
        return self._fetch_all(environment_id)

    def get_monthly_active_count(self, environment_id: str) -> int:
        validate_ids(environment_id)
        key = monthly_active_cache_key(environment_id)
        return self._cache.run_cached(
            [key],
            self.settings.active_count_cache_ttl_seconds,
            [key],
            lambda: self._count_monthly_active(environment_id),
        )

    # -------------------------------------- writes --------------------------------------
    def create(self, environment_id: str) -> Person:
        validate_ids(environment_id)
        with _store_errors(message=None):
            with self._session() as session:
                entity = PersonRow(environment_id=environment_id)
                session.add(entity)
                session.commit()
                person = self._reload(session, entity.id)

        logger.info("Created person %s in environment %s", person.id, environment_id)
        self._cache.invalidate(person.id)
        return person

    def delete(self, person_id: str) -> None:
        validate_ids(person_id)
        with _store_errors():
            with self._session() as session:
                result = session.execute(delete(PersonRow).where(PersonRow.id == person_id))
                session.commit()
                deleted = result.rowcount
        if not deleted:
            logger.warning("Delete found no person %s", person_id)
            raise DatabaseError(GENERIC_DB_MESSAGE)

        logger.info("Deleted person %s", person_id)
        self._cache.invalidate(person_id)

    def get_or_create_by_user_id(self, user_id: str, environment_id: str) -> Person:
        if not isinstance(user_id, str) or not user_id:
            raise ValidationError(f"Invalid user id: {user_id!r}")
        validate_ids(environment_id)

        with _store_errors():
            existing = self._find_by_user_id(user_id, environment_id)
        if existing is not None:
            return existing

        with _store_errors():
            attribute_class = self._attribute_classes.get_attribute_class_by_name(environment_id, USER_ID_ATTRIBUTE)
        if attribute_class is None:
            raise ConfigurationError(
                f"Attribute class {USER_ID_ATTRIBUTE!r} not found for environment {environment_id}"
            )

        with _store_errors():
            with self._session() as session:
                entity = PersonRow(environment_id=environment_id)
                entity.attributes.append(Attribute(attribute_class_id=attribute_class.id, value=user_id))
                session.add(entity)
                session.commit()
                person = self._reload(session, entity.id)

        logger.info("Created person %s for user id in environment %s", person.id, environment_id)
        self._cache.invalidate(person.id)
        return person

    def update_attribute(self, person_id: str, attribute_class_id: str, value: AttributeValue) -> None:
        validate_ids(person_id, attribute_class_id)
        with _store_errors():
            with self._session() as session:
                stmt = select(Attribute).where(
                    Attribute.attribute_class_id == attribute_class_id,
                    Attribute.person_id == person_id,
                )
                attribute = session.execute(stmt).scalar_one_or_none()
                if attribute is None:
                    session.add(
                        Attribute(
                            attribute_class_id=attribute_class_id,
                            person_id=person_id,
                            value=str(value),
                        )
                    )
                else:
                    attribute.value = str(value)
                    attribute.updated_at = self._clock()
                session.commit()

        self._cache.invalidate(person_id)

    # -------------------------------------- cache hooks --------------------------------------
    def invalidate_person(self, person_id: str) -> None:
        self._cache.invalidate(person_id)

    def invalidate_monthly_active_count(self, environment_id: str) -> None:
        self._cache.invalidate(monthly_active_cache_key(environment_id))

    # -------------------------------------- helpers --------------------------------------
    def _fetch(self, person_id: str) -> Optional[Person]:
        with _store_errors():
            with self._session() as session:
                entity = session.execute(_select_person().where(PersonRow.id == person_id)).scalar_one_or_none()
                if entity is None:
                    return None
                return transform_person(entity)

    def _fetch_all(self, environment_id: str) -> list[Person]:
        with _store_errors():
            with self._session() as session:
                rows = session.execute(_select_person().where(PersonRow.environment_id == environment_id)).scalars().all()
                if rows is None:
                    raise ResourceNotFoundError("Persons", "All Persons")
                return [transform_person(row) for row in rows]

    def _find_by_user_id(self, user_id: str, environment_id: str) -> Optional[Person]:
        with self._session() as session:
            stmt = (
                _select_person()
                .join(PersonRow.attributes)
                .join(Attribute.attribute_class)
                .where(
                    PersonRow.environment_id == environment_id,
                    AttributeClass.name == USER_ID_ATTRIBUTE,
                    Attribute.value == user_id,
                )
                .order_by(PersonRow.created_at)
                .limit(1)
            )
            entity = session.execute(stmt).scalars().first()
            return transform_person(entity) if entity is not None else None

    def _count_monthly_active(self, environment_id: str) -> int:
        since = month_start(self._clock())
        with _store_errors():
            with self._session() as session:
                stmt = (
                    select(func.count(func.distinct(PersonRow.id)))
                    .join(PersonRow.sessions)
                    .where(
                        PersonRow.environment_id == environment_id,
                        PersonSession.created_at >= since,
                    )
                )
                return int(session.execute(stmt).scalar_one())

    @staticmethod
    def _reload(session, person_id: str) -> Person:
        stmt = _select_person().where(PersonRow.id == person_id).execution_options(populate_existing=True)
        return transform_person(session.execute(stmt).scalar_one())

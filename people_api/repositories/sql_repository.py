"""High-level data access helpers backed by SQLAlchemy."""
from __future__ import annotations

from datetime import datetime, timezone
from typing import Optional

from sqlalchemy import func, select, update

from people_api.db.models import (
    Attribute,
    AttributeClass,
    Environment,
    PersonSession,
)
from people_api.db.session import get_session


class SQLRepository:
    """CRUD helpers for environments, attribute classes and person sessions."""

    def __init__(self, session_factory=get_session) -> None:
        self._session = session_factory

    # -------------------------- environments --------------------------
    def create_environment(self, environment_id: str | None = None) -> Environment:
        entity = Environment(id=environment_id) if environment_id else Environment()
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def get_environment(self, environment_id: str) -> Optional[Environment]:
        with self._session() as session:
            return session.get(Environment, environment_id)

    # -------------------------- attribute classes --------------------------
    def create_attribute_class(
        self,
        environment_id: str,
        name: str,
        *,
        description: str | None = None,
        archived: bool = False,
    ) -> AttributeClass:
        entity = AttributeClass(
            environment_id=environment_id,
            name=name,
            description=description,
            archived=archived,
        )
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

    def get_attribute_class_by_name(self, environment_id: str, name: str) -> Optional[AttributeClass]:
        with self._session() as session:
            stmt = select(AttributeClass).where(
                AttributeClass.environment_id == environment_id,
                AttributeClass.name == name,
            )
            return session.execute(stmt).scalar_one_or_none()

    def get_attribute_classes(self, environment_id: str) -> list[AttributeClass]:
        with self._session() as session:
            stmt = (
                select(AttributeClass)
                .where(AttributeClass.environment_id == environment_id)
                .order_by(AttributeClass.created_at)
            )
            return session.execute(stmt).scalars().all()

    def archive_attribute_class(self, attribute_class_id: str, archived: bool = True) -> None:
        with self._session() as session:
            stmt = (
                update(AttributeClass)
                .where(AttributeClass.id == attribute_class_id)
                .values(archived=archived, updated_at=datetime.now(timezone.utc))
            )
            session.execute(stmt)
            session.commit()

    def count_attributes(self, person_id: str, attribute_class_id: str | None = None) -> int:
        with self._session() as session:
            stmt = select(func.count(Attribute.id)).where(Attribute.person_id == person_id)
            if attribute_class_id:
                stmt = stmt.where(Attribute.attribute_class_id == attribute_class_id)
            return int(session.execute(stmt).scalar_one())

    # -------------------------- person sessions --------------------------
    def create_person_session(self, person_id: str, created_at: datetime | None = None) -> PersonSession:
        if created_at is None:
            created_at = datetime.now(timezone.utc)
        elif created_at.tzinfo is None:
            created_at = created_at.replace(tzinfo=timezone.utc)
        else:
            # SQLite drops the offset, so store UTC wall time
            created_at = created_at.astimezone(timezone.utc)
        entity = PersonSession(person_id=person_id, created_at=created_at)
        with self._session() as session:
            session.add(entity)
            session.commit()
            session.refresh(entity)
            return entity

"""SQLAlchemy models for environments, people and their attributes."""
from __future__ import annotations

from sqlalchemy import (
    Boolean,
    Column,
    DateTime,
    ForeignKey,
    String,
    Text,
    UniqueConstraint,
    func,
)
from sqlalchemy.orm import relationship

from people_api.domain.ids import new_id

from .session import Base


class Environment(Base):
    __tablename__ = "environments"

    id = Column(String(32), primary_key=True, default=new_id)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    people = relationship("Person", back_populates="environment", cascade="all,delete-orphan", passive_deletes=True)
    attribute_classes = relationship(
        "AttributeClass", back_populates="environment", cascade="all,delete-orphan", passive_deletes=True
    )


class Person(Base):
    __tablename__ = "people"

    id = Column(String(32), primary_key=True, default=new_id)
    environment_id = Column(String(32), ForeignKey("environments.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    environment = relationship("Environment", back_populates="people")
    attributes = relationship(
        "Attribute",
        back_populates="person",
        cascade="all,delete-orphan",
        passive_deletes=True,
        order_by="Attribute.created_at",
    )
    sessions = relationship("PersonSession", back_populates="person", cascade="all,delete-orphan", passive_deletes=True)


class AttributeClass(Base):
    __tablename__ = "attribute_classes"
    __table_args__ = (UniqueConstraint("environment_id", "name", name="uq_attribute_class_env_name"),)

    id = Column(String(32), primary_key=True, default=new_id)
    environment_id = Column(String(32), ForeignKey("environments.id", ondelete="CASCADE"), nullable=False, index=True)
    name = Column(String(255), nullable=False)
    description = Column(Text, nullable=True)
    archived = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    environment = relationship("Environment", back_populates="attribute_classes")
    attributes = relationship("Attribute", back_populates="attribute_class", cascade="all,delete-orphan", passive_deletes=True)


class Attribute(Base):
    __tablename__ = "attributes"
    __table_args__ = (UniqueConstraint("attribute_class_id", "person_id", name="uq_attribute_class_person"),)

    id = Column(String(32), primary_key=True, default=new_id)
    attribute_class_id = Column(String(32), ForeignKey("attribute_classes.id", ondelete="CASCADE"), nullable=False)
    person_id = Column(String(32), ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True)
    value = Column(Text, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    attribute_class = relationship("AttributeClass", back_populates="attributes")
    person = relationship("Person", back_populates="attributes")


class PersonSession(Base):
    """A visit by a person; only its timestamp matters here (monthly active count)."""

    __tablename__ = "sessions"

    id = Column(String(32), primary_key=True, default=new_id)
    person_id = Column(String(32), ForeignKey("people.id", ondelete="CASCADE"), nullable=False, index=True)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)

    person = relationship("Person", back_populates="sessions")

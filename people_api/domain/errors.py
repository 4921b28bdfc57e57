"""
Exceptions raised by the people data-access layer.

Only ``DatabaseError`` wraps a store failure; anything the store client
raises outside its operational category propagates untouched.
"""

from __future__ import annotations


class PersonError(Exception):
    """Base class for people data-access errors."""

    kind = "error"

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(PersonError):
    """An identifier failed its format check; no store call was made."""

    kind = "validation"


class DatabaseError(PersonError):
    """The store reported an operational failure (constraint, connection, ...)."""

    kind = "database"


class ResourceNotFoundError(PersonError):
    kind = "not_found"

    def __init__(self, resource: str, identifier: str | None):
        super().__init__(f"{resource} with ID {identifier} not found")
        self.resource = resource
        self.identifier = identifier


class ConfigurationError(PersonError):
    """The environment is missing setup the operation requires (e.g. the userId attribute class)."""

    kind = "configuration"

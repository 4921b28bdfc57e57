"""Identifier format rules (cuid2-shaped ids) and generation."""
from __future__ import annotations

import re
import secrets
import string

from people_api.domain.errors import ValidationError

ID_PATTERN = re.compile(r"[a-z][0-9a-z]{1,31}")
ID_LENGTH = 25

_FIRST_CHARS = string.ascii_lowercase
_BODY_CHARS = string.ascii_lowercase + string.digits


def is_valid_id(value: object) -> bool:
    """Return True when value is a lowercase cuid2-style identifier."""
    if not isinstance(value, str) or not value:
        return False
    return bool(ID_PATTERN.fullmatch(value))


def validate_ids(*values: object) -> None:
    """Raise ValidationError for the first malformed identifier."""
    for value in values:
        if not is_valid_id(value):
            raise ValidationError(f"Invalid id: {value!r}")


def new_id() -> str:
    head = secrets.choice(_FIRST_CHARS)
    body = "".join(secrets.choice(_BODY_CHARS) for _ in range(ID_LENGTH - 1))
    return head + body

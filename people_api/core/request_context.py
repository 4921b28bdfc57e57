"""Request-scoped memo table shared by every repository call in one request."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Callable, Dict, Hashable, TypeVar

from fastapi import Request

T = TypeVar("T")


@dataclass
class RequestContext:
    """Collapses repeated reads inside one request to a single store round-trip."""

    memo: Dict[Hashable, Any] = field(default_factory=dict)

    def memoize(self, key: Hashable, compute: Callable[[], T]) -> T:
        if key in self.memo:
            return self.memo[key]
        value = compute()
        self.memo[key] = value
        return value

    def forget(self, key: Hashable) -> None:
        self.memo.pop(key, None)


def get_request_context(request: Request) -> RequestContext:
    """FastAPI dependency: one RequestContext per incoming request."""
    ctx = getattr(request.state, "people_context", None)
    if ctx is None:
        ctx = RequestContext()
        request.state.people_context = ctx
    return ctx

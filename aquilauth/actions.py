"""
AquilAuth Clients - HTTP Actions

An HttpAction is the structured directive a client hands back instead of
writing the response itself. The integration layer commits it to the
request context exactly once and stops normal processing.

Operations that can either produce a value or demand an HTTP action
return an ``Outcome``: ``Proceed`` carries the value (``None`` meaning
"absent"), ``Act`` carries the action. ``Outcome.fold`` makes callers
deal with both branches.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Callable, Generic, TypeVar, Union


T = TypeVar("T")
R = TypeVar("R")


# Status codes fixed by the client contract
HTTP_OK = 200
HTTP_FOUND = 302
HTTP_UNAUTHORIZED = 401
HTTP_FORBIDDEN = 403

_REDIRECT_STATUSES = frozenset({301, 302, 303, 307, 308})


# ============================================================================
# HttpAction
# ============================================================================

@dataclass(frozen=True)
class HttpAction:
    """
    Response directive: status code, optional redirect target, optional body.

    Single-use and never persisted. Once produced it fully determines the
    HTTP response for the request.
    """
    status: int
    location: str | None = None
    body: str = ""
    headers: tuple[tuple[str, str], ...] = field(default_factory=tuple)

    def __post_init__(self):
        if not 100 <= self.status <= 599:
            raise ValueError(f"Invalid HTTP status code: {self.status}")
        if self.status in _REDIRECT_STATUSES and not self.location:
            raise ValueError("Redirect action requires a location")

    @property
    def is_redirect(self) -> bool:
        return self.status in _REDIRECT_STATUSES

    def header(self, name: str) -> str | None:
        """Get an extra header value (case-insensitive)."""
        lowered = name.lower()
        for key, value in self.headers:
            if key.lower() == lowered:
                return value
        return None

    @classmethod
    def redirect(cls, location: str, status: int = HTTP_FOUND) -> HttpAction:
        """Redirect the browser to ``location``."""
        if status not in _REDIRECT_STATUSES:
            raise ValueError(f"Not a redirect status: {status}")
        return cls(status=status, location=location)

    @classmethod
    def unauthorized(cls, realm: str | None = None, body: str = "") -> HttpAction:
        """
        Authentication required (401).

        With a realm, adds a Basic challenge so the browser shows its
        native credential prompt.
        """
        headers: tuple[tuple[str, str], ...] = ()
        if realm is not None:
            headers = (("WWW-Authenticate", f'Basic realm="{realm}"'),)
        return cls(status=HTTP_UNAUTHORIZED, body=body, headers=headers)

    @classmethod
    def forbidden(cls, body: str = "") -> HttpAction:
        """Access forbidden after a known prior failure (403)."""
        return cls(status=HTTP_FORBIDDEN, body=body)

    @classmethod
    def ok(cls, body: str = "") -> HttpAction:
        """Acknowledge an out-of-band provider notification (200)."""
        return cls(status=HTTP_OK, body=body)

    def __str__(self) -> str:
        if self.location:
            return f"HttpAction({self.status} -> {self.location})"
        return f"HttpAction({self.status})"


# ============================================================================
# Outcome
# ============================================================================

@dataclass(frozen=True)
class Proceed(Generic[T]):
    """Normal result. ``value`` may be None (absent)."""
    value: T

    is_action = False

    @property
    def action(self) -> HttpAction | None:
        return None

    def fold(self, on_value: Callable[[T], R], on_action: Callable[[HttpAction], R]) -> R:
        return on_value(self.value)


@dataclass(frozen=True)
class Act:
    """The caller must commit ``action`` and stop processing."""
    action: HttpAction

    is_action = True

    @property
    def value(self):
        raise TypeError(f"Outcome is an HTTP action ({self.action}), not a value")

    def fold(self, on_value: Callable[[object], R], on_action: Callable[[HttpAction], R]) -> R:
        return on_action(self.action)


Outcome = Union[Proceed[T], Act]


__all__ = [
    "HTTP_OK",
    "HTTP_FOUND",
    "HTTP_UNAUTHORIZED",
    "HTTP_FORBIDDEN",
    "HttpAction",
    "Proceed",
    "Act",
    "Outcome",
]

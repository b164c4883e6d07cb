"""
AquilAuth Clients - Core Types

Credentials, user profiles, and the collaborator protocols consumed by
authentication clients.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from types import MappingProxyType
from typing import TYPE_CHECKING, Any, Mapping, Protocol, runtime_checkable

if TYPE_CHECKING:
    from .context import WebContext


# ============================================================================
# Credentials
# ============================================================================

@dataclass(frozen=True)
class Credentials:
    """
    Proof of a completed authentication attempt.

    Opaque to the client contract: protocol variants subclass this and
    add their own evidence fields (ticket, code, assertion, ...).
    Immutable once created. Absent credentials are represented by None.
    """
    client_name: str


# ============================================================================
# User Profile
# ============================================================================

PROFILE_ID_SEPARATOR = "#"


@dataclass(frozen=True)
class UserProfile:
    """
    Resolved identity produced from validated credentials.

    Design:
    - Stable identifier supplied by the provider
    - Tagged with the client that produced it
    - Read-only attribute mapping
    """
    id: str
    client_name: str
    attributes: Mapping[str, Any] = field(default_factory=dict)

    def __post_init__(self):
        if not self.id:
            raise ValueError("UserProfile requires a non-empty id")
        object.__setattr__(self, "attributes", MappingProxyType(dict(self.attributes)))

    @property
    def typed_id(self) -> str:
        """Identifier unique across clients: ``<client_name>#<id>``."""
        return f"{self.client_name}{PROFILE_ID_SEPARATOR}{self.id}"

    def get_attribute(self, key: str, default: Any = None) -> Any:
        """Get attribute value with default."""
        return self.attributes.get(key, default)

    def to_dict(self) -> dict[str, Any]:
        """Serialize to dict (for session storage)."""
        return {
            "id": self.id,
            "client_name": self.client_name,
            "attributes": dict(self.attributes),
        }

    @classmethod
    def from_dict(cls, data: Mapping[str, Any]) -> UserProfile:
        """Deserialize from dict."""
        return cls(
            id=data["id"],
            client_name=data["client_name"],
            attributes=data.get("attributes", {}),
        )


# ============================================================================
# Collaborators
# ============================================================================

@runtime_checkable
class Authenticator(Protocol):
    """
    Validates raw credentials.

    Returns True when the credentials are valid. Invalid credentials are
    a normal outcome, not a fault.
    """

    async def validate(self, credentials: Credentials, context: WebContext) -> bool:
        ...


@runtime_checkable
class ProfileBuilder(Protocol):
    """Maps validated credentials to a user profile."""

    async def build(self, credentials: Credentials, context: WebContext) -> UserProfile:
        ...


class AcceptAllAuthenticator:
    """Authenticator for protocols whose callback parsing already validates."""

    async def validate(self, credentials: Credentials, context: WebContext) -> bool:
        return True


__all__ = [
    "Credentials",
    "UserProfile",
    "Authenticator",
    "ProfileBuilder",
    "AcceptAllAuthenticator",
]

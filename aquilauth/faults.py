"""
AquilAuth Clients - Faults

Structured fault types for genuine failures of authentication clients.

HTTP Actions and absent credentials/profiles are NOT faults. They are
normal protocol outcomes and travel through ordinary return values.
Faults are reserved for things that went wrong: a malformed provider
response, an unreachable provider, a misconfigured registry.
"""

from __future__ import annotations

from enum import Enum
from typing import Any, Optional


# ============================================================================
# Severity & Domain
# ============================================================================

class Severity(str, Enum):
    """
    Fault severity levels.

    Determines logging level at the integration layer.
    """
    INFO = "info"
    WARN = "warn"
    ERROR = "error"
    FATAL = "fatal"

    # Aliases
    LOW = INFO
    MEDIUM = WARN
    HIGH = ERROR
    CRITICAL = FATAL


class FaultDomain:
    """
    Fault domains (taxonomy).

    Identifies the functional area where a fault occurred.
    """

    def __init__(self, name: str, description: str = ""):
        self.name = name
        self.value = name
        self.description = description

    def __str__(self) -> str:
        return self.name

    def __repr__(self) -> str:
        return f"FaultDomain(name='{self.name}')"

    def __eq__(self, other: Any) -> bool:
        if isinstance(other, FaultDomain):
            return self.name == other.name
        return str(self) == str(other)

    def __hash__(self) -> int:
        return hash(self.name)


FaultDomain.CONFIG = FaultDomain("config", "Configuration errors")
FaultDomain.IO = FaultDomain("io", "I/O operations")
FaultDomain.SECURITY = FaultDomain("security", "Security and auth")
FaultDomain.CLIENTS = FaultDomain("clients", "Authentication client errors")


DOMAIN_DEFAULTS = {
    FaultDomain.CONFIG: {"severity": Severity.FATAL, "retryable": False},
    FaultDomain.IO: {"severity": Severity.WARN, "retryable": True},
    FaultDomain.SECURITY: {"severity": Severity.ERROR, "retryable": False},
    FaultDomain.CLIENTS: {"severity": Severity.ERROR, "retryable": False},
}


# ============================================================================
# Fault - Base Class
# ============================================================================

class Fault(Exception):
    """
    Base fault class - structured, typed fault object.

    Subclasses declare ``code``, ``message`` and ``domain`` as class
    attributes; anything passed as keyword context lands in ``metadata``.

    Attributes:
        code: Stable machine-readable identifier
        message: Human-readable summary
        severity: Fault severity
        domain: Fault domain
        retryable: Whether the failing operation may be retried
        public: Whether safe to expose to the end user
        metadata: Additional context data

    Example:
        ```python
        raise CLIENT_NOT_FOUND(client_name="github")
        ```
    """

    code: str | None = None
    message: str | None = None
    domain: FaultDomain | None = None
    severity: Severity | None = None
    retryable: bool | None = None
    public: bool = False

    def __init__(
        self,
        code: str | None = None,
        message: str | None = None,
        *,
        domain: FaultDomain | None = None,
        severity: Optional[Severity] = None,
        retryable: Optional[bool] = None,
        public: Optional[bool] = None,
        metadata: Optional[dict[str, Any]] = None,
        **context: Any,
    ):
        self.code = code if code is not None else type(self).code
        self.message = message if message is not None else type(self).message
        self.domain = domain if domain is not None else type(self).domain

        if self.code is None or self.message is None or self.domain is None:
            raise TypeError(f"{self.__class__.__name__} missing required code, message, or domain")

        super().__init__(self.message)

        defaults = DOMAIN_DEFAULTS.get(self.domain, {"severity": Severity.ERROR, "retryable": False})
        self.severity = severity or type(self).severity or defaults["severity"]
        if retryable is not None:
            self.retryable = retryable
        elif type(self).retryable is not None:
            self.retryable = type(self).retryable
        else:
            self.retryable = defaults["retryable"]

        self.public = public if public is not None else type(self).public
        self.metadata = dict(metadata or {})
        self.metadata.update(context)

    def __str__(self) -> str:
        return f"[{self.code}] {self.message}"

    def __repr__(self) -> str:
        return (
            f"Fault(code={self.code!r}, domain={self.domain.value}, "
            f"severity={self.severity.value}, public={self.public})"
        )

    def to_dict(self) -> dict[str, Any]:
        return {
            "code": self.code,
            "message": self.message,
            "domain": self.domain.value,
            "severity": self.severity.value,
            "retryable": self.retryable,
            "metadata": self.metadata,
        }


# ============================================================================
# Client Registry Faults
# ============================================================================

class CLIENT_NOT_FOUND(Fault):
    """No client registered under the requested name."""
    domain = FaultDomain.CLIENTS
    code = "CLIENT_001"
    severity = Severity.WARN
    message = "Authentication client not found"
    public = True

    def __init__(self, client_name: str | None = None, **context):
        super().__init__(client_name=client_name, **context)


class CLIENT_NAME_MISSING(Fault):
    """Callback request does not name the client it is meant for."""
    domain = FaultDomain.CLIENTS
    code = "CLIENT_002"
    severity = Severity.WARN
    message = "Callback request carries no client name"
    public = True


class CLIENT_CONFIG_INVALID(Fault):
    """Client or registry configuration is invalid."""
    domain = FaultDomain.CONFIG
    code = "CLIENT_003"
    message = "Invalid authentication client configuration"

    def __init__(self, reason: str | None = None, **context):
        super().__init__(
            message=f"Invalid authentication client configuration: {reason}" if reason else None,
            reason=reason,
            **context,
        )


# ============================================================================
# Provider Faults
# ============================================================================

class PROVIDER_RESPONSE_INVALID(Fault):
    """Provider callback evidence could not be parsed."""
    domain = FaultDomain.SECURITY
    code = "CLIENT_010"
    message = "Malformed identity provider response"

    def __init__(self, client_name: str | None = None, reason: str | None = None, **context):
        super().__init__(client_name=client_name, reason=reason, **context)


class PROVIDER_UNAVAILABLE(Fault):
    """Identity provider could not be reached."""
    domain = FaultDomain.IO
    code = "CLIENT_011"
    message = "Identity provider unavailable"

    def __init__(self, client_name: str | None = None, reason: str | None = None, **context):
        super().__init__(client_name=client_name, reason=reason, **context)


# ============================================================================
# Request Context Faults
# ============================================================================

class ACTION_ALREADY_COMMITTED(Fault):
    """A second HTTP action was committed for the same request."""
    domain = FaultDomain.CLIENTS
    code = "CLIENT_020"
    severity = Severity.FATAL
    message = "An HTTP action has already been committed for this request"

    def __init__(self, status: int | None = None, **context):
        super().__init__(status=status, **context)


__all__ = [
    "Severity",
    "FaultDomain",
    "DOMAIN_DEFAULTS",
    "Fault",
    "CLIENT_NOT_FOUND",
    "CLIENT_NAME_MISSING",
    "CLIENT_CONFIG_INVALID",
    "PROVIDER_RESPONSE_INVALID",
    "PROVIDER_UNAVAILABLE",
    "ACTION_ALREADY_COMMITTED",
]

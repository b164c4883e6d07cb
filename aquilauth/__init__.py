"""
AquilAuth Clients - pluggable identity-provider authentication clients

Async-native authentication client contract with:
- Redirect / callback decision logic for direct and indirect protocols
- Structured HTTP actions instead of ad-hoc responses
- Explicit Outcome results (value or action) for credential retrieval
- Session-backed tracking of failed attempts
- Client registry selected by stable name
- ASGI integration layer

Design Philosophy:
1. Clients are immutable configuration, shared across requests
2. Per-request state lives in the WebContext and is passed explicitly
3. Control signals, absent values and faults never share a channel
4. Exactly one HTTP action is committed per request
"""

from .actions import (
    HTTP_FORBIDDEN,
    HTTP_FOUND,
    HTTP_OK,
    HTTP_UNAUTHORIZED,
    Act,
    HttpAction,
    Outcome,
    Proceed,
)
from .attempts import AttemptTracker
from .clients import BaseClient, Clients
from .config import ClientsConfig, ConfigLoader
from .context import AsgiWebContext, WebContext
from .core import (
    AcceptAllAuthenticator,
    Authenticator,
    Credentials,
    ProfileBuilder,
    UserProfile,
)
from .faults import (
    ACTION_ALREADY_COMMITTED,
    CLIENT_CONFIG_INVALID,
    CLIENT_NAME_MISSING,
    CLIENT_NOT_FOUND,
    PROVIDER_RESPONSE_INVALID,
    PROVIDER_UNAVAILABLE,
    Fault,
    FaultDomain,
    Severity,
)
from .flow import AuthFlow
from .middleware import ClientAuthMiddleware

__version__ = "0.1.0"

__all__ = [
    # Actions
    "HttpAction",
    "Outcome",
    "Proceed",
    "Act",
    "HTTP_OK",
    "HTTP_FOUND",
    "HTTP_UNAUTHORIZED",
    "HTTP_FORBIDDEN",
    # Core
    "Credentials",
    "UserProfile",
    "Authenticator",
    "ProfileBuilder",
    "AcceptAllAuthenticator",
    # Context
    "WebContext",
    "AsgiWebContext",
    # Clients
    "BaseClient",
    "Clients",
    "AttemptTracker",
    # Integration
    "AuthFlow",
    "ClientAuthMiddleware",
    # Config
    "ClientsConfig",
    "ConfigLoader",
    # Faults
    "Fault",
    "FaultDomain",
    "Severity",
    "CLIENT_NOT_FOUND",
    "CLIENT_NAME_MISSING",
    "CLIENT_CONFIG_INVALID",
    "PROVIDER_RESPONSE_INVALID",
    "PROVIDER_UNAVAILABLE",
    "ACTION_ALREADY_COMMITTED",
]

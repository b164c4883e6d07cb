"""
Shared test fixtures and helpers for the AquilAuth clients test suite.
"""

from dataclasses import dataclass
from typing import Dict, List, Optional

import pytest

from aquilauth._datastructures import with_params
from aquilauth.actions import Act, HttpAction, Proceed
from aquilauth.clients import BaseClient, Clients
from aquilauth.context import AsgiWebContext
from aquilauth.core import Credentials, UserProfile


PROVIDER_AUTH_URL = "https://provider.example/auth"
IDP_SSO_URL = "https://idp.example/sso"
CALLBACK_URL = "/callback"


# ============================================================================
# ASGI Helpers
# ============================================================================


def make_scope(
    method: str = "GET",
    path: str = "/",
    query_string: str = "",
    headers: Optional[List[tuple]] = None,
    scheme: str = "http",
    session: Optional[dict] = None,
) -> dict:
    """Build a minimal ASGI HTTP scope."""
    raw_headers = []
    for name, value in headers or []:
        raw_headers.append(
            (
                name.encode("latin-1") if isinstance(name, str) else name,
                value.encode("latin-1") if isinstance(value, str) else value,
            )
        )
    scope = {
        "type": "http",
        "asgi": {"version": "3.0"},
        "http_version": "1.1",
        "method": method,
        "path": path,
        "raw_path": path.encode("utf-8"),
        "query_string": query_string.encode("utf-8"),
        "headers": raw_headers,
        "scheme": scheme,
        "server": ("127.0.0.1", 8000),
        "client": ("127.0.0.1", 12345),
        "root_path": "",
    }
    if session is not None:
        scope["session"] = session
    return scope


class ResponseCapture:
    """Captures what gets sent through ASGI ``send``."""

    def __init__(self):
        self.messages: list = []
        self.status: Optional[int] = None
        self.headers: Dict[str, str] = {}
        self.body = b""

    async def __call__(self, message: dict):
        self.messages.append(message)
        if message["type"] == "http.response.start":
            self.status = message["status"]
            for name, value in message.get("headers", []):
                self.headers[name.decode("latin-1").lower()] = value.decode("latin-1")
        elif message["type"] == "http.response.body":
            self.body += message.get("body", b"")


def make_context(
    path: str = "/",
    query_string: str = "",
    headers: Optional[List[tuple]] = None,
    session: Optional[dict] = None,
):
    """Build an AsgiWebContext plus its response capture."""
    send = ResponseCapture()
    scope = make_scope(path=path, query_string=query_string, headers=headers)
    context = AsgiWebContext(scope, send, session=session if session is not None else {})
    return context, send


# ============================================================================
# Fake protocol collaborators
# ============================================================================


@dataclass(frozen=True)
class TokenCredentials(Credentials):
    token: str = ""


class TokenAuthenticator:
    """Accepts tokens present in its table."""

    def __init__(self, users: Dict[str, str]):
        self.users = users
        self.calls = 0

    async def validate(self, credentials, context) -> bool:
        self.calls += 1
        return credentials.token in self.users


class TokenProfileBuilder:
    """Builds profiles whose id is the user mapped to the token."""

    def __init__(self, users: Dict[str, str]):
        self.users = users
        self.calls = 0

    async def build(self, credentials, context) -> UserProfile:
        self.calls += 1
        return UserProfile(
            id=self.users[credentials.token],
            client_name=credentials.client_name,
            attributes={"token": credentials.token},
        )


# ============================================================================
# Fake protocol clients
# ============================================================================


class OAuthLikeClient(BaseClient[TokenCredentials, UserProfile]):
    """Direct client: provider login reachable in one hop, evidence in ?code=."""

    async def provider_redirect_url(self, context):
        return PROVIDER_AUTH_URL

    async def extract_credentials(self, context):
        code = context.request_parameter("code")
        if not code:
            return Proceed(None)
        return Proceed(TokenCredentials(client_name=self.name, token=code))


class SamlLikeClient(BaseClient[TokenCredentials, UserProfile]):
    """Indirect client: evidence posted back as ?SAMLResponse=."""

    indirect = True

    async def provider_redirect_url(self, context):
        return IDP_SSO_URL

    async def extract_credentials(self, context):
        assertion = context.request_parameter("SAMLResponse")
        if not assertion:
            return Proceed(None)
        return Proceed(TokenCredentials(client_name=self.name, token=assertion))


class CasLikeClient(SamlLikeClient):
    """Indirect client acknowledging provider-initiated logout with a 200."""

    async def provider_redirect_url(self, context):
        return with_params("https://cas.example/login", service=self.callback_location())

    async def extract_credentials(self, context):
        if context.request_parameter("logoutRequest") is not None:
            return Act(HttpAction.ok())
        ticket = context.request_parameter("ticket")
        if not ticket:
            return Proceed(None)
        return Proceed(TokenCredentials(client_name=self.name, token=ticket))


class BasicLikeClient(BaseClient[TokenCredentials, UserProfile]):
    """Direct client expecting credentials inline in the Authorization header."""

    async def provider_redirect_url(self, context):
        return with_params(self.callback_url, **{self.client_name_parameter: self.name})

    async def extract_credentials(self, context):
        header = context.request_header("authorization")
        if header is None:
            return Act(HttpAction.unauthorized(realm="aquilauth"))
        return Proceed(TokenCredentials(client_name=self.name, token=header))


class BrokenClient(OAuthLikeClient):
    """Client whose callback parsing blows up."""

    async def extract_credentials(self, context):
        raise ValueError("unexpected end of XML document")


USERS = {"good-code": "alice", "good-assertion": "bob", "ST-1": "carol", "Basic abc": "dave"}


def build_client(cls, name: str, **kwargs):
    kwargs.setdefault("callback_url", CALLBACK_URL)
    return cls(
        name,
        authenticator=TokenAuthenticator(USERS),
        profile_builder=TokenProfileBuilder(USERS),
        **kwargs,
    )


@pytest.fixture
def direct_client():
    return build_client(OAuthLikeClient, "oauth")


@pytest.fixture
def indirect_client():
    return build_client(SamlLikeClient, "saml")


@pytest.fixture
def cas_client():
    return build_client(CasLikeClient, "cas")


@pytest.fixture
def basic_client():
    return build_client(BasicLikeClient, "basic")


@pytest.fixture
def clients(direct_client, indirect_client, cas_client, basic_client):
    return Clients([direct_client, indirect_client, cas_client, basic_client], default="oauth")

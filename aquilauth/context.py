"""
AquilAuth Clients - Request Context

Abstraction over one inbound HTTP request/response pair and its session.
Clients read parameters, headers and session attributes through it; the
integration layer commits exactly one HttpAction to it.

A context is owned by the task handling its request and is never shared
across requests.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Mapping, MutableMapping, Optional, Protocol, runtime_checkable

from ._datastructures import Headers, MultiDict
from .actions import HttpAction
from .faults import ACTION_ALREADY_COMMITTED


logger = logging.getLogger("aquilauth.context")

DEFAULT_AJAX_HEADER = "X-Requested-With"
AJAX_HEADER_VALUE = "XMLHttpRequest"


@runtime_checkable
class WebContext(Protocol):
    """Request context contract consumed by clients and the auth flow."""

    @property
    def method(self) -> str: ...

    @property
    def path(self) -> str: ...

    @property
    def full_url(self) -> str: ...

    @property
    def committed(self) -> HttpAction | None: ...

    def request_parameter(self, name: str, default: Optional[str] = None) -> Optional[str]: ...

    def request_header(self, name: str, default: Optional[str] = None) -> Optional[str]: ...

    def is_ajax(self) -> bool: ...

    def session_get(self, key: str, default: Any = None) -> Any: ...

    def session_set(self, key: str, value: Any) -> None: ...

    def session_delete(self, key: str) -> None: ...

    async def commit(self, action: HttpAction) -> None: ...


class AsgiWebContext:
    """
    WebContext backed by an ASGI HTTP scope.

    The session is whatever mapping an upstream session middleware stored
    in ``scope["session"]``; without one, a throwaway per-request dict is
    used (nothing survives the request).

    Example:
        >>> ctx = AsgiWebContext(scope, send)
        >>> ctx.request_parameter("client_name")
        'cas'
        >>> await ctx.commit(HttpAction.redirect("https://sso.example/login"))
    """

    def __init__(
        self,
        scope: Mapping[str, Any],
        send: Callable[[dict], Awaitable[None]],
        session: Optional[MutableMapping[str, Any]] = None,
        *,
        ajax_header: str = DEFAULT_AJAX_HEADER,
    ):
        if scope.get("type") != "http":
            raise ValueError(f"AsgiWebContext requires an http scope, got {scope.get('type')!r}")

        self.scope = scope
        self._send = send
        if session is None:
            session = scope.get("session")
        self.session: MutableMapping[str, Any] = session if session is not None else {}
        self.ajax_header = ajax_header

        self._query_params: Optional[MultiDict] = None
        self._headers: Optional[Headers] = None
        self._committed: Optional[HttpAction] = None

    # ========================================================================
    # Request
    # ========================================================================

    @property
    def method(self) -> str:
        return self.scope.get("method", "GET")

    @property
    def path(self) -> str:
        return self.scope.get("path", "/")

    @property
    def query_string(self) -> str:
        return self.scope.get("query_string", b"").decode("utf-8")

    @property
    def query_params(self) -> MultiDict:
        if self._query_params is None:
            self._query_params = MultiDict.from_query_string(self.query_string)
        return self._query_params

    @property
    def headers(self) -> Headers:
        if self._headers is None:
            self._headers = Headers(raw=list(self.scope.get("headers", [])))
        return self._headers

    @property
    def full_url(self) -> str:
        """Absolute URL of the current request."""
        scheme = self.scope.get("scheme", "http")
        host = self.headers.get("host")
        if host is None:
            server = self.scope.get("server")
            if server:
                host_name, port = server
                default_port = 443 if scheme == "https" else 80
                host = host_name if port in (None, default_port) else f"{host_name}:{port}"
            else:
                host = "localhost"
        url = f"{scheme}://{host}{self.scope.get('root_path', '')}{self.path}"
        if self.query_string:
            url += f"?{self.query_string}"
        return url

    def request_parameter(self, name: str, default: Optional[str] = None) -> Optional[str]:
        """First query parameter value for ``name``."""
        return self.query_params.get(name, default)

    def request_header(self, name: str, default: Optional[str] = None) -> Optional[str]:
        return self.headers.get(name, default)

    def is_ajax(self) -> bool:
        """True for script-driven requests that cannot follow a full-page redirect."""
        value = self.headers.get(self.ajax_header)
        return value is not None and value.lower() == AJAX_HEADER_VALUE.lower()

    # ========================================================================
    # Session
    # ========================================================================

    def session_get(self, key: str, default: Any = None) -> Any:
        return self.session.get(key, default)

    def session_set(self, key: str, value: Any) -> None:
        self.session[key] = value

    def session_delete(self, key: str) -> None:
        self.session.pop(key, None)

    # ========================================================================
    # Response
    # ========================================================================

    @property
    def committed(self) -> HttpAction | None:
        """The action committed for this request, if any."""
        return self._committed

    async def commit(self, action: HttpAction) -> None:
        """
        Write ``action`` as the HTTP response.

        Raises:
            ACTION_ALREADY_COMMITTED: An action was already committed
        """
        if self._committed is not None:
            raise ACTION_ALREADY_COMMITTED(
                status=action.status,
                committed_status=self._committed.status,
            )
        self._committed = action

        body = action.body.encode("utf-8")
        headers = [
            (b"content-type", b"text/plain; charset=utf-8"),
            (b"content-length", str(len(body)).encode("latin-1")),
        ]
        if action.location:
            headers.append((b"location", action.location.encode("latin-1")))
        for name, value in action.headers:
            headers.append((name.lower().encode("latin-1"), value.encode("latin-1")))

        logger.debug(f"Committing {action} for {self.method} {self.path}")

        await self._send({
            "type": "http.response.start",
            "status": action.status,
            "headers": headers,
        })
        await self._send({
            "type": "http.response.body",
            "body": body,
            "more_body": False,
        })


__all__ = [
    "WebContext",
    "AsgiWebContext",
    "DEFAULT_AJAX_HEADER",
]

"""
AquilAuth Clients - ASGI middleware

Wires an AuthFlow into any ASGI application:
- the callback path is handled by the flow
- protected paths without a stored profile start authentication
- everything else reaches the wrapped app with the profile (if any)
  available as ``scope["state"]["profile"]``

Sessions come from an upstream session middleware through
``scope["session"]``. Without one, nothing survives between requests.
"""

from __future__ import annotations

import logging
from typing import Any, Awaitable, Callable, Iterable, Optional

from .actions import HttpAction
from .context import AsgiWebContext
from .faults import (
    CLIENT_NAME_MISSING,
    CLIENT_NOT_FOUND,
    PROVIDER_RESPONSE_INVALID,
    PROVIDER_UNAVAILABLE,
    Fault,
)
from .flow import AuthFlow


ASGIApp = Callable[[dict, Callable, Callable], Awaitable[None]]

FAULT_STATUS = {
    CLIENT_NAME_MISSING: 400,
    CLIENT_NOT_FOUND: 404,
    PROVIDER_RESPONSE_INVALID: 502,
    PROVIDER_UNAVAILABLE: 503,
}


class ClientAuthMiddleware:
    """
    ASGI middleware running the client authentication flow.

    Order in middleware stack:
    1. Session middleware (provides scope["session"])
    2. ClientAuthMiddleware (this one)
    3. Application
    """

    def __init__(
        self,
        app: ASGIApp,
        flow: AuthFlow,
        *,
        callback_path: Optional[str] = None,
        protected_paths: Iterable[str] = (),
        logout_path: Optional[str] = None,
        client_name: Optional[str] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.app = app
        self.flow = flow
        self.callback_path = callback_path if callback_path is not None else flow.config.callback_path
        self.protected_paths = tuple(p.rstrip("/") or "/" for p in protected_paths)
        self.logout_path = logout_path
        self.client_name = client_name
        self.logger = logger or logging.getLogger("aquilauth.middleware")

    def is_protected(self, path: str) -> bool:
        for prefix in self.protected_paths:
            if prefix == "/" or path == prefix or path.startswith(prefix + "/"):
                return True
        return False

    async def __call__(self, scope: dict, receive: Callable, send: Callable) -> None:
        if scope["type"] != "http":
            await self.app(scope, receive, send)
            return

        context = AsgiWebContext(scope, send, ajax_header=self.flow.config.ajax_header)

        try:
            if context.path == self.callback_path:
                await self.flow.callback(context)
                return

            if self.logout_path is not None and context.path == self.logout_path:
                self.flow.logout(context)
                await context.commit(HttpAction.redirect(self.flow.config.default_url))
                return

            profile = self.flow.profile(context)
            if profile is None and self.is_protected(context.path):
                await self.flow.start(context, self.client_name, protected_target=True)
                return
        except Fault as fault:
            await self._handle_fault(context, fault)
            return

        state: dict[str, Any] = scope.setdefault("state", {})
        state["profile"] = profile
        await self.app(scope, receive, send)

    async def _handle_fault(self, context: AsgiWebContext, fault: Fault) -> None:
        """Turn a fault into an error response, unless a response already went out."""
        if context.committed is not None:
            raise fault

        status = FAULT_STATUS.get(type(fault), 500)
        self.logger.error(f"Authentication fault on {context.method} {context.path}: {fault}")
        body = fault.message if fault.public else "Authentication error"
        await context.commit(HttpAction(status=status, body=body))

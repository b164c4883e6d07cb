"""
AquilAuth Clients - Authentication flow

Integration layer between a web application and its clients. This is
the only component that commits HttpActions to a request context.

Per request and client:

    Unauthenticated -> RedirectIssued                       (start)
    CredentialsPending -> CredentialsAbsent | CredentialsPresent   (callback)
    CredentialsPresent -> ProfileAbsent | ProfileCreated

Every branch that produces an action is terminal for the request.
"""

from __future__ import annotations

import logging
from typing import Optional

from .actions import HTTP_FORBIDDEN, HttpAction
from .attempts import AttemptTracker
from .clients.registry import Clients
from .config import ClientsConfig
from .context import WebContext
from .core import UserProfile
from .faults import CLIENT_CONFIG_INVALID


class AuthFlow:
    """
    Drives clients through the redirect / callback / profile sequence.

    Example:
        ```python
        flow = AuthFlow(Clients.from_config([cas, github], config, default="github"), config)

        # protected endpoint, no profile in session
        await flow.start(context, protected_target=True)

        # callback endpoint
        profile = await flow.callback(context)
        ```
    """

    def __init__(
        self,
        clients: Clients,
        config: Optional[ClientsConfig] = None,
        tracker: Optional[AttemptTracker] = None,
        logger: Optional[logging.Logger] = None,
    ):
        self.clients = clients
        self.config = config or ClientsConfig()
        self._check_parameters()
        self.tracker = tracker or AttemptTracker(ttl=self.config.attempt_ttl)
        self.logger = logger or logging.getLogger("aquilauth.flow")

    def _check_parameters(self) -> None:
        """
        Callbacks must be routable with the configured parameter names.

        Raises:
            CLIENT_CONFIG_INVALID: Registry or a client disagrees with the config
        """
        if self.clients.client_name_parameter != self.config.client_name_parameter:
            raise CLIENT_CONFIG_INVALID(
                reason=(
                    f"registry routes on '{self.clients.client_name_parameter}' "
                    f"but client_name_parameter is '{self.config.client_name_parameter}'"
                ),
            )
        for client in self.clients:
            if client.redirect_parameter != self.config.redirect_parameter:
                raise CLIENT_CONFIG_INVALID(
                    reason=(
                        f"client '{client.name}' uses redirect parameter '{client.redirect_parameter}' "
                        f"but redirect_parameter is '{self.config.redirect_parameter}'"
                    ),
                    client_name=client.name,
                )

    # ========================================================================
    # Redirect
    # ========================================================================

    async def start(
        self,
        context: WebContext,
        client_name: Optional[str] = None,
        *,
        protected_target: bool = False,
    ) -> HttpAction:
        """
        Start authentication with a client and commit the resulting action.

        Args:
            context: Request context
            client_name: Client to use (registry default when None)
            protected_target: Requested resource requires authentication

        Returns:
            The committed action
        """
        client = self.clients.get(client_name)
        ajax_request = context.is_ajax()
        prior_failure = protected_target and self.tracker.has_failed(context, client.name)

        if not ajax_request:
            context.session_set(self.config.requested_url_session_key, context.full_url)

        action = await client.initiate_redirect(
            context,
            protected_target,
            ajax_request,
            prior_failure=prior_failure,
        )

        if action.status == HTTP_FORBIDDEN:
            # next navigation gets a fresh attempt
            self.tracker.clear(context, client.name)
            self.logger.warning(
                f"Forbidding {context.path}: previous authentication with '{client.name}' failed"
            )

        await context.commit(action)
        return action

    # ========================================================================
    # Callback
    # ========================================================================

    async def callback(self, context: WebContext) -> Optional[UserProfile]:
        """
        Handle a provider callback.

        Commits exactly one action: the client's own action (deferred
        provider redirect, notification ack, credential prompt), or a
        redirect back into the application.

        Returns:
            The resolved profile, or None when authentication did not
            complete on this request

        Raises:
            CLIENT_NAME_MISSING / CLIENT_NOT_FOUND: Callback cannot be routed
            PROVIDER_RESPONSE_INVALID: Client failed to process the callback
        """
        client = self.clients.find(context)
        outcome = await client.retrieve_credentials(context)

        if outcome.is_action:
            await context.commit(outcome.action)
            return None

        credentials = outcome.value
        if credentials is None:
            self.tracker.record_failure(context, client.name)
            self.logger.info(f"Authentication with '{client.name}' yielded no credentials")
            await context.commit(HttpAction.redirect(self._pop_requested_url(context)))
            return None

        profile = await client.resolve_profile(credentials, context)
        if profile is None:
            self.tracker.record_failure(context, client.name)
            self.logger.warning(f"Credentials from '{client.name}' were rejected")
        else:
            self.tracker.clear(context, client.name)
            context.session_set(self.config.profile_session_key, profile.to_dict())
            self.logger.info(f"Authenticated {profile.typed_id}")

        await context.commit(HttpAction.redirect(self._pop_requested_url(context)))
        return profile

    # ========================================================================
    # Session profile
    # ========================================================================

    def profile(self, context: WebContext) -> Optional[UserProfile]:
        """Profile stored by a previous successful callback."""
        data = context.session_get(self.config.profile_session_key)
        if not data:
            return None
        return UserProfile.from_dict(data)

    def logout(self, context: WebContext) -> None:
        """Forget the stored profile."""
        context.session_delete(self.config.profile_session_key)

    def _pop_requested_url(self, context: WebContext) -> str:
        url = context.session_get(self.config.requested_url_session_key)
        context.session_delete(self.config.requested_url_session_key)
        return url or self.config.default_url

"""
AquilAuth Clients - Authentication Client contract

A client drives one identity-provider protocol. It is responsible for:
- deciding how to get the user to the provider (initiate_redirect)
- recovering credentials once the provider calls back (retrieve_credentials)
- turning credentials into a user profile (resolve_profile)

Clients are immutable configuration shared by all concurrent requests.
Per-request state lives in the WebContext; the prior-failure flag is
passed in explicitly by the caller.

Each protocol variant is either:
- direct: the provider URL is reachable in one hop
- indirect: the browser is first sent to the application's own callback
  URL, which triggers the provider redirect from retrieve_credentials
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Generic, Optional, TypeVar

from .._datastructures import with_params
from ..actions import Act, HttpAction, Outcome, Proceed
from ..context import WebContext
from ..core import Authenticator, Credentials, ProfileBuilder, UserProfile
from ..faults import CLIENT_CONFIG_INVALID, PROVIDER_RESPONSE_INVALID, Fault


logger = logging.getLogger("aquilauth.clients")

C = TypeVar("C", bound=Credentials)
U = TypeVar("U", bound=UserProfile)

DEFAULT_CLIENT_NAME_PARAMETER = "client_name"
DEFAULT_REDIRECT_PARAMETER = "needs_client_redirection"


class BaseClient(ABC, Generic[C, U]):
    """
    Base authentication client.

    Subclasses implement the protocol hooks:
    - ``provider_redirect_url``: where the provider login lives
    - ``extract_credentials``: parse provider evidence from the callback

    Everything else (redirect decisions, indirect double hop, collaborator
    delegation) is handled here.

    Example:
        ```python
        class CasClient(BaseClient[CasCredentials, UserProfile]):
            indirect = True

            async def provider_redirect_url(self, context):
                return with_params(self.login_url, service=self.callback_location())

            async def extract_credentials(self, context):
                ticket = context.request_parameter("ticket")
                if ticket is None:
                    return Proceed(None)
                return Proceed(CasCredentials(client_name=self.name, ticket=ticket))
        ```
    """

    indirect: bool = False

    def __init__(
        self,
        name: str,
        *,
        authenticator: Authenticator,
        profile_builder: ProfileBuilder,
        callback_url: Optional[str] = None,
        indirect: Optional[bool] = None,
        client_name_parameter: str = DEFAULT_CLIENT_NAME_PARAMETER,
        redirect_parameter: str = DEFAULT_REDIRECT_PARAMETER,
    ):
        if not name:
            raise CLIENT_CONFIG_INVALID(reason="client name must not be empty")

        self._name = name
        self.authenticator = authenticator
        self.profile_builder = profile_builder
        self.callback_url = callback_url
        if indirect is not None:
            self.indirect = indirect
        self.client_name_parameter = client_name_parameter
        self.redirect_parameter = redirect_parameter

        if self.indirect and not callback_url:
            raise CLIENT_CONFIG_INVALID(
                reason=f"indirect client '{name}' requires a callback URL",
                client_name=name,
            )

    @property
    def name(self) -> str:
        """Stable identifier used to route callbacks to this client."""
        return self._name

    def __repr__(self) -> str:
        kind = "indirect" if self.indirect else "direct"
        return f"{self.__class__.__name__}(name={self._name!r}, {kind})"

    # ========================================================================
    # Protocol hooks
    # ========================================================================

    @abstractmethod
    async def provider_redirect_url(self, context: WebContext) -> str:
        """URL of the identity provider's login endpoint for this request."""

    @abstractmethod
    async def extract_credentials(self, context: WebContext) -> Outcome[Optional[C]]:
        """
        Parse provider evidence from the callback request.

        Returns:
            Proceed(credentials) on success, Proceed(None) when evidence is
            missing or rejected at parse time, or Act(action) when the
            protocol needs its own response (notification ack, native
            credential prompt).
        """

    # ========================================================================
    # Contract
    # ========================================================================

    def callback_location(self) -> str:
        """Application callback URL tagged with this client's name."""
        if not self.callback_url:
            raise CLIENT_CONFIG_INVALID(
                reason=f"client '{self._name}' has no callback URL",
                client_name=self._name,
            )
        return with_params(self.callback_url, **{self.client_name_parameter: self._name})

    async def initiate_redirect(
        self,
        context: WebContext,
        protected_target: bool,
        ajax_request: bool,
        *,
        prior_failure: bool = False,
    ) -> HttpAction:
        """
        Decide how to start authentication.

        Decision order:
        1. AJAX request -> 401 (scripts cannot follow a full-page redirect)
        2. protected target with a prior failed attempt -> 403
        3. protected target -> direct provider redirect, even for indirect clients
        4. indirect client -> redirect to the callback URL, provider hop deferred
        5. direct client -> provider redirect

        Args:
            context: Request context
            protected_target: Target requires a completed authentication
            ajax_request: Request is script-driven
            prior_failure: A previous attempt for this client yielded no credentials

        Returns:
            The action the caller must commit
        """
        if ajax_request:
            logger.debug(f"Client '{self._name}': AJAX request, answering 401")
            return HttpAction.unauthorized()

        if protected_target and prior_failure:
            logger.debug(f"Client '{self._name}': prior attempt failed on protected target, answering 403")
            return HttpAction.forbidden()

        if protected_target or not self.indirect:
            location = await self.provider_redirect_url(context)
        else:
            location = with_params(self.callback_location(), **{self.redirect_parameter: "true"})

        logger.info(f"Client '{self._name}': redirecting to {location}")
        return HttpAction.redirect(location)

    async def retrieve_credentials(self, context: WebContext) -> Outcome[Optional[C]]:
        """
        Recover credentials from the callback request.

        For an indirect client whose provider redirect was deferred, this
        performs that redirect now (Act 302). Otherwise the protocol hook
        parses the evidence.

        Raises:
            PROVIDER_RESPONSE_INVALID: Provider evidence could not be processed
        """
        if self.indirect and context.request_parameter(self.redirect_parameter) is not None:
            location = await self.provider_redirect_url(context)
            logger.info(f"Client '{self._name}': performing deferred provider redirect to {location}")
            return Act(HttpAction.redirect(location))

        try:
            outcome = await self.extract_credentials(context)
        except Fault:
            raise
        except Exception as e:
            raise PROVIDER_RESPONSE_INVALID(client_name=self._name, reason=str(e)) from e

        if not outcome.is_action:
            if outcome.value is None:
                logger.debug(f"Client '{self._name}': no credentials in callback")
            else:
                logger.debug(f"Client '{self._name}': credentials retrieved")
        return outcome

    async def resolve_profile(self, credentials: C, context: WebContext) -> Optional[U]:
        """
        Validate credentials and build the user profile.

        Returns None when the authenticator rejects the credentials. Never
        writes to the response.

        Raises:
            ValueError: credentials is None
            PROVIDER_RESPONSE_INVALID: A collaborator failed unexpectedly
        """
        if credentials is None:
            raise ValueError("resolve_profile requires credentials")

        try:
            valid = await self.authenticator.validate(credentials, context)
            if not valid:
                logger.warning(f"Client '{self._name}': credentials rejected by authenticator")
                return None
            profile = await self.profile_builder.build(credentials, context)
        except Fault:
            raise
        except Exception as e:
            raise PROVIDER_RESPONSE_INVALID(client_name=self._name, reason=str(e)) from e

        logger.info(f"Client '{self._name}': profile resolved for {profile.typed_id}")
        return profile


__all__ = [
    "BaseClient",
    "DEFAULT_CLIENT_NAME_PARAMETER",
    "DEFAULT_REDIRECT_PARAMETER",
]

"""
AquilAuth Clients - Client registry

Clients are selected by their stable name, never by runtime type.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Iterable, Iterator, Optional

from ..context import WebContext
from ..faults import CLIENT_CONFIG_INVALID, CLIENT_NAME_MISSING, CLIENT_NOT_FOUND
from .base import DEFAULT_CLIENT_NAME_PARAMETER, BaseClient

if TYPE_CHECKING:
    from ..config import ClientsConfig


class Clients:
    """
    Immutable name -> client mapping.

    Every client must tag its callback URLs with the parameter the registry
    routes on. With a single client and no explicit default, that client
    is the default.

    Example:
        >>> clients = Clients([cas_client, github_client], default="github")
        >>> clients.get("cas")
        CasClient(name='cas', indirect)
        >>> clients.find(context)  # uses ?client_name=...
    """

    def __init__(
        self,
        clients: Iterable[BaseClient],
        *,
        default: Optional[str] = None,
        client_name_parameter: str = DEFAULT_CLIENT_NAME_PARAMETER,
    ):
        registry: dict[str, BaseClient] = {}
        for client in clients:
            if client.name in registry:
                raise CLIENT_CONFIG_INVALID(
                    reason=f"duplicate client name '{client.name}'",
                    client_name=client.name,
                )
            if client.client_name_parameter != client_name_parameter:
                raise CLIENT_CONFIG_INVALID(
                    reason=(
                        f"client '{client.name}' tags callbacks with '{client.client_name_parameter}' "
                        f"but the registry routes on '{client_name_parameter}'"
                    ),
                    client_name=client.name,
                )
            registry[client.name] = client

        # a lone client is the implicit default
        if default is None and len(registry) == 1:
            default = next(iter(registry))

        if default is not None and default not in registry:
            raise CLIENT_CONFIG_INVALID(
                reason=f"default client '{default}' is not registered",
                client_name=default,
            )

        self._clients = registry
        self.default = default
        self.client_name_parameter = client_name_parameter

    @classmethod
    def from_config(
        cls,
        clients: Iterable[BaseClient],
        config: ClientsConfig,
        *,
        default: Optional[str] = None,
    ) -> Clients:
        """Registry routing on ``config.client_name_parameter``."""
        return cls(clients, default=default, client_name_parameter=config.client_name_parameter)

    def get(self, name: Optional[str] = None) -> BaseClient:
        """
        Get client by name (or the default client).

        Raises:
            CLIENT_NOT_FOUND: No such client
        """
        if name is None:
            name = self.default
        client = self._clients.get(name) if name is not None else None
        if client is None:
            raise CLIENT_NOT_FOUND(client_name=name)
        return client

    def find(self, context: WebContext) -> BaseClient:
        """
        Find the client a callback request is addressed to.

        Raises:
            CLIENT_NAME_MISSING: No client name parameter (and no default)
            CLIENT_NOT_FOUND: Unknown client name
        """
        name = context.request_parameter(self.client_name_parameter)
        if name is None:
            if self.default is None:
                raise CLIENT_NAME_MISSING(parameter=self.client_name_parameter)
            name = self.default
        return self.get(name)

    @property
    def names(self) -> list[str]:
        return list(self._clients)

    def __iter__(self) -> Iterator[BaseClient]:
        return iter(self._clients.values())

    def __len__(self) -> int:
        return len(self._clients)

    def __contains__(self, name: object) -> bool:
        return name in self._clients

    def __repr__(self) -> str:
        return f"Clients({self.names})"

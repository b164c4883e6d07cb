"""
AquilAuth Clients - authentication client contract and registry.
"""

from .base import (
    DEFAULT_CLIENT_NAME_PARAMETER,
    DEFAULT_REDIRECT_PARAMETER,
    BaseClient,
)
from .registry import Clients

__all__ = [
    "BaseClient",
    "Clients",
    "DEFAULT_CLIENT_NAME_PARAMETER",
    "DEFAULT_REDIRECT_PARAMETER",
]

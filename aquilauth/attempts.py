"""
AquilAuth Clients - Authentication attempt tracking

Records that an authentication attempt for a client ended with absent
credentials, so that the next redirect towards a protected target can
answer 403 instead of looping the user through the provider again.

Policy:
- Stored in the request's session under ``<client_name>$attemptedAuthentication``
- Value is the UNIX time of the failed attempt
- Expires after ``ttl`` seconds; an expired flag reads as absent and is removed
- Cleared on successful credentials and once a 403 has been issued
"""

from __future__ import annotations

import logging
import time
from typing import Callable

from .context import WebContext


logger = logging.getLogger("aquilauth.attempts")

ATTEMPT_SUFFIX = "$attemptedAuthentication"
DEFAULT_ATTEMPT_TTL = 600


class AttemptTracker:
    """
    Session-backed prior-failure flag, one per client name.

    The tracker holds configuration only; all state lives in the session
    of the context passed to each call.
    """

    def __init__(self, ttl: float = DEFAULT_ATTEMPT_TTL, clock: Callable[[], float] = time.time):
        if ttl <= 0:
            raise ValueError("Attempt TTL must be positive")
        self.ttl = ttl
        self._clock = clock

    @staticmethod
    def session_key(client_name: str) -> str:
        return f"{client_name}{ATTEMPT_SUFFIX}"

    def record_failure(self, context: WebContext, client_name: str) -> None:
        """Remember that credentials were absent for this client."""
        context.session_set(self.session_key(client_name), self._clock())
        logger.debug(f"Recorded failed authentication attempt for client '{client_name}'")

    def has_failed(self, context: WebContext, client_name: str) -> bool:
        """Check for an unexpired failed attempt."""
        key = self.session_key(client_name)
        recorded = context.session_get(key)
        if recorded is None:
            return False

        try:
            recorded_at = float(recorded)
        except (TypeError, ValueError):
            logger.warning(f"Discarding unreadable attempt flag for client '{client_name}'")
            context.session_delete(key)
            return False

        if self._clock() - recorded_at >= self.ttl:
            context.session_delete(key)
            return False
        return True

    def clear(self, context: WebContext, client_name: str) -> None:
        context.session_delete(self.session_key(client_name))

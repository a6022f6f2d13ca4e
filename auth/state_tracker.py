from __future__ import annotations

import secrets
import time
from typing import Callable

from auth import signed_token

DEFAULT_STATE_TTL_SECONDS = 600


class StateTracker:
    """Issues and checks the OAuth ``state`` parameter.

    Each state is an HMAC-signed value carrying its own deadline. It is
    handed to the browser twice: in the ``oauth_state`` cookie and in the
    authorize URL. Some reverse proxies drop the cookie on the way back, so
    every issued value is also kept in ``pending`` until it expires.

    A state validates when it matches the cookie or is still pending, has
    a good signature, has not expired and has not been used before.
    Consumed values are remembered until their deadline; after that the
    expiry check alone rejects them.
    """

    def __init__(
        self,
        secret: str,
        *,
        ttl_seconds: int = DEFAULT_STATE_TTL_SECONDS,
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.ttl_seconds = ttl_seconds
        self.pending: dict[str, float] = {}
        self.consumed: dict[str, float] = {}
        self._key = signed_token.derive_key(secret)
        self._clock = clock

    def issue(self) -> str:
        self._cleanup()
        expires_at = self._clock() + self.ttl_seconds
        state = signed_token.encode(
            {"n": secrets.token_urlsafe(24), "exp": expires_at},
            self._key,
        )
        self.pending[state] = expires_at
        return state

    def validate(self, candidate: str | None, cookie_value: str | None) -> bool:
        self._cleanup()
        if not candidate:
            return False

        in_pending = self.pending.pop(candidate, None) is not None
        if not in_pending and candidate != cookie_value:
            return False
        if candidate in self.consumed:
            return False

        expires_at = self._deadline(candidate)
        if expires_at is None or expires_at <= self._clock():
            return False

        self.consumed[candidate] = expires_at
        return True

    def clear(self) -> None:
        self.pending.clear()
        self.consumed.clear()

    def _deadline(self, state: str) -> float | None:
        try:
            payload = signed_token.decode(state, self._key)
        except RuntimeError:
            return None
        expires_at = payload.get("exp")
        if not isinstance(expires_at, (int, float)):
            return None
        return float(expires_at)

    def _cleanup(self) -> None:
        now = self._clock()
        for table in (self.pending, self.consumed):
            expired = [state for state, expires_at in table.items() if expires_at <= now]
            for state in expired:
                del table[state]

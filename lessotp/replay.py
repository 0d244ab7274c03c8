"""
Replay Guard
============
Consume-once tracking of issued tokens.

The in-memory guard lives as long as the process. Swap in another
``ReplayGuard`` implementation (e.g. backed by a shared store) to protect
tokens across several service instances.
"""

import threading
import time
from typing import Dict, Optional, Protocol, runtime_checkable

import structlog

logger = structlog.get_logger(__name__)


@runtime_checkable
class ReplayGuard(Protocol):
    """Capability interface for replay protection."""

    def record(self, token: str, expires_at: Optional[int] = None) -> None:
        ...

    def is_live(self, token: str) -> bool:
        ...

    def consume(self, token: str) -> bool:
        ...


class InMemoryReplayGuard:
    """
    In-memory set of live tokens.

    Entries are only removed by ``consume`` or an explicit ``purge_expired``
    call, so memory grows with issuance volume.
    """

    def __init__(self, enabled: bool = True):
        self.enabled = enabled
        self._live: Dict[str, Optional[int]] = {}
        self._lock = threading.Lock()

    def record(self, token: str, expires_at: Optional[int] = None) -> None:
        """
        Mark a token live.

        Args:
            token: Issued token
            expires_at: Token expiry in epoch ms, used by ``purge_expired``
        """
        if not self.enabled:
            return
        with self._lock:
            self._live[token] = expires_at

    def is_live(self, token: str) -> bool:
        if not self.enabled:
            return True
        with self._lock:
            return token in self._live

    def consume(self, token: str) -> bool:
        """
        Remove a token from the live set.

        Returns:
            True if this call consumed the token (always True when disabled)
        """
        if not self.enabled:
            return True
        with self._lock:
            if token not in self._live:
                logger.warning("Replay detected", token_ref=token[:8])
                return False
            del self._live[token]
            return True

    def purge_expired(self, now_ms: Optional[int] = None) -> int:
        """
        Drop live tokens whose expiry has passed.

        Returns:
            Number of tokens removed
        """
        if now_ms is None:
            now_ms = int(time.time() * 1000)
        with self._lock:
            expired = [
                token for token, expires_at in self._live.items()
                if expires_at is not None and now_ms >= expires_at
            ]
            for token in expired:
                del self._live[token]
        if expired:
            logger.info("Purged expired tokens", count=len(expired))
        return len(expired)

    def __len__(self) -> int:
        with self._lock:
            return len(self._live)

    def __contains__(self, token: object) -> bool:
        with self._lock:
            return token in self._live

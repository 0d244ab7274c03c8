"""
OTP Models
==========
Payload, issuance and verification result types.
"""

import json
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .exceptions import CorruptPayload

_PAYLOAD_KEYS = ("otp", "expiresAt")


@dataclass(frozen=True)
class Payload:
    """Plaintext sealed inside a token. ``expires_at`` is epoch ms, None for no expiry."""
    value: str
    expires_at: Optional[int] = None

    def is_expired(self, now_ms: int) -> bool:
        """Expired from ``expires_at`` on, so a zero ttl is expired at issue time."""
        if self.expires_at is None:
            return False
        return now_ms >= self.expires_at

    def to_json(self) -> str:
        return json.dumps(
            {"otp": self.value, "expiresAt": self.expires_at},
            separators=(",", ":"),
        )

    @classmethod
    def from_json(cls, raw: str) -> "Payload":
        try:
            data = json.loads(raw)
        except ValueError as exc:
            raise CorruptPayload("payload is not valid JSON") from exc

        if not isinstance(data, dict) or tuple(data) != _PAYLOAD_KEYS:
            raise CorruptPayload("unexpected payload shape")

        value, expires_at = data["otp"], data["expiresAt"]
        if not isinstance(value, str):
            raise CorruptPayload("otp must be a string")
        if expires_at is not None and (isinstance(expires_at, bool) or not isinstance(expires_at, int)):
            raise CorruptPayload("expiresAt must be an integer or null")
        return cls(value=value, expires_at=expires_at)


@dataclass(frozen=True)
class IssuedOTP:
    """Result of issuing an OTP. Deliver ``value`` to the user, hand ``token`` to the client."""
    value: str
    token: str
    expires_at: Optional[int] = None


class FailureReason(str, Enum):
    """Why a verification failed."""
    INVALID_TOKEN = "invalid_token"
    NOT_LIVE = "not_live"
    EXPIRED = "expired"
    MISMATCH = "mismatch"


@dataclass(frozen=True)
class VerificationResult:
    """Outcome of a verification attempt."""
    ok: bool
    reason: Optional[FailureReason] = None

    def __bool__(self) -> bool:
        return self.ok

"""
OTP Service
===========
Issues OTP values sealed into tokens and verifies them at most once.

No OTP value is stored server-side: the value and its expiry travel inside
the encrypted token. Only the set of live tokens is kept, by the replay guard.
"""

import hmac
import math
import time
from typing import Callable, Optional

import structlog

from .codec import TokenCodec
from .config import ConsumePolicy, OTPServiceConfig
from .exceptions import TokenError
from .keys import derive_key, generate_secret
from .models import FailureReason, IssuedOTP, Payload, VerificationResult
from .replay import InMemoryReplayGuard, ReplayGuard
from .template import generate_otp

logger = structlog.get_logger(__name__)


def _values_equal(expected: str, submitted: str) -> bool:
    # lone surrogates must compare, not raise
    return hmac.compare_digest(
        expected.encode("utf-8", "surrogatepass"),
        submitted.encode("utf-8", "surrogatepass"),
    )


class OTPService:
    """Stateless OTP issuance and consume-once verification."""

    def __init__(
        self,
        config: Optional[OTPServiceConfig] = None,
        replay_guard: Optional[ReplayGuard] = None,
        clock: Callable[[], float] = time.time,
    ):
        """
        Args:
            config: Service configuration; defaults are used when omitted
            replay_guard: Live-token store; in-memory when omitted
            clock: Returns the current time in epoch seconds
        """
        self.config = config or OTPServiceConfig()
        self.codec = TokenCodec(self.config.algorithm, self.config.iv_length)
        if replay_guard is None:
            replay_guard = InMemoryReplayGuard(enabled=self.config.replay_protection_enabled)
        self.replay_guard = replay_guard
        self._clock = clock

        if self.config.secret_salt:
            self._secret_salt = self.config.secret_salt
        else:
            self._secret_salt = generate_secret()
            logger.warning(
                "Ephemeral secret generated",
                detail="tokens will not verify after a restart",
            )

    def _now_ms(self) -> int:
        return int(self._clock() * 1000)

    def _key(self, identifier: str) -> bytes:
        return derive_key(self._secret_salt, identifier, self.codec.key_length)

    def issue(
        self,
        identifier: str,
        template: Optional[str] = None,
        ttl_seconds: Optional[float] = None,
    ) -> IssuedOTP:
        """
        Issue an OTP for an identifier.

        Args:
            identifier: Email, phone number, username, ...
            template: OTP template, e.g. ``N{6}``; 6 random digits when omitted
            ttl_seconds: Lifetime in seconds. ``None`` never expires, ``0`` is
                already expired

        Returns:
            IssuedOTP with the plaintext value and its token

        Raises:
            InvalidTemplate: If the template is not valid
            ValueError: If ttl_seconds is negative or not finite
        """
        if ttl_seconds is not None:
            if not math.isfinite(ttl_seconds):
                raise ValueError(f"ttl_seconds must be finite, got {ttl_seconds!r}")
            if ttl_seconds < 0:
                raise ValueError("ttl_seconds must not be negative")

        value = generate_otp(template, self.config.template_grammar)
        expires_at = None
        if ttl_seconds is not None:
            expires_at = self._now_ms() + int(ttl_seconds * 1000)

        token = self.codec.seal(self._key(identifier), Payload(value, expires_at))
        self.replay_guard.record(token, expires_at)

        logger.info(
            "OTP issued",
            token_ref=token[:8],
            template=template,
            expires_in=ttl_seconds,
        )
        return IssuedOTP(value=value, token=token, expires_at=expires_at)

    def check(self, identifier: str, token: str, submitted_value: str) -> VerificationResult:
        """
        Verify a submitted value against a token and report why it failed.

        Never raises for bad tokens; every failure is a result.
        """
        try:
            key = self._key(identifier)
        except UnicodeEncodeError:
            return self._fail(token, FailureReason.INVALID_TOKEN, error="UnencodableIdentifier")

        try:
            payload = self.codec.open(key, token)
        except TokenError as exc:
            return self._fail(token, FailureReason.INVALID_TOKEN, error=type(exc).__name__)

        if not self.replay_guard.is_live(token):
            return self._fail(token, FailureReason.NOT_LIVE)

        if self.config.consume_policy is ConsumePolicy.ON_DECODE:
            if not self.replay_guard.consume(token):
                return self._fail(token, FailureReason.NOT_LIVE)

        if payload.is_expired(self._now_ms()):
            return self._fail(token, FailureReason.EXPIRED)

        if not isinstance(submitted_value, str) or not _values_equal(payload.value, submitted_value):
            return self._fail(token, FailureReason.MISMATCH)

        if self.config.consume_policy is ConsumePolicy.ON_MATCH:
            if not self.replay_guard.consume(token):
                return self._fail(token, FailureReason.NOT_LIVE)

        logger.info("OTP verified", token_ref=token[:8])
        return VerificationResult(ok=True)

    def verify(self, identifier: str, token: str, submitted_value: str) -> bool:
        """Return True if the value matches a live, unexpired token for ``identifier``."""
        return self.check(identifier, token, submitted_value).ok

    def _fail(self, token, reason: FailureReason, **context) -> VerificationResult:
        token_ref = token[:8] if isinstance(token, str) else None
        logger.warning(
            "OTP verification failed",
            token_ref=token_ref,
            reason=reason.value,
            **context,
        )
        return VerificationResult(ok=False, reason=reason)

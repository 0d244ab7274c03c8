"""
LessOTP Configuration
=====================
Configuration constants, environment variables and the service config.
"""

import os
from dataclasses import dataclass
from enum import Enum
from typing import Optional

from .codec import DEFAULT_ALGORITHM, DEFAULT_IV_LENGTH
from .exceptions import ConfigurationError
from .template import TemplateGrammar


class ConsumePolicy(str, Enum):
    """When a live token is burned during verification."""
    ON_MATCH = "on_match"    # only a correct guess consumes the token
    ON_DECODE = "on_decode"  # the first decodable attempt consumes it


_TRUTHY = {"1", "true", "yes", "on"}
_FALSY = {"0", "false", "no", "off"}


def _env_bool(name: str, default: bool) -> bool:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    value = raw.strip().lower()
    if value in _TRUTHY:
        return True
    if value in _FALSY:
        return False
    raise ConfigurationError(f"{name} must be a boolean, got {raw!r}")


def _env_int(name: str, default: int) -> int:
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return int(raw)
    except ValueError:
        raise ConfigurationError(f"{name} must be an integer, got {raw!r}") from None


def _env_enum(name: str, enum_cls, default):
    raw = os.getenv(name)
    if raw is None or raw.strip() == "":
        return default
    try:
        return enum_cls(raw.strip().lower())
    except ValueError:
        raise ConfigurationError(f"{name} has unknown value {raw!r}") from None


@dataclass(frozen=True)
class OTPServiceConfig:
    """Configuration for OTPService. Immutable once built."""
    secret_salt: Optional[str] = None
    algorithm: str = DEFAULT_ALGORITHM
    iv_length: int = DEFAULT_IV_LENGTH
    replay_protection_enabled: bool = True
    consume_policy: ConsumePolicy = ConsumePolicy.ON_MATCH
    template_grammar: TemplateGrammar = TemplateGrammar.STRICT

    def __post_init__(self):
        if self.secret_salt is not None and not self.secret_salt:
            raise ConfigurationError("secret_salt must not be empty")
        # accept plain strings for the enum fields
        object.__setattr__(self, "consume_policy", ConsumePolicy(self.consume_policy))
        object.__setattr__(self, "template_grammar", TemplateGrammar(self.template_grammar))

    @classmethod
    def from_env(cls) -> "OTPServiceConfig":
        """Build a config from LESSOTP_* environment variables."""
        return cls(
            secret_salt=os.getenv("LESSOTP_SECRET_SALT") or None,
            algorithm=os.getenv("LESSOTP_CIPHER", DEFAULT_ALGORITHM),
            iv_length=_env_int("LESSOTP_IV_LENGTH", DEFAULT_IV_LENGTH),
            replay_protection_enabled=_env_bool("LESSOTP_REPLAY_PROTECTION", True),
            consume_policy=_env_enum("LESSOTP_CONSUME_POLICY", ConsumePolicy, ConsumePolicy.ON_MATCH),
            template_grammar=_env_enum("LESSOTP_TEMPLATE_GRAMMAR", TemplateGrammar, TemplateGrammar.STRICT),
        )

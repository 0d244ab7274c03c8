"""
LessOTP
=======
Stateless one-time codes: the OTP value and its expiry are sealed into an
encrypted token, so nothing but the set of live tokens is kept server-side.
"""

__version__ = "0.3.0"

# Service
from lessotp.service import OTPService
from lessotp.config import OTPServiceConfig, ConsumePolicy

# Models
from lessotp.models import Payload, IssuedOTP, VerificationResult, FailureReason

# Templates
from lessotp.template import (
    TemplateKind,
    TemplateGrammar,
    TemplateGroup,
    parse_template,
    validate_template,
    generate_otp,
    generate_default_otp,
)

# Keys
from lessotp.keys import derive_key, generate_secret

# Codec
from lessotp.codec import TokenCodec

# Replay protection
from lessotp.replay import ReplayGuard, InMemoryReplayGuard

# Errors
from lessotp.exceptions import (
    LessOtpError,
    ConfigurationError,
    InvalidTemplate,
    TokenError,
    MalformedToken,
    DecryptionFailure,
    CorruptPayload,
)

# Logging
from lessotp.log import setup_logging

__all__ = [
    "__version__",
    # Service
    "OTPService",
    "OTPServiceConfig",
    "ConsumePolicy",
    # Models
    "Payload",
    "IssuedOTP",
    "VerificationResult",
    "FailureReason",
    # Templates
    "TemplateKind",
    "TemplateGrammar",
    "TemplateGroup",
    "parse_template",
    "validate_template",
    "generate_otp",
    "generate_default_otp",
    # Keys
    "derive_key",
    "generate_secret",
    # Codec
    "TokenCodec",
    # Replay protection
    "ReplayGuard",
    "InMemoryReplayGuard",
    # Errors
    "LessOtpError",
    "ConfigurationError",
    "InvalidTemplate",
    "TokenError",
    "MalformedToken",
    "DecryptionFailure",
    "CorruptPayload",
    # Logging
    "setup_logging",
]

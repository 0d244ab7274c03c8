"""
LessOTP Exceptions
==================
Exception classes for template, configuration and token failures.
"""

from typing import Optional


class LessOtpError(Exception):
    """Base class for all lessotp errors."""
    pass


class ConfigurationError(LessOtpError):
    """Raised when the service is constructed with an unusable configuration."""
    pass


class InvalidTemplate(LessOtpError, ValueError):
    """Raised when an OTP template does not match the grammar."""

    def __init__(self, template: Optional[str], message: Optional[str] = None):
        super().__init__(message or f"Invalid template format: {template!r}")
        self.template = template


class TokenError(LessOtpError):
    """A token could not be opened for this identifier."""
    pass


class MalformedToken(TokenError):
    """Token is not `<ivHex>:<ciphertextHex>`."""
    pass


class DecryptionFailure(TokenError):
    """Cipher rejected the ciphertext (wrong key, corrupted bytes, bad padding)."""
    pass


class CorruptPayload(TokenError):
    """Decrypted bytes are not a valid OTP payload."""
    pass

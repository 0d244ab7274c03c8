"""
Key Derivation
==============
Per-identifier symmetric keys and random service secrets.
"""

import hashlib
import secrets

SECRET_MIN_BYTES = 16
SECRET_MAX_BYTES = 32


def derive_key(secret_salt: str, identifier: str, length: int = 32) -> bytes:
    """
    Derive a symmetric key for an identifier.

    SHA-256 over ``secret_salt + identifier``, truncated to ``length`` bytes
    for ciphers with shorter keys.

    Args:
        secret_salt: Service-wide secret
        identifier: Email, phone number, username, ...
        length: Key length in bytes (at most 32)

    Returns:
        Key bytes
    """
    if not 0 < length <= hashlib.sha256().digest_size:
        raise ValueError(f"key length must be between 1 and 32 bytes, got {length}")
    digest = hashlib.sha256((secret_salt + identifier).encode("utf-8")).digest()
    return digest[:length]


def generate_secret() -> str:
    """Generate a random hex secret of 16 to 32 bytes."""
    n_bytes = SECRET_MIN_BYTES + secrets.randbelow(SECRET_MAX_BYTES - SECRET_MIN_BYTES + 1)
    return secrets.token_hex(n_bytes)

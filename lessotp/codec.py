"""
Token Codec
===========
Seals OTP payloads into opaque ``<ivHex>:<ciphertextHex>`` tokens with
AES-CBC and opens them again.
"""

import re
import secrets
from typing import Dict

from Crypto.Cipher import AES
from Crypto.Util.Padding import pad, unpad

from .exceptions import ConfigurationError, CorruptPayload, DecryptionFailure, MalformedToken
from .models import Payload

DEFAULT_ALGORITHM = "aes-256-cbc"
DEFAULT_IV_LENGTH = 16
TOKEN_SEPARATOR = ":"

# algorithm name -> key length in bytes
CIPHER_KEY_LENGTHS: Dict[str, int] = {
    "aes-128-cbc": 16,
    "aes-192-cbc": 24,
    "aes-256-cbc": 32,
}

_HEX = re.compile(r"(?:[0-9a-f]{2})+")


class TokenCodec:
    """Encrypts and decrypts OTP payloads under a per-identifier key."""

    def __init__(self, algorithm: str = DEFAULT_ALGORITHM, iv_length: int = DEFAULT_IV_LENGTH):
        algorithm = algorithm.lower()
        if algorithm not in CIPHER_KEY_LENGTHS:
            raise ConfigurationError(
                f"Unsupported cipher {algorithm!r}; expected one of {sorted(CIPHER_KEY_LENGTHS)}"
            )
        if iv_length != AES.block_size:
            raise ConfigurationError(
                f"{algorithm} needs a {AES.block_size}-byte IV, got {iv_length}"
            )
        self.algorithm = algorithm
        self.key_length = CIPHER_KEY_LENGTHS[algorithm]
        self.iv_length = iv_length

    def seal(self, key: bytes, payload: Payload) -> str:
        """
        Encrypt a payload under ``key`` with a fresh random IV.

        Returns:
            Token string ``hex(iv):hex(ciphertext)``
        """
        iv = secrets.token_bytes(self.iv_length)
        cipher = AES.new(key, AES.MODE_CBC, iv)
        ciphertext = cipher.encrypt(pad(payload.to_json().encode("utf-8"), AES.block_size))
        return iv.hex() + TOKEN_SEPARATOR + ciphertext.hex()

    def open(self, key: bytes, token: str) -> Payload:
        """
        Decrypt a token under ``key``.

        Raises:
            MalformedToken: Token is not two lowercase hex halves of valid sizes
            DecryptionFailure: Cipher rejected the ciphertext
            CorruptPayload: Plaintext is not a valid payload
        """
        if not isinstance(token, str):
            raise MalformedToken("token must be a string")

        iv_hex, sep, ciphertext_hex = token.partition(TOKEN_SEPARATOR)
        if not sep or not _HEX.fullmatch(iv_hex) or not _HEX.fullmatch(ciphertext_hex):
            raise MalformedToken("token is not <ivHex>:<ciphertextHex>")

        iv = bytes.fromhex(iv_hex)
        ciphertext = bytes.fromhex(ciphertext_hex)
        if len(iv) != self.iv_length:
            raise MalformedToken(f"IV must be {self.iv_length} bytes")
        if len(ciphertext) % AES.block_size:
            raise MalformedToken("ciphertext is not a whole number of blocks")

        try:
            cipher = AES.new(key, AES.MODE_CBC, iv)
            plaintext = unpad(cipher.decrypt(ciphertext), AES.block_size)
        except ValueError as exc:
            raise DecryptionFailure("could not decrypt token") from exc

        try:
            raw = plaintext.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise CorruptPayload("payload is not UTF-8") from exc
        return Payload.from_json(raw)

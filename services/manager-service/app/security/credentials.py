"""One-time credential generators handed to new managers.

Both generators emit at least one lowercase letter, uppercase letter, digit and
symbol so the result satisfies the identity registrar's password policy.
"""

from __future__ import annotations

import hashlib
import hmac
import secrets
import string

LOWER = string.ascii_lowercase
UPPER = string.ascii_uppercase
DIGITS = string.digits
SYMBOLS = "!@#$%^&*-_"
ALPHABET = LOWER + UPPER + DIGITS + SYMBOLS
REQUIRED_CLASSES = (LOWER, UPPER, DIGITS, SYMBOLS)
MIN_LENGTH = 2 * len(REQUIRED_CLASSES)


def _compose(stream: bytes, length: int) -> str:
    """Map ``stream`` onto the alphabet, then plant one character of each class.

    ``stream`` must hold at least ``length + 2 * len(REQUIRED_CLASSES)`` bytes.
    """
    chars = [ALPHABET[byte % len(ALPHABET)] for byte in stream[:length]]
    extra = stream[length:]
    slots = list(range(length))
    for index, charset in enumerate(REQUIRED_CLASSES):
        position = slots.pop(extra[2 * index] % len(slots))
        chars[position] = charset[extra[2 * index + 1] % len(charset)]
    return "".join(chars)


def _check_length(length: int) -> int:
    if length < MIN_LENGTH:
        raise ValueError(f"credential length must be at least {MIN_LENGTH}")
    return length


class RandomCredentialGenerator:
    """Draws credentials from the operating system CSPRNG; the seeds are ignored."""

    def __init__(self, length: int = 12) -> None:
        self._length = _check_length(length)

    def generate(self, seed1: str, seed2: str) -> str:
        return _compose(secrets.token_bytes(self._length + MIN_LENGTH), self._length)


class DerivedCredentialGenerator:
    """Derives a repeatable credential from the business email and company name.

    The derivation is HMAC-SHA256 keyed with a service secret, expanded in
    counter mode, so the same seeds always produce the same credential while
    the secret stays private.
    """

    def __init__(self, secret: str, length: int = 12) -> None:
        if not secret:
            raise ValueError("a secret is required to derive credentials")
        self._key = secret.encode("utf-8")
        self._length = _check_length(length)

    def generate(self, seed1: str, seed2: str) -> str:
        message = f"{seed1.strip().lower()}\x1f{seed2.strip()}".encode("utf-8")
        needed = self._length + MIN_LENGTH
        stream = b""
        counter = 0
        while len(stream) < needed:
            counter += 1
            stream += hmac.new(
                self._key, counter.to_bytes(4, "big") + message, hashlib.sha256
            ).digest()
        return _compose(stream, self._length)


def build_credential_generator(
    strategy: str, *, secret: str, length: int
) -> RandomCredentialGenerator | DerivedCredentialGenerator:
    """Instantiate the generator named by configuration."""
    if strategy == "derived":
        return DerivedCredentialGenerator(secret, length)
    if strategy == "random":
        return RandomCredentialGenerator(length)
    raise ValueError(f"unknown credential strategy: {strategy}")

"""Immutable key and token records."""
from __future__ import annotations

import time
from dataclasses import dataclass

from . import primitives
from .exceptions import invalid_argument

IKM_BYTES = 32


@dataclass(frozen=True)
class Keypair:
    """A secret/public key pair.

    Both Curve25519 (32/32) and Ed25519 (64/32) pairs use this type; the
    holder has to know which flavour it carries.
    """

    secret_key: bytes
    public_key: bytes

    def __post_init__(self) -> None:
        if len(self.secret_key) % 16 != 0:
            raise invalid_argument("Secret key should be a multiple of 16 bytes")
        if len(self.public_key) % 4 != 0:
            raise invalid_argument("Public key should be a multiple of 4 bytes")

    def __repr__(self) -> str:
        return f"Keypair(public_key={self.public_key.hex()!r})"


@dataclass(frozen=True)
class Token:
    """Access token issued by the server together with its key material."""

    access_token: str
    refresh_token: str
    ikm: bytes
    signature: bytes
    expires_at: float

    def __post_init__(self) -> None:
        if len(self.ikm) != IKM_BYTES:
            raise invalid_argument(f"Initial key material should be {IKM_BYTES} bytes")
        if len(self.signature) != primitives.SIGN_SECRET_KEY_BYTES:
            raise invalid_argument(
                f"Signature secret key should be {primitives.SIGN_SECRET_KEY_BYTES} bytes"
            )

    def __repr__(self) -> str:
        return f"Token(access_token={self.access_token!r}, expires_at={self.expires_at!r})"

    def is_expired(self, now: float | None = None) -> bool:
        current = time.time() if now is None else now
        return current > self.expires_at

    @property
    def signing_public_key(self) -> bytes:
        return primitives.sign_public_key(self.signature)


__all__ = ["IKM_BYTES", "Keypair", "Token"]

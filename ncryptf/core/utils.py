"""Key generation and memory wiping helpers."""
from __future__ import annotations

from nacl import public, signing

from .keys import Keypair


def zero(buffer: bytearray | memoryview) -> bool:
    """Overwrite *buffer* with zeros in place.

    Returns ``True`` when every byte reads back as zero. Immutable ``bytes``
    cannot be wiped and raise :class:`TypeError`.
    """

    if isinstance(buffer, memoryview):
        if buffer.readonly:
            raise TypeError("Cannot zero a read-only buffer")
        view = buffer.cast("B")
    elif isinstance(buffer, bytearray):
        view = memoryview(buffer)
    else:
        raise TypeError(f"Cannot zero an immutable {type(buffer).__name__} object")

    view[:] = bytes(len(view))
    return not any(view)


def generate_keypair() -> Keypair:
    """Return a fresh Curve25519 keypair (32 byte secret, 32 byte public)."""

    secret = public.PrivateKey.generate()
    return Keypair(secret.encode(), secret.public_key.encode())


def generate_signing_keypair() -> Keypair:
    """Return a fresh Ed25519 keypair (64 byte secret, 32 byte public)."""

    signing_key = signing.SigningKey.generate()
    verify_key = signing_key.verify_key.encode()
    return Keypair(signing_key.encode() + verify_key, verify_key)


__all__ = ["generate_keypair", "generate_signing_keypair", "zero"]

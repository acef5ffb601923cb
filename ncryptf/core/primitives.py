"""Thin adapter over the libsodium and HKDF primitives ncryptf composes.

Every function here is stateless; callers are responsible for mapping the
library exceptions onto :class:`~ncryptf.core.exceptions.NcryptfError`.
"""
from __future__ import annotations

import hashlib
import hmac as _hmac

from cryptography.hazmat.primitives import hashes
from cryptography.hazmat.primitives.kdf.hkdf import HKDF
from nacl import bindings, encoding, exceptions, public, signing, utils
from nacl.hash import blake2b

NONCE_BYTES = bindings.crypto_box_NONCEBYTES
PUBLIC_KEY_BYTES = bindings.crypto_box_PUBLICKEYBYTES
SECRET_KEY_BYTES = bindings.crypto_box_SECRETKEYBYTES
MAC_BYTES = bindings.crypto_box_ZEROBYTES - bindings.crypto_box_BOXZEROBYTES
SIGN_SECRET_KEY_BYTES = bindings.crypto_sign_SECRETKEYBYTES
SIGN_PUBLIC_KEY_BYTES = bindings.crypto_sign_PUBLICKEYBYTES
SIGNATURE_BYTES = bindings.crypto_sign_BYTES
CHECKSUM_BYTES = 64


def random_bytes(size: int) -> bytes:
    return utils.random(size)


def box_encrypt(message: bytes, nonce: bytes, public_key: bytes, secret_key: bytes) -> bytes:
    """Return ``MAC ‖ ciphertext`` for *message* (crypto_box_easy layout)."""

    box = public.Box(public.PrivateKey(secret_key), public.PublicKey(public_key))
    return box.encrypt(message, nonce).ciphertext


def box_decrypt(ciphertext: bytes, nonce: bytes, public_key: bytes, secret_key: bytes) -> bytes:
    box = public.Box(public.PrivateKey(secret_key), public.PublicKey(public_key))
    return box.decrypt(ciphertext, nonce)


def box_public_key(secret_key: bytes) -> bytes:
    return public.PrivateKey(secret_key).public_key.encode()


def sign_public_key(signing_secret_key: bytes) -> bytes:
    return bindings.crypto_sign_ed25519_sk_to_pk(signing_secret_key)


def sign_detached(message: bytes, signing_secret_key: bytes) -> bytes:
    seed = bindings.crypto_sign_ed25519_sk_to_seed(signing_secret_key)
    return signing.SigningKey(seed).sign(message).signature


def verify_detached(message: bytes, signature: bytes, public_key: bytes) -> bool:
    try:
        signing.VerifyKey(public_key).verify(message, signature)
    except exceptions.BadSignatureError:
        return False
    return True


def generic_hash(data: bytes, key: bytes, size: int = CHECKSUM_BYTES) -> bytes:
    """Keyed BLAKE2b, as libsodium's crypto_generichash."""

    return blake2b(data, digest_size=size, key=key, encoder=encoding.RawEncoder)


def hmac_sha256(key: bytes, message: bytes) -> bytes:
    return _hmac.new(key, message, hashlib.sha256).digest()


def hkdf_sha256(salt: bytes, ikm: bytes, info: bytes, length: int) -> bytes:
    """RFC 5869 extract-then-expand with SHA-256."""

    return HKDF(algorithm=hashes.SHA256(), length=length, salt=salt, info=info).derive(ikm)


def constant_time_equals(left: bytes, right: bytes) -> bool:
    if len(left) != len(right):
        return False
    return _hmac.compare_digest(left, right)


__all__ = [
    "CHECKSUM_BYTES",
    "MAC_BYTES",
    "NONCE_BYTES",
    "PUBLIC_KEY_BYTES",
    "SECRET_KEY_BYTES",
    "SIGNATURE_BYTES",
    "SIGN_PUBLIC_KEY_BYTES",
    "SIGN_SECRET_KEY_BYTES",
    "box_decrypt",
    "box_encrypt",
    "box_public_key",
    "constant_time_equals",
    "generic_hash",
    "hkdf_sha256",
    "hmac_sha256",
    "random_bytes",
    "sign_detached",
    "sign_public_key",
    "verify_detached",
]

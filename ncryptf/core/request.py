"""Encrypt request bodies for a server public key."""
from __future__ import annotations

import logging
from typing import Optional

from nacl import exceptions as nacl_exceptions

from ..defaults import DEFAULT_VERSION, VERSION_2_HEADER
from . import primitives
from .exceptions import ErrorKind, NcryptfError, invalid_argument

logger = logging.getLogger(__name__)

_PRIMITIVE_ERRORS = (nacl_exceptions.CryptoError, TypeError, ValueError)


def _check_length(value: bytes, expected: int, label: str) -> None:
    if len(value) != expected:
        raise invalid_argument(f"{label} should be {expected} bytes")


class Request:
    """Encrypts payloads from the holder of *secret_key* to *public_key*."""

    def __init__(self, secret_key: bytes, public_key: bytes) -> None:
        _check_length(secret_key, primitives.SECRET_KEY_BYTES, "Secret key")
        _check_length(public_key, primitives.PUBLIC_KEY_BYTES, "Public key")
        self._secret_key = bytes(secret_key)
        self._public_key = bytes(public_key)

    def encrypt(
        self,
        data: str,
        signature_secret_key: Optional[bytes] = None,
        version: int = DEFAULT_VERSION,
        nonce: Optional[bytes] = None,
    ) -> bytes:
        """Encrypt *data* and return the versioned envelope.

        Version 1 returns the bare box ciphertext; the nonce and a detached
        signature from :meth:`sign` travel separately. Version 2 embeds the
        nonce, both public keys, a signature over *data* and a checksum.
        """

        if nonce is None:
            nonce = primitives.random_bytes(primitives.NONCE_BYTES)
        _check_length(nonce, primitives.NONCE_BYTES, "Nonce")
        nonce = bytes(nonce)

        if version == 2:
            if signature_secret_key is None:
                raise NcryptfError(
                    ErrorKind.ENCRYPTION_FAILED,
                    "A signature secret key is required for version 2 messages",
                )
            _check_length(
                signature_secret_key,
                primitives.SIGN_SECRET_KEY_BYTES,
                "Signature secret key",
            )
            return self._encrypt_v2(data, bytes(signature_secret_key), nonce)

        return self._encrypt_body(data, nonce)

    def _encrypt_body(self, data: str, nonce: bytes) -> bytes:
        try:
            return primitives.box_encrypt(data.encode("utf-8"), nonce, self._public_key, self._secret_key)
        except _PRIMITIVE_ERRORS as exc:
            logger.debug("crypto_box failed for a %d byte payload", len(data))
            raise NcryptfError(ErrorKind.ENCRYPTION_FAILED, "Failed to encrypt message.") from exc

    def _encrypt_v2(self, data: str, signature_secret_key: bytes, nonce: bytes) -> bytes:
        body = self._encrypt_body(data, nonce)

        try:
            public_key = primitives.box_public_key(self._secret_key)
        except _PRIMITIVE_ERRORS as exc:
            raise NcryptfError(
                ErrorKind.ENCRYPTION_FAILED,
                "Unable to derive public key from the provided secret key.",
            ) from exc

        try:
            signing_public_key = primitives.sign_public_key(signature_secret_key)
        except _PRIMITIVE_ERRORS as exc:
            raise NcryptfError(
                ErrorKind.ENCRYPTION_FAILED,
                "Unable to derive public key from the provided signature secret key.",
            ) from exc

        signature = self.sign(data, signature_secret_key)
        payload = b"".join(
            (VERSION_2_HEADER, nonce, public_key, body, signing_public_key, signature)
        )

        try:
            checksum = primitives.generic_hash(payload, nonce, primitives.CHECKSUM_BYTES)
        except _PRIMITIVE_ERRORS as exc:
            raise NcryptfError(ErrorKind.ENCRYPTION_FAILED, "Unable to calculate checksum") from exc

        return payload + checksum

    def sign(self, data: str, signature_secret_key: bytes) -> bytes:
        """Return the 64 byte detached signature of *data*."""

        _check_length(signature_secret_key, primitives.SIGN_SECRET_KEY_BYTES, "Signature secret key")
        try:
            return primitives.sign_detached(data.encode("utf-8"), bytes(signature_secret_key))
        except _PRIMITIVE_ERRORS as exc:
            logger.debug("Detached signing failed")
            raise NcryptfError(ErrorKind.ENCRYPTION_FAILED, "Unable to derive signature.") from exc


__all__ = ["Request"]

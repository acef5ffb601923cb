"""Decrypt and verify server responses."""
from __future__ import annotations

import logging
from typing import Optional

from nacl import exceptions as nacl_exceptions

from ..defaults import MINIMUM_V2_MESSAGE_BYTES, VERSION_2_HEADER
from . import primitives
from .exceptions import ErrorKind, NcryptfError, invalid_argument

logger = logging.getLogger(__name__)

_CHECKSUM = primitives.CHECKSUM_BYTES
_SIGNATURE = primitives.SIGNATURE_BYTES
_SIGNING_KEY = primitives.SIGN_PUBLIC_KEY_BYTES

_NONCE_SLICE = slice(4, 4 + primitives.NONCE_BYTES)
_PUBLIC_KEY_SLICE = slice(28, 28 + primitives.PUBLIC_KEY_BYTES)
_BODY_OFFSET = 60


class Response:
    """Decrypts messages addressed to the holder of *secret_key*."""

    def __init__(self, secret_key: bytes) -> None:
        if len(secret_key) != primitives.SECRET_KEY_BYTES:
            raise invalid_argument(f"Secret key should be {primitives.SECRET_KEY_BYTES} bytes")
        self._secret_key = bytes(secret_key)

    def decrypt(
        self,
        response: bytes,
        public_key: Optional[bytes] = None,
        nonce: Optional[bytes] = None,
    ) -> str:
        """Decrypt a v1 or v2 *response* and return the plaintext.

        Version 2 messages carry their own nonce, sender key and signature,
        and the signature is checked here. Version 1 needs *public_key* and
        *nonce* from the caller, and its signature must be checked separately
        with :meth:`is_signature_valid`.
        """

        response = bytes(response)
        if len(response) < primitives.MAC_BYTES:
            raise NcryptfError(ErrorKind.DECRYPTION_FAILED, "Message size is too short.")

        version = self.get_version(response)
        if version == 2:
            return self._decrypt_v2(response)

        if public_key is None or len(public_key) != primitives.PUBLIC_KEY_BYTES:
            raise invalid_argument(f"Public key should be {primitives.PUBLIC_KEY_BYTES} bytes")
        if nonce is None or len(nonce) != primitives.NONCE_BYTES:
            raise invalid_argument(f"Nonce should be {primitives.NONCE_BYTES} bytes")

        return self._decrypt_body(response, bytes(public_key), bytes(nonce))

    def _decrypt_v2(self, response: bytes) -> str:
        if len(response) < MINIMUM_V2_MESSAGE_BYTES:
            raise NcryptfError(ErrorKind.DECRYPTION_FAILED, "Message size is too small.")

        nonce = response[_NONCE_SLICE]
        payload = response[:-_CHECKSUM]
        checksum = response[-_CHECKSUM:]

        calculated = primitives.generic_hash(payload, nonce, _CHECKSUM)
        if not primitives.constant_time_equals(checksum, calculated):
            logger.debug("Checksum mismatch on %d byte v2 message", len(response))
            raise NcryptfError(
                ErrorKind.INVALID_CHECKSUM,
                "The checksum associated with the message is not valid.",
            )

        public_key = response[_PUBLIC_KEY_SLICE]
        signature = payload[-_SIGNATURE:]
        signing_public_key = payload[-(_SIGNATURE + _SIGNING_KEY):-_SIGNATURE]
        body = payload[_BODY_OFFSET:-(_SIGNATURE + _SIGNING_KEY)]

        plaintext = self._decrypt_body(body, public_key, nonce)

        if not self.is_signature_valid(plaintext, signature, signing_public_key):
            logger.debug("Embedded signature did not verify")
            raise NcryptfError(
                ErrorKind.INVALID_SIGNATURE,
                "The signature associated to the message is not valid.",
            )

        return plaintext

    def _decrypt_body(self, body: bytes, public_key: bytes, nonce: bytes) -> str:
        if len(body) < primitives.MAC_BYTES:
            raise NcryptfError(ErrorKind.DECRYPTION_FAILED, "Message size is too short.")

        try:
            message = primitives.box_decrypt(body, nonce, public_key, self._secret_key)
        except (nacl_exceptions.CryptoError, TypeError, ValueError) as exc:
            logger.debug("crypto_box_open failed for a %d byte body", len(body))
            raise NcryptfError(ErrorKind.DECRYPTION_FAILED, "Failed to decrypt message.") from exc

        try:
            return message.decode("utf-8")
        except UnicodeDecodeError as exc:
            raise NcryptfError(ErrorKind.DECRYPTION_FAILED, "Decrypted message is not valid UTF-8.") from exc

    @staticmethod
    def is_signature_valid(data: str, signature: bytes, public_key: bytes) -> bool:
        """Check a detached Ed25519 *signature* over *data*."""

        if len(signature) != _SIGNATURE:
            raise invalid_argument(f"Signature should be {_SIGNATURE} bytes")
        if len(public_key) != _SIGNING_KEY:
            raise invalid_argument(f"Public key should be {_SIGNING_KEY} bytes")

        return primitives.verify_detached(data.encode("utf-8"), signature, public_key)

    @staticmethod
    def get_version(response: bytes) -> int:
        """Return 2 if *response* starts with the v2 magic header, else 1.

        Only the MAC size is required to peek at the version; operations on
        the v2 layout enforce the full 236 byte minimum themselves.
        """

        if len(response) < primitives.MAC_BYTES:
            raise invalid_argument("Message length is too short to determine version.")

        if bytes(response[:4]) == VERSION_2_HEADER:
            return 2
        return 1

    @staticmethod
    def get_public_key_from_response(response: bytes) -> bytes:
        """Return the sender's box public key embedded in a v2 message."""

        _require_v2(response)
        return bytes(response[_PUBLIC_KEY_SLICE])

    @staticmethod
    def get_signing_public_key_from_response(response: bytes) -> bytes:
        """Return the Ed25519 public key embedded in a v2 message."""

        _require_v2(response)
        payload = response[:-_CHECKSUM]
        return bytes(payload[-(_SIGNATURE + _SIGNING_KEY):-_SIGNATURE])


def _require_v2(response: bytes) -> None:
    if Response.get_version(response) != 2:
        raise invalid_argument("The response provided is not suitable for public key extraction")
    if len(response) < MINIMUM_V2_MESSAGE_BYTES:
        raise invalid_argument(
            f"Expected at least {MINIMUM_V2_MESSAGE_BYTES} bytes, got {len(response)} bytes"
        )


__all__ = ["Response"]

"""Versioned HMAC Authorization headers bound to an access token."""
from __future__ import annotations

import base64
import binascii
import json
import logging
from dataclasses import dataclass
from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
from typing import Any, Dict, Optional

from jsonschema import ValidationError

from ..contracts import validate_authorization_header
from ..defaults import AUTH_INFO, DEFAULT_DRIFT_ALLOWANCE, DEFAULT_VERSION, SALT_BYTES
from . import primitives, signature
from .exceptions import ErrorKind, NcryptfError, invalid_argument
from .keys import Token

logger = logging.getLogger(__name__)

_HEADER_PREFIX = "HMAC "


def _derive_hmac_key(salt: bytes, ikm: bytes) -> bytes:
    derived = primitives.hkdf_sha256(salt, ikm, AUTH_INFO, 32)
    # Peers key the HMAC with the ASCII hex text of the derived key, not the raw bytes.
    return derived.hex().encode("ascii")


class Authorization:
    """Signed Authorization header for a single request.

    The HMAC is computed once at construction from the request method, URI,
    body, timestamp and salt, keyed by material derived from ``token.ikm``.
    """

    def __init__(
        self,
        http_method: str,
        uri: str,
        token: Token,
        date: datetime,
        payload: str,
        version: int = DEFAULT_VERSION,
        salt: Optional[bytes] = None,
    ) -> None:
        if salt is None:
            salt = primitives.random_bytes(SALT_BYTES)
        if len(salt) != SALT_BYTES:
            raise invalid_argument(f"Salt should be {SALT_BYTES} bytes")

        self._token = token
        self._date = date
        self._version = version
        self._salt = bytes(salt)
        self._signature = signature.derive(http_method, uri, self._salt, date, payload, version)

        try:
            key = _derive_hmac_key(self._salt, token.ikm)
            self._hmac = primitives.hmac_sha256(key, self._signature.encode("utf-8"))
        except (TypeError, ValueError) as exc:
            logger.debug("HMAC key derivation failed for version %s header", version)
            raise NcryptfError(ErrorKind.KEY_DERIVATION, "Unable to derive the HMAC key") from exc

    @property
    def date(self) -> datetime:
        return self._date

    @property
    def date_string(self) -> str:
        return signature.format_date(self._date)

    @property
    def version(self) -> int:
        return self._version

    @property
    def hmac(self) -> bytes:
        return self._hmac

    @property
    def encoded_hmac(self) -> str:
        return base64.b64encode(self._hmac).decode("ascii")

    @property
    def salt(self) -> bytes:
        return self._salt

    @property
    def encoded_salt(self) -> str:
        return base64.b64encode(self._salt).decode("ascii")

    @property
    def signature_string(self) -> str:
        return self._signature

    @property
    def header(self) -> str:
        return self.get_header()

    def get_header(self) -> str:
        if self._version == 2:
            body = json.dumps(
                {
                    "access_token": self._token.access_token,
                    "date": self.date_string,
                    "hmac": self.encoded_hmac,
                    "salt": self.encoded_salt,
                    "v": 2,
                },
                separators=(",", ":"),
                ensure_ascii=False,
            )
            body = body.replace("/", "\\/")
            return _HEADER_PREFIX + base64.b64encode(body.encode("utf-8")).decode("ascii")

        return f"{_HEADER_PREFIX}{self._token.access_token},{self.encoded_hmac},{self.encoded_salt}"

    def verify(
        self,
        hmac: bytes,
        auth: "Authorization",
        drift_allowance: int = DEFAULT_DRIFT_ALLOWANCE,
        *,
        now: Optional[datetime] = None,
    ) -> bool:
        """Return ``True`` if *hmac* matches *auth* and *auth* is recent enough.

        A drift equal to *drift_allowance* seconds is already rejected.
        """

        current = datetime.now(timezone.utc) if now is None else now
        drift = abs(_epoch_seconds(current) - _epoch_seconds(auth.date))
        if drift >= drift_allowance:
            logger.debug("Rejecting Authorization: drift of %ss reaches or exceeds %ss", drift, drift_allowance)
            return False

        return primitives.constant_time_equals(hmac, auth.hmac)


def _epoch_seconds(value: datetime) -> int:
    if value.tzinfo is None:
        value = value.replace(tzinfo=timezone.utc)
    return int(value.timestamp())


@dataclass(frozen=True)
class AuthorizationHeader:
    """Fields recovered from an Authorization header value."""

    access_token: str
    hmac: bytes
    salt: bytes
    version: int
    date: Optional[datetime] = None

    def to_dict(self) -> Dict[str, Any]:
        data: Dict[str, Any] = {
            "access_token": self.access_token,
            "hmac": base64.b64encode(self.hmac).decode("ascii"),
            "salt": base64.b64encode(self.salt).decode("ascii"),
            "v": self.version,
        }
        if self.date is not None:
            data["date"] = signature.format_date(self.date)
        return data


def _b64decode(value: str, field: str) -> bytes:
    try:
        return base64.b64decode(value, validate=True)
    except (binascii.Error, ValueError) as exc:
        raise invalid_argument(f"Authorization {field} is not valid base64") from exc


def _parse_v1(value: str) -> AuthorizationHeader:
    parts = value.split(",")
    if len(parts) != 3 or not parts[0]:
        raise invalid_argument("Version 1 Authorization header must have three comma separated fields")
    access_token, encoded_hmac, encoded_salt = parts
    return AuthorizationHeader(
        access_token=access_token,
        hmac=_b64decode(encoded_hmac, "hmac"),
        salt=_b64decode(encoded_salt, "salt"),
        version=1,
    )


def _parse_v2(value: str) -> AuthorizationHeader:
    raw = _b64decode(value, "header")
    try:
        payload = json.loads(raw.decode("utf-8"))
    except (UnicodeDecodeError, ValueError) as exc:
        raise invalid_argument("Version 2 Authorization header is not valid JSON") from exc

    try:
        validate_authorization_header(payload)
    except ValidationError as exc:
        raise invalid_argument(f"Version 2 Authorization header is malformed: {exc.message}") from exc

    try:
        date = parsedate_to_datetime(payload["date"])
    except (TypeError, ValueError) as exc:
        raise invalid_argument("Authorization date is not a valid RFC 2822 date") from exc

    return AuthorizationHeader(
        access_token=payload["access_token"],
        hmac=_b64decode(payload["hmac"], "hmac"),
        salt=_b64decode(payload["salt"], "salt"),
        version=2,
        date=date,
    )


def parse_header(value: str) -> AuthorizationHeader:
    """Decode a ``HMAC ...`` Authorization header of either version."""

    if not value.startswith(_HEADER_PREFIX):
        raise invalid_argument("Authorization header must start with 'HMAC '")
    credentials = value[len(_HEADER_PREFIX):].strip()
    if "," in credentials:
        return _parse_v1(credentials)
    return _parse_v2(credentials)


__all__ = ["Authorization", "AuthorizationHeader", "parse_header"]

"""Canonical signature strings bound into the Authorization HMAC."""
from __future__ import annotations

import base64
import hashlib
from datetime import datetime, timezone
from email.utils import format_datetime

from . import primitives


def _ensure_timezone(value: datetime) -> datetime:
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def format_date(date: datetime) -> str:
    """Return *date* as an RFC 2822 string with a literal ``+0000`` offset."""

    return format_datetime(_ensure_timezone(date))


def signature_hash(payload: str, salt: bytes, version: int = 2) -> str:
    """Hash the request body for the first line of the signature string.

    Version 2 uses a 64 byte BLAKE2b digest keyed with *salt*. Version 1 is a
    plain SHA-256 hex digest and ignores *salt*; servers still expect that.
    """

    data = payload.encode("utf-8")
    if version == 2:
        digest = primitives.generic_hash(data, salt, 64)
        return base64.b64encode(digest).decode("ascii")
    return hashlib.sha256(data).hexdigest().lower()


def derive(
    http_method: str,
    uri: str,
    salt: bytes,
    date: datetime,
    payload: str,
    version: int = 2,
) -> str:
    """Build the versioned signature string.

    The four lines are the payload hash, ``METHOD+uri``, the formatted date
    and the base64 salt, joined without a trailing newline.
    """

    method = http_method.upper()
    lines = [
        signature_hash(payload, salt, version),
        f"{method}+{uri}",
        format_date(date),
        base64.b64encode(salt).decode("ascii"),
    ]
    return "\n".join(lines)


__all__ = ["derive", "format_date", "signature_hash"]

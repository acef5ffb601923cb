"""Error taxonomy shared by every ncryptf operation."""
from __future__ import annotations

from enum import Enum


class ErrorKind(str, Enum):
    """Closed set of failure kinds callers branch on."""

    INVALID_ARGUMENT = "invalid_argument"
    ENCRYPTION_FAILED = "encryption_failed"
    DECRYPTION_FAILED = "decryption_failed"
    INVALID_CHECKSUM = "invalid_checksum"
    INVALID_SIGNATURE = "invalid_signature"
    KEY_DERIVATION = "key_derivation"


class NcryptfError(ValueError):
    """Raised for every protocol level failure.

    The ``kind`` attribute identifies what went wrong. None of these failures
    are transient: retrying with the same input reproduces the same error.
    """

    def __init__(self, kind: ErrorKind, message: str) -> None:
        super().__init__(message)
        self.kind = kind

    def __repr__(self) -> str:
        return f"NcryptfError({self.kind.value!r}, {str(self)!r})"


def invalid_argument(message: str) -> NcryptfError:
    return NcryptfError(ErrorKind.INVALID_ARGUMENT, message)


__all__ = ["ErrorKind", "NcryptfError", "invalid_argument"]

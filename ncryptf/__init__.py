"""Client side implementation of the ncryptf encrypted request protocol."""

import logging

from .core import (
    Authorization,
    AuthorizationHeader,
    ErrorKind,
    Keypair,
    NcryptfError,
    Request,
    Response,
    Token,
    generate_keypair,
    generate_signing_keypair,
    parse_header,
    zero,
)
from .core.primitives import random_bytes

__version__ = "0.2.0"

logging.getLogger(__name__).addHandler(logging.NullHandler())

__all__ = [
    "Authorization",
    "AuthorizationHeader",
    "ErrorKind",
    "Keypair",
    "NcryptfError",
    "Request",
    "Response",
    "Token",
    "generate_keypair",
    "generate_signing_keypair",
    "parse_header",
    "random_bytes",
    "zero",
]

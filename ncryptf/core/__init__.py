"""Protocol engine: envelopes, signatures and Authorization headers."""

from .authorization import Authorization, AuthorizationHeader, parse_header
from .exceptions import ErrorKind, NcryptfError
from .keys import Keypair, Token
from .request import Request
from .response import Response
from .utils import generate_keypair, generate_signing_keypair, zero

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
    "zero",
]

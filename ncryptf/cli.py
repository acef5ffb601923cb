"""Command line helpers for ncryptf envelopes and Authorization headers."""
from __future__ import annotations

import argparse
import base64
import binascii
import json
import logging
import sys
from datetime import datetime, timezone
from pathlib import Path

from nacl import encoding

from .core import (
    Authorization,
    NcryptfError,
    Request,
    Response,
    Token,
    generate_keypair,
    generate_signing_keypair,
    parse_header,
)
from .defaults import DEFAULT_SECRET_KEY, DEFAULT_SIGNING_KEY, DEFAULT_VERSION

logger = logging.getLogger(__name__)


def _public_key_path(secret_path: Path) -> Path:
    return secret_path.with_name(secret_path.name + ".pub")


def _decode_key_material(data: str) -> bytes:
    try:
        return bytes.fromhex(data)
    except ValueError:
        try:
            return encoding.Base64Encoder.decode(data.encode("ascii"))
        except (binascii.Error, ValueError) as exc:
            raise RuntimeError("Key material must be hex or base64 encoded") from exc


def _load_key(path: Path) -> bytes:
    data = path.read_text(encoding="utf-8").strip()
    if not data:
        raise RuntimeError(f"Key file {path} is empty")
    return _decode_key_material(data)


def _read_payload(path: Path | None) -> str:
    if path is None:
        return ""
    if str(path) == "-":
        return sys.stdin.read()
    return path.read_text(encoding="utf-8")


def _emit(output: str, path: Path | None) -> None:
    if path:
        path.parent.mkdir(parents=True, exist_ok=True)
        path.write_text(output, encoding="utf-8")
    else:
        print(output)


def _handle_keygen(args: argparse.Namespace) -> int:
    output = args.output or (DEFAULT_SIGNING_KEY if args.signing else DEFAULT_SECRET_KEY)
    keypair = generate_signing_keypair() if args.signing else generate_keypair()

    output.parent.mkdir(parents=True, exist_ok=True)
    output.write_text(keypair.secret_key.hex(), encoding="utf-8")
    output.chmod(0o600)
    _public_key_path(output).write_text(keypair.public_key.hex(), encoding="utf-8")

    logger.debug("Wrote %s keypair to %s", "signing" if args.signing else "box", output)
    print(base64.b64encode(keypair.public_key).decode("ascii"))
    return 0


def _handle_encrypt(args: argparse.Namespace) -> int:
    secret_key = _load_key(args.secret_key)
    public_key = _decode_key_material(args.public_key)
    signing_key = _load_key(args.signing_key) if args.version == 2 else None
    nonce = _decode_key_material(args.nonce) if args.nonce else None

    request = Request(secret_key, public_key)
    cipher = request.encrypt(_read_payload(args.input), signing_key, args.version, nonce)
    _emit(base64.b64encode(cipher).decode("ascii"), args.output)
    return 0


def _handle_decrypt(args: argparse.Namespace) -> int:
    secret_key = _load_key(args.secret_key)
    cipher = base64.b64decode(_read_payload(args.input).strip())
    public_key = _decode_key_material(args.public_key) if args.public_key else None
    nonce = _decode_key_material(args.nonce) if args.nonce else None

    plaintext = Response(secret_key).decrypt(cipher, public_key, nonce)
    _emit(plaintext, args.output)
    return 0


def _handle_sign(args: argparse.Namespace) -> int:
    signing_key = _load_key(args.signing_key)
    payload = _read_payload(args.input)
    public_key = _decode_key_material(args.public_key)
    signature = Request(_load_key(args.secret_key), public_key).sign(payload, signing_key)
    print(base64.b64encode(signature).decode("ascii"))
    return 0


def _handle_header(args: argparse.Namespace) -> int:
    token = Token(
        access_token=args.access_token,
        refresh_token=args.refresh_token,
        ikm=_decode_key_material(args.ikm),
        signature=_load_key(args.signing_key),
        expires_at=args.expires_at,
    )
    salt = _decode_key_material(args.salt) if args.salt else None
    auth = Authorization(
        args.method,
        args.uri,
        token,
        datetime.now(timezone.utc),
        _read_payload(args.payload),
        args.version,
        salt,
    )
    print(auth.get_header())
    return 0


def _handle_parse_header(args: argparse.Namespace) -> int:
    parsed = parse_header(args.value)
    if args.as_json:
        print(json.dumps(parsed.to_dict(), sort_keys=True))
    else:
        print(json.dumps(parsed.to_dict(), indent=2, sort_keys=True))
    return 0


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(prog="ncryptf", description="ncryptf CLI helpers")
    parser.add_argument("--verbose", action="store_true", help="Enable debug logging")
    subparsers = parser.add_subparsers(dest="command", required=True)

    keygen_parser = subparsers.add_parser("keygen", help="Generate a box or signing keypair")
    keygen_parser.add_argument(
        "--signing",
        action="store_true",
        help="Generate an Ed25519 signing keypair instead of a Curve25519 box keypair",
    )
    keygen_parser.add_argument(
        "--output",
        type=Path,
        help="Secret key destination; the public key is written next to it with a .pub suffix",
    )
    keygen_parser.set_defaults(func=_handle_keygen)

    encrypt_parser = subparsers.add_parser("encrypt", help="Encrypt a payload for a public key")
    encrypt_parser.add_argument("input", type=Path, help="Path to the payload ('-' for stdin)")
    encrypt_parser.add_argument(
        "--secret-key",
        type=Path,
        default=DEFAULT_SECRET_KEY,
        help="Path to our Curve25519 secret key",
    )
    encrypt_parser.add_argument(
        "--public-key",
        required=True,
        help="Recipient public key (hex or base64)",
    )
    encrypt_parser.add_argument(
        "--signing-key",
        type=Path,
        default=DEFAULT_SIGNING_KEY,
        help="Path to the Ed25519 secret key used for version 2 messages",
    )
    encrypt_parser.add_argument("--version", type=int, choices=(1, 2), default=DEFAULT_VERSION)
    encrypt_parser.add_argument("--nonce", help="Explicit 24 byte nonce (hex or base64)")
    encrypt_parser.add_argument(
        "--output",
        type=Path,
        help="Optional output path for the base64 envelope (defaults to stdout)",
    )
    encrypt_parser.set_defaults(func=_handle_encrypt)

    decrypt_parser = subparsers.add_parser("decrypt", help="Decrypt a base64 encoded message")
    decrypt_parser.add_argument("input", type=Path, help="Path to the base64 message ('-' for stdin)")
    decrypt_parser.add_argument(
        "--secret-key",
        type=Path,
        default=DEFAULT_SECRET_KEY,
        help="Path to our Curve25519 secret key",
    )
    decrypt_parser.add_argument("--public-key", help="Sender public key, required for version 1")
    decrypt_parser.add_argument("--nonce", help="Nonce, required for version 1")
    decrypt_parser.add_argument("--output", type=Path, help="Optional output path for the plaintext")
    decrypt_parser.set_defaults(func=_handle_decrypt)

    sign_parser = subparsers.add_parser("sign", help="Produce a detached signature for a version 1 payload")
    sign_parser.add_argument("input", type=Path, help="Path to the payload ('-' for stdin)")
    sign_parser.add_argument("--secret-key", type=Path, default=DEFAULT_SECRET_KEY)
    sign_parser.add_argument("--public-key", required=True, help="Recipient public key (hex or base64)")
    sign_parser.add_argument("--signing-key", type=Path, default=DEFAULT_SIGNING_KEY)
    sign_parser.set_defaults(func=_handle_sign)

    header_parser = subparsers.add_parser("header", help="Build an Authorization header")
    header_parser.add_argument("--method", required=True, help="HTTP method")
    header_parser.add_argument("--uri", required=True, help="Request URI including the query string")
    header_parser.add_argument("--access-token", required=True)
    header_parser.add_argument("--refresh-token", default="")
    header_parser.add_argument("--ikm", required=True, help="32 byte initial key material (hex or base64)")
    header_parser.add_argument(
        "--signing-key",
        type=Path,
        default=DEFAULT_SIGNING_KEY,
        help="Path to the token's Ed25519 secret key",
    )
    header_parser.add_argument("--expires-at", type=float, default=0.0)
    header_parser.add_argument("--payload", type=Path, help="Path to the request body")
    header_parser.add_argument("--version", type=int, choices=(1, 2), default=DEFAULT_VERSION)
    header_parser.add_argument("--salt", help="Explicit 32 byte salt (hex or base64)")
    header_parser.set_defaults(func=_handle_header)

    parse_parser = subparsers.add_parser("parse-header", help="Decode an Authorization header value")
    parse_parser.add_argument("value", help="The full header value, including the 'HMAC ' prefix")
    parse_parser.add_argument(
        "--as-json",
        action="store_true",
        help="Emit compact JSON instead of pretty output",
    )
    parse_parser.set_defaults(func=_handle_parse_header)

    return parser


def main(argv: list[str] | None = None) -> int:
    parser = build_parser()
    args = parser.parse_args(argv)
    if args.verbose:
        logging.basicConfig(level=logging.DEBUG)
    try:
        return args.func(args)
    except NcryptfError as exc:
        print(f"ncryptf: {exc.kind.value}: {exc}", file=sys.stderr)
        return 1
    except (OSError, RuntimeError) as exc:
        print(f"ncryptf: {exc}", file=sys.stderr)
        return 1


if __name__ == "__main__":  # pragma: no cover - CLI entrypoint
    sys.exit(main())

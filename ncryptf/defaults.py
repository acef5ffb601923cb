from __future__ import annotations

from pathlib import Path


VERSION_2_HEADER = bytes.fromhex("DE259002")

DEFAULT_VERSION = 2
DEFAULT_DRIFT_ALLOWANCE = 90
SALT_BYTES = 32

AUTH_INFO = b"HMAC|AuthenticationKey"

# header(4) + nonce(24) + public key(32) + MAC(16) + signing key(32) + signature(64) + checksum(64)
MINIMUM_V2_MESSAGE_BYTES = 236

_PACKAGE_ROOT = Path(__file__).resolve().parent
SCHEMA_ROOT = _PACKAGE_ROOT / "schema"

KEY_DIR = Path("keys")
DEFAULT_SECRET_KEY = KEY_DIR / "box.key"
DEFAULT_SIGNING_KEY = KEY_DIR / "sign.key"

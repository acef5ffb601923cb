"""Build an Authorization header for a request and verify it."""
from __future__ import annotations

import time
from datetime import datetime, timezone

from ncryptf import Authorization, Token, generate_signing_keypair, parse_header, random_bytes


def main() -> None:
    token = Token(
        access_token="x2gMeJ5Np0CcKpZav+i9iiXeQBtaYMQ/yeEtcOgY3J",
        refresh_token="LRSEe5zHb1aq20Hr9te2sQF8sLReSkO8bS1eD/9LDM8",
        ikm=random_bytes(32),
        signature=generate_signing_keypair().secret_key,
        expires_at=time.time() + 14400,
    )

    auth = Authorization("POST", "/api/v1/user", token, datetime.now(timezone.utc), '{"foo":"bar"}')
    header = auth.get_header()
    print("Authorization:", header)

    parsed = parse_header(header)
    print("Parsed header:")
    print(parsed.to_dict())
    print("Verified:", auth.verify(parsed.hmac, auth))


if __name__ == "__main__":
    main()

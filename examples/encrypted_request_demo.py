"""Encrypt a request body, then decrypt and verify it as the server would."""
from __future__ import annotations

import base64

from ncryptf import Request, Response, generate_keypair, generate_signing_keypair


def main() -> None:
    client = generate_keypair()
    server = generate_keypair()
    signer = generate_signing_keypair()

    payload = '{"foo":"bar"}'
    envelope = Request(client.secret_key, server.public_key).encrypt(payload, signer.secret_key)

    print("Envelope preview:")
    print(base64.b64encode(envelope).decode("ascii"))

    response = Response(server.secret_key)
    print("Decrypted payload:")
    print(response.decrypt(envelope))

    print("\nSender public key:")
    print(Response.get_public_key_from_response(envelope).hex())


if __name__ == "__main__":
    main()

from __future__ import annotations

import base64
import hashlib
import hmac
import json
import logging
from datetime import datetime, timedelta, timezone

import pytest
from jsonschema import ValidationError

from ncryptf.core import Authorization, ErrorKind, NcryptfError, Token, parse_header
from ncryptf.core import primitives, signature

SALT = bytes(range(32))
IKM = bytes(range(100, 132))
DATE = datetime(2018, 8, 3, 15, 27, 48, tzinfo=timezone.utc)
TOKEN = Token(
    access_token="x2gMeJ5Np0CcKpZav+i9iiXeQBtaYMQ/yeEtcOgY3J",
    refresh_token="LRSEe5zHb1aq20Hr9te2sQF8sLReSkO8bS1eD/9LDM8",
    ikm=IKM,
    signature=bytes(range(64)),
    expires_at=DATE.timestamp() + 14400,
)


def _reference_hmac(method: str, uri: str, payload: str, version: int) -> bytes:
    prk = hmac.new(SALT, IKM, hashlib.sha256).digest()
    okm = hmac.new(prk, b"HMAC|AuthenticationKey\x01", hashlib.sha256).digest()
    message = signature.derive(method, uri, SALT, DATE, payload, version)
    return hmac.new(okm.hex().encode("ascii"), message.encode("utf-8"), hashlib.sha256).digest()


def _auth(version: int = 2, **overrides) -> Authorization:
    arguments = {
        "http_method": "POST",
        "uri": "/api/v1/test",
        "token": TOKEN,
        "date": DATE,
        "payload": '{"foo":"bar"}',
        "version": version,
        "salt": SALT,
    }
    arguments.update(overrides)
    return Authorization(**arguments)


def test_hkdf_matches_extract_then_expand() -> None:
    prk = hmac.new(SALT, IKM, hashlib.sha256).digest()
    okm = hmac.new(prk, b"HMAC|AuthenticationKey\x01", hashlib.sha256).digest()
    assert primitives.hkdf_sha256(SALT, IKM, b"HMAC|AuthenticationKey", 32) == okm


@pytest.mark.parametrize("version", [1, 2])
def test_hmac_uses_hex_encoded_hkdf_key(version: int) -> None:
    auth = _auth(version)
    assert len(auth.hmac) == 32
    assert auth.hmac == _reference_hmac("POST", "/api/v1/test", '{"foo":"bar"}', version)
    assert auth.signature_string == signature.derive("POST", "/api/v1/test", SALT, DATE, '{"foo":"bar"}', version)


def test_v1_header_format() -> None:
    auth = _auth(1)
    expected = "HMAC {},{},{}".format(
        TOKEN.access_token,
        base64.b64encode(auth.hmac).decode("ascii"),
        base64.b64encode(SALT).decode("ascii"),
    )
    assert auth.get_header() == expected
    assert auth.header == expected


def test_v2_header_is_base64_json_with_escaped_slashes() -> None:
    auth = _auth(2)
    header = auth.get_header()
    assert header.startswith("HMAC ")

    raw = base64.b64decode(header[len("HMAC "):]).decode("utf-8")
    assert "/" not in raw.replace("\\/", "")
    assert raw.startswith('{"access_token":"x2gMeJ5Np0CcKpZav+i9iiXeQBtaYMQ\\/yeEtcOgY3J","date":')
    assert raw.endswith(',"v":2}')

    decoded = json.loads(raw)
    assert decoded == {
        "access_token": TOKEN.access_token,
        "date": "Fri, 03 Aug 2018 15:27:48 +0000",
        "hmac": auth.encoded_hmac,
        "salt": auth.encoded_salt,
        "v": 2,
    }


def test_v2_header_keeps_non_ascii_token_as_utf8() -> None:
    token = Token(
        access_token="tök/én",
        refresh_token=TOKEN.refresh_token,
        ikm=IKM,
        signature=TOKEN.signature,
        expires_at=TOKEN.expires_at,
    )
    header = _auth(2, token=token).get_header()

    raw = base64.b64decode(header[len("HMAC "):]).decode("utf-8")
    assert raw.startswith('{"access_token":"tök\\/én","date":')
    assert "\\u" not in raw
    assert json.loads(raw)["access_token"] == "tök/én"
    assert parse_header(header).access_token == "tök/én"


def test_headers_are_deterministic() -> None:
    assert _auth().get_header() == _auth().get_header()


@pytest.mark.parametrize(
    "overrides",
    [
        {"http_method": "PUT"},
        {"uri": "/api/v1/other"},
        {"payload": '{"foo":"baz"}'},
        {"date": DATE + timedelta(seconds=1)},
        {"salt": bytes(32)},
        {"version": 1},
    ],
)
def test_changing_any_input_changes_hmac(overrides: dict) -> None:
    assert _auth(**overrides).hmac != _auth().hmac


def test_method_is_case_insensitive() -> None:
    assert _auth(http_method="post").hmac == _auth().hmac


def test_random_salt_when_omitted() -> None:
    first = _auth(salt=None)
    second = _auth(salt=None)
    assert len(first.salt) == 32
    assert first.salt != second.salt


def test_invalid_salt_length() -> None:
    with pytest.raises(NcryptfError) as excinfo:
        _auth(salt=bytes(16))
    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT


@pytest.mark.parametrize("version", [1, 2])
def test_verify_drift_boundary(version: int) -> None:
    auth = _auth(version)
    assert auth.verify(auth.hmac, auth, 90, now=DATE + timedelta(seconds=89))
    assert auth.verify(auth.hmac, auth, 90, now=DATE - timedelta(seconds=89))
    assert not auth.verify(auth.hmac, auth, 90, now=DATE + timedelta(seconds=90))
    assert not auth.verify(auth.hmac, auth, 90, now=DATE - timedelta(seconds=90))
    assert not auth.verify(auth.hmac, auth, 90, now=DATE + timedelta(seconds=3600))


def test_verify_logs_drift_at_allowance(caplog: pytest.LogCaptureFixture) -> None:
    auth = _auth()
    with caplog.at_level(logging.DEBUG, logger="ncryptf.core.authorization"):
        assert not auth.verify(auth.hmac, auth, 90, now=DATE + timedelta(seconds=90))
    assert "drift of 90s reaches or exceeds 90s" in caplog.text


def test_verify_rejects_wrong_hmac() -> None:
    auth = _auth()
    now = DATE + timedelta(seconds=1)
    assert not auth.verify(_auth(uri="/other").hmac, auth, now=now)
    assert not auth.verify(auth.hmac[:31], auth, now=now)
    assert not auth.verify(b"", auth, now=now)


def test_verify_old_fixed_date_against_current_clock() -> None:
    auth = _auth()
    assert not auth.verify(auth.hmac, auth, 90)


def test_verify_fresh_authorization() -> None:
    auth = _auth(date=datetime.now(timezone.utc))
    assert auth.verify(auth.hmac, auth)


def test_parse_v1_header() -> None:
    auth = _auth(1)
    parsed = parse_header(auth.get_header())
    assert parsed.version == 1
    assert parsed.access_token == TOKEN.access_token
    assert parsed.hmac == auth.hmac
    assert parsed.salt == SALT
    assert parsed.date is None


def test_parse_v2_header() -> None:
    auth = _auth(2)
    parsed = parse_header(auth.get_header())
    assert parsed.version == 2
    assert parsed.access_token == TOKEN.access_token
    assert parsed.hmac == auth.hmac
    assert parsed.salt == SALT
    assert parsed.date == DATE

    rebuilt = _auth(2, date=parsed.date, salt=parsed.salt)
    assert rebuilt.verify(parsed.hmac, rebuilt, now=DATE + timedelta(seconds=5))


def test_parse_header_rejects_other_schemes() -> None:
    with pytest.raises(NcryptfError) as excinfo:
        parse_header("Bearer abc")
    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT


def test_parse_header_rejects_schema_violations() -> None:
    body = json.dumps({"access_token": "abc", "date": "yesterday", "hmac": "", "salt": "", "v": 2})
    header = "HMAC " + base64.b64encode(body.encode("utf-8")).decode("ascii")
    with pytest.raises(NcryptfError) as excinfo:
        parse_header(header)
    assert excinfo.value.kind is ErrorKind.INVALID_ARGUMENT
    assert isinstance(excinfo.value.__cause__, ValidationError)


def test_parse_header_rejects_garbage() -> None:
    with pytest.raises(NcryptfError):
        parse_header("HMAC not-base64!!")
    with pytest.raises(NcryptfError):
        parse_header("HMAC " + base64.b64encode(b"[1, 2").decode("ascii"))
    with pytest.raises(NcryptfError):
        parse_header("HMAC token,only-two")

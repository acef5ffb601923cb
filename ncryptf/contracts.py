from __future__ import annotations

import json
from functools import lru_cache
from typing import Any, Dict

from jsonschema import Draft202012Validator

from .defaults import SCHEMA_ROOT


@lru_cache(maxsize=None)
def _load_schema(name: str) -> Dict[str, Any]:
    schema_path = SCHEMA_ROOT / name
    with schema_path.open("r", encoding="utf-8") as handle:
        schema = json.load(handle)
    Draft202012Validator.check_schema(schema)
    return schema


@lru_cache(maxsize=None)
def _authorization_header_validator() -> Draft202012Validator:
    return Draft202012Validator(_load_schema("authorization_header.v2.schema.json"))


def validate_authorization_header(payload: Dict[str, Any]) -> Dict[str, Any]:
    """Validate a decoded v2 Authorization JSON object and return it."""
    validator = _authorization_header_validator()
    validator.validate(payload)
    return payload

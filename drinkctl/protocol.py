"""Colon-terminated text protocol spoken between admin client and controller."""

from __future__ import annotations

import re
from enum import IntEnum
from typing import Iterable, Mapping

SEPARATOR = ":"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


class Command(IntEnum):
    """Request identifiers that open every message."""

    CHECK_NAME_DRINK = 0
    CHECK_STOCK = 1
    GET_INGREDIENTS_NAME = 3
    CREATE_DRINK = 4
    GET_DRINKS_NAME = 5
    GET_DRINK = 6
    CHANGE_DRINK = 7
    DELETE_DRINK = 8
    CHECK_NAME_INGREDIENT = 9
    CHECK_CONTAINER = 10
    CREATE_INGREDIENT = 11
    GET_INGREDIENT_ADDR = 12
    CHANGE_INGREDIENT_ADDR = 13
    DELETE_INGREDIENT = 14
    CLEAN = 15
    GET_ERROR = 16
    CLEAN_WATER = 17
    GET_TEMP = 18


def parse_command(message: str) -> int:
    """Read the numeric request id before the first separator; unreadable is 0."""
    head = message.split(SEPARATOR, 1)[0]
    match = _LEADING_INT.match(head)
    return int(match.group(1)) if match else 0


def decode_fields(message: str) -> list[str]:
    """Split a message into its colon-terminated fields.

    Text after the last separator is not a complete field and is dropped.
    """
    return message.split(SEPARATOR)[:-1]


def _text(value: object) -> str:
    if isinstance(value, int) and not isinstance(value, bool):
        return str(int(value))
    return str(value)


def encode_fields(fields: Iterable[object]) -> str:
    """Join fields, each followed by a separator."""
    return "".join(f"{_text(value)}{SEPARATOR}" for value in fields)


def parse_pairs(message: str) -> dict[str, str]:
    """Read alternating key and value fields into a dict."""
    fields = decode_fields(message)
    if len(fields) % 2:
        raise ValueError("message holds a key without a value")
    return dict(zip(fields[0::2], fields[1::2]))


def encode_pairs(pairs: Mapping[str, object]) -> str:
    """Write key and value fields in key order."""
    return encode_fields(
        item for key in sorted(pairs) for item in (key, pairs[key])
    )
"""Drink recipes: a name, a picture path and five ingredient slots."""

from __future__ import annotations

import re
from dataclasses import dataclass, field
from itertools import chain
from typing import Iterable

SLOTS = 5
UNDECLARED = "NOT_DECLARED"
DEFAULT_PATH = "STD/PATH/TO/TMP.png"
FIELD_COUNT = 2 + 2 * SLOTS

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: object) -> int:
    """Read a leading integer the lenient way: anything unreadable is 0."""
    match = _LEADING_INT.match(str(text))
    return int(match.group(1)) if match else 0


@dataclass
class DrinkContent:
    """One ingredient slot of a drink and the amount poured from it."""

    name: str = UNDECLARED
    amount: int = 0


def _empty_slots() -> list[DrinkContent]:
    return [DrinkContent() for _ in range(SLOTS)]


@dataclass
class Drink:
    """A drink recipe with exactly five ingredient slots."""

    name: str = UNDECLARED
    path: str = DEFAULT_PATH
    content: list[DrinkContent] = field(default_factory=_empty_slots)

    def __post_init__(self) -> None:
        self.content = list(self.content)
        if len(self.content) != SLOTS:
            raise ValueError(f"a drink has exactly {SLOTS} ingredient slots")

    def to_fields(self) -> list[str]:
        """Return name, five (ingredient, amount) pairs and path as strings."""
        pairs = chain.from_iterable((c.name, str(c.amount)) for c in self.content)
        return [self.name, *pairs, self.path]

    @classmethod
    def from_fields(cls, fields: Iterable[object]) -> "Drink":
        """Build a drink from the field order produced by to_fields."""
        values = [str(value) for value in fields]
        if len(values) < FIELD_COUNT:
            raise ValueError(
                f"a drink needs {FIELD_COUNT} fields, got {len(values)}"
            )
        slots = values[1 : 1 + 2 * SLOTS]
        content = [
            DrinkContent(name, _atoi(amount))
            for name, amount in zip(slots[0::2], slots[1::2])
        ]
        return cls(name=values[0], path=values[FIELD_COUNT - 1], content=content)
"""Console front end that reports to the user and confirms orders."""

from __future__ import annotations

import sys
from typing import Iterable, TextIO


class Controller:
    """Writes messages to a text stream, standard output by default."""

    def __init__(self, stream: TextIO | None = None) -> None:
        self._stream = stream

    def _out(self) -> TextIO:
        return sys.stdout if self._stream is None else self._stream

    def print(self, text: str) -> None:
        """Show one message."""
        out = self._out()
        out.write(f"{text}\n")
        out.flush()

    def confirm_order(self) -> bool:
        """Ask whether an order may go ahead; the console always agrees."""
        return True

    def print_drinks(self, drinks: Iterable[str]) -> None:
        """Show each drink on its own line."""
        for drink in drinks:
            self.print(drink)
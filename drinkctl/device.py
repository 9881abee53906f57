"""Access to the dispenser board over its SPI character device."""

from __future__ import annotations

import os
from pathlib import Path

DEFAULT_DEVICE_PATH = "/dev/spidev"
FRAME_SIZE = 8

ORDER_STATE = "1"
STOCK_STATE = "2"
CLEAN_STATE = "3"
TEMP_STATE = "4"


class SpiDevice:
    """Exchanges fixed-size, NUL-padded text frames with the dispenser board."""

    def __init__(self, path: str | Path = DEFAULT_DEVICE_PATH) -> None:
        self.path = Path(path)
        self._fd: int | None = os.open(self.path, os.O_RDWR)

    def _require_open(self) -> int:
        if self._fd is None:
            raise ValueError("device is closed")
        return self._fd

    def write(self, command: object) -> int:
        """Send one frame holding the command text; return the bytes written."""
        fd = self._require_open()
        payload = str(command).encode("ascii")
        if len(payload) > FRAME_SIZE:
            raise ValueError(f"a frame holds at most {FRAME_SIZE} bytes")
        return os.write(fd, payload.ljust(FRAME_SIZE, b"\0"))

    def read(self) -> str:
        """Receive one frame and return its text up to the first NUL."""
        fd = self._require_open()
        frame = os.read(fd, FRAME_SIZE)
        return frame.split(b"\0", 1)[0].decode("ascii", errors="replace")

    def close(self) -> None:
        if self._fd is not None:
            os.close(self._fd)
            self._fd = None

    def __enter__(self) -> "SpiDevice":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
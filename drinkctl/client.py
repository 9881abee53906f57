"""TCP client that sends one request per connection to the controller."""

from __future__ import annotations

import socket

from drinkctl.log import get_logger

DEFAULT_HOST = "10.9.8.2"
DEFAULT_PORT = 7913
BUFFER_SIZE = 2048


class Client:
    """Opens a fresh connection for every message and reads the reply from it."""

    def __init__(
        self,
        host: str = DEFAULT_HOST,
        port: int = DEFAULT_PORT,
        timeout: float | None = None,
    ) -> None:
        self.host = host
        self.port = port
        self.timeout = timeout
        self._sock: socket.socket | None = None

    def send(self, data: str) -> None:
        """Connect to the controller and send one message."""
        get_logger().log(f"Trying to send: {data}")
        self.close()
        sock = socket.create_connection((self.host, self.port), timeout=self.timeout)
        try:
            sock.sendall(data.encode("utf-8"))
        except OSError:
            sock.close()
            raise
        self._sock = sock

    def receive(self) -> str:
        """Read the reply to the last message sent."""
        if self._sock is None:
            raise ConnectionError("no message has been sent")
        return self._sock.recv(BUFFER_SIZE).decode("utf-8", errors="replace")

    def close(self) -> None:
        if self._sock is not None:
            self._sock.close()
            self._sock = None

    def __enter__(self) -> "Client":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()
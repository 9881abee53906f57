"""TCP server that hands each received message to a request handler."""

from __future__ import annotations

import socketserver
import threading
from typing import Callable

from drinkctl.log import get_logger

DEFAULT_PORT = 7913
BUFFER_SIZE = 512
BACKLOG = 5
EXIT = "EXIT"

Handler = Callable[[str], "str | None"]


class _TCPServer(socketserver.ThreadingTCPServer):
    daemon_threads = True
    allow_reuse_address = False
    request_queue_size = BACKLOG

    def __init__(self, address: tuple[str, int], owner: "Server") -> None:
        self.owner = owner
        super().__init__(address, _Connection)


class _Connection(socketserver.BaseRequestHandler):
    def handle(self) -> None:
        get_logger().log("Client connected, worker started.")
        owner: Server = self.server.owner  # type: ignore[attr-defined]
        while True:
            try:
                chunk = self.request.recv(BUFFER_SIZE)
            except OSError:
                return
            if not chunk:
                return
            message = chunk.decode("utf-8", errors="replace")
            if message.strip() == EXIT:
                return
            owner._dispatch(message, self.request)


class Server:
    """Accepts clients on a port and answers each message through a handler."""

    def __init__(
        self, handler: Handler, host: str = "", port: int = DEFAULT_PORT
    ) -> None:
        self.handler = handler
        self._started = threading.Event()
        try:
            self._server = _TCPServer((host, port), self)
        except OSError:
            get_logger().log("Couldn't bind")
            raise

    def _dispatch(self, message: str, connection) -> None:
        logger = get_logger()
        try:
            reply = self.handler(message)
        except Exception as exc:  # one bad request must not end the connection
            logger.log(f"Request failed: {exc!r}")
            return
        if reply is None:
            return
        try:
            connection.sendall(reply.encode("utf-8"))
        except OSError:
            logger.log("ERROR writing to socket")
            return
        logger.log(f"Server wrote: {reply}")

    def address(self) -> tuple[str, int]:
        """Return the host and port the server is bound to."""
        host, port = self._server.server_address[:2]
        return str(host), int(port)

    def serve_forever(self) -> None:
        """Accept connections until shutdown, one thread per client."""
        get_logger().log("Server started, listening for incomming connections.")
        self._started.set()
        self._server.serve_forever()

    def shutdown(self) -> None:
        """Stop accepting connections and release the port."""
        if self._started.is_set():
            self._server.shutdown()
        self._server.server_close()

    def __enter__(self) -> "Server":
        return self

    def __exit__(self, *args: object) -> None:
        self.shutdown()
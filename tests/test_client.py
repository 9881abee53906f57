import socket
import threading

import pytest

from drinkctl.client import Client


@pytest.fixture
def reply_server():
    listener = socket.create_server(("127.0.0.1", 0))
    received = []

    def serve():
        conn, _ = listener.accept()
        with conn:
            received.append(conn.recv(2048).decode())
            conn.sendall(b"TRUE")

    worker = threading.Thread(target=serve, daemon=True)
    worker.start()
    yield listener.getsockname()[1], received
    worker.join(5)
    listener.close()


def test_send_and_receive(reply_server):
    port, received = reply_server
    with Client("127.0.0.1", port, timeout=5) as client:
        client.send("0:Cuba:")
        reply = client.receive()
    assert reply == "TRUE"
    assert received == ["0:Cuba:"]


def test_receive_before_send_raises():
    client = Client("127.0.0.1", 1, timeout=1)
    with pytest.raises(ConnectionError):
        client.receive()


def test_receive_after_close_raises(reply_server):
    port, _ = reply_server
    client = Client("127.0.0.1", port, timeout=5)
    client.send("5:")
    assert client.receive() == "TRUE"
    client.close()
    with pytest.raises(ConnectionError):
        client.receive()


def test_send_to_closed_port_raises():
    probe = socket.create_server(("127.0.0.1", 0))
    port = probe.getsockname()[1]
    probe.close()
    client = Client("127.0.0.1", port, timeout=2)
    with pytest.raises(OSError):
        client.send("5:")
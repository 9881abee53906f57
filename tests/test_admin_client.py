import io
import threading

import pytest

from drinkctl.admin import UNKNOWN_REPLY, Admin
from drinkctl.admin_client import AdminClient, main
from drinkctl.controller import Controller
from drinkctl.database import Database
from drinkctl.drink import Drink, DrinkContent
from drinkctl.server import Server


class FakeDevice:
    def __init__(self, replies=()):
        self.written = []
        self.replies = list(replies)

    def write(self, command):
        self.written.append(str(command))
        return 8

    def read(self):
        return self.replies.pop(0) if self.replies else ""


class Loopback:
    """Transport that hands each message straight to an Admin."""

    def __init__(self, admin):
        self.admin = admin
        self.sent = []
        self._reply = None

    def send(self, data):
        self.sent.append(data)
        self._reply = self.admin.handle(data)

    def receive(self):
        return self._reply or ""


def cuba(amount=20):
    return Drink(
        "Cuba",
        "cuba.png",
        [DrinkContent("Rom", 4), DrinkContent("Cola", amount)]
        + [DrinkContent() for _ in range(3)],
    )


@pytest.fixture
def database():
    db = Database(":memory:")
    db.create_schema()
    db.create_ingredient("Cola", 3)
    db.create_ingredient("Rom", 5)
    yield db
    db.close()


@pytest.fixture
def device():
    return FakeDevice()


@pytest.fixture
def stream():
    return io.StringIO()


@pytest.fixture
def setup(database, device, stream):
    admin = Admin(database, device, Controller(io.StringIO()), delay=0)
    transport = Loopback(admin)
    return AdminClient(transport, Controller(stream)), transport


def test_create_and_get_drink_round_trip(setup):
    client, _ = setup
    assert client.create_drink(cuba()) is True
    assert client.check_name_drink("Cuba") is True
    assert client.get_drink("Cuba") == cuba()


def test_create_duplicate_drink_fails(setup):
    client, _ = setup
    assert client.create_drink(cuba()) is True
    assert client.create_drink(cuba()) is False


def test_delete_drink_wire_format(setup):
    client, transport = setup
    client.create_drink(cuba())
    assert client.delete_drink("Cuba") is True
    assert transport.sent[-1] == "8:Cuba:"
    assert client.check_name_drink("Cuba") is False


def test_drink_names(setup):
    client, _ = setup
    client.create_drink(cuba())
    assert client.drink_names() == ["Cuba", "cuba.png"]


def test_change_drink(setup):
    client, _ = setup
    client.create_drink(cuba())
    client.change_drink(cuba(amount=30))
    assert client.get_drink("Cuba") == cuba(amount=30)


def test_ingredient_lifecycle(setup):
    client, _ = setup
    client.create_ingredient("Gin", 7)
    assert client.check_name_ingredient("Gin") is True
    assert client.ingredient_address("Gin") == 7
    assert client.change_ingredient_address("Gin", 9) is True
    assert client.ingredient_address("Gin") == 9
    assert client.delete_ingredient("Gin") is True
    assert client.check_name_ingredient("Gin") is False


def test_ingredient_in_use_cannot_be_deleted(setup):
    client, _ = setup
    client.create_drink(cuba())
    assert client.delete_ingredient("Cola") is False
    assert "Cola" in client.ingredient_names()


def test_check_container(setup):
    client, transport = setup
    assert client.check_container(3) is False
    assert transport.sent[-1] == "10:3:"
    assert client.check_container(42) is True


def test_ingredient_names(setup):
    client, _ = setup
    assert client.ingredient_names() == ["Cola", "Rom"]


def test_check_stock_matches_admin(setup, database, device):
    client, _ = setup
    device.replies = ["10", "2"]
    remote = client.check_stock()
    direct = Admin(database, FakeDevice(["10", "2"]), delay=0).check_stock()
    assert remote == direct
    assert set(remote) == {"Cola", "Rom"}


def test_get_temp(setup, device):
    client, _ = setup
    device.replies = ["5", "6"]
    assert client.get_temp() == {"Cola": "5", "Rom": "6"}


def test_clean_shows_reply(setup, stream):
    client, _ = setup
    assert client.clean() == "WATER"
    assert "WATER" in stream.getvalue()


def test_clean_water_shows_reply(setup, stream):
    client, _ = setup
    assert client.clean_water() == "ADD_NORMAL"
    assert "ADD_NORMAL" in stream.getvalue()


def test_error_text_is_not_served(setup):
    client, _ = setup
    assert client.error_text(2) == UNKNOWN_REPLY


def test_main_prints_stock(database, capsys):
    admin = Admin(database, FakeDevice(["1", "2"]), Controller(io.StringIO()), 0)
    server = Server(admin.handle, "127.0.0.1", 0)
    worker = threading.Thread(target=server.serve_forever, daemon=True)
    worker.start()
    host, port = server.address()
    try:
        code = main(["--host", host, "--port", str(port), "--timeout", "5"])
    finally:
        server.shutdown()
        worker.join(5)
    out = capsys.readouterr().out
    assert code == 0
    assert "NAME: Cola" in out
    assert "NAME: Rom" in out
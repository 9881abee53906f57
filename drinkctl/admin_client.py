"""Remote administration of the drink controller over its text protocol."""

from __future__ import annotations

import argparse
import re
import sys

from drinkctl.client import DEFAULT_HOST, DEFAULT_PORT, Client
from drinkctl.controller import Controller
from drinkctl.drink import FIELD_COUNT, Drink
from drinkctl.protocol import Command, decode_fields, encode_fields, parse_pairs

TRUE = "TRUE"
MISSING_FIELD = "*"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


class AdminClient:
    """Sends admin requests to the controller and reads its answers."""

    def __init__(self, client=None, controller: Controller | None = None) -> None:
        self.client = client if client is not None else Client()
        self.controller = controller if controller is not None else Controller()

    def _tell(self, command: Command, *fields: object) -> None:
        self.client.send(encode_fields([command, *fields]))

    def _ask(self, command: Command, *fields: object) -> str:
        self._tell(command, *fields)
        return self.client.receive()

    def _confirm(self, command: Command, *fields: object) -> bool:
        return self._ask(command, *fields) == TRUE

    def change_drink(self, drink: Drink) -> None:
        """Replace a drink's recipe; the controller sends no answer."""
        self._tell(Command.CHANGE_DRINK, *drink.to_fields())

    def clean(self) -> str:
        """Start the cleaning cycle and show the controller's answer."""
        reply = self._ask(Command.CLEAN)
        self.controller.print(reply)
        return reply

    def clean_water(self) -> str:
        """Start the water rinse and show the controller's answer."""
        reply = self._ask(Command.CLEAN_WATER)
        self.controller.print(reply)
        return reply

    def get_temp(self) -> dict[str, str]:
        return parse_pairs(self._ask(Command.GET_TEMP))

    def ingredient_names(self) -> list[str]:
        return decode_fields(self._ask(Command.GET_INGREDIENTS_NAME))

    def delete_drink(self, name: str) -> bool:
        return self._confirm(Command.DELETE_DRINK, name)

    def check_name_ingredient(self, name: str) -> bool:
        return self._confirm(Command.CHECK_NAME_INGREDIENT, name)

    def check_container(self, addr: int) -> bool:
        """Tell whether a container address is free."""
        return self._confirm(Command.CHECK_CONTAINER, int(addr))

    def change_ingredient_address(self, name: str, addr: int) -> bool:
        return self._confirm(Command.CHANGE_INGREDIENT_ADDR, name, int(addr))

    def delete_ingredient(self, name: str) -> bool:
        return self._confirm(Command.DELETE_INGREDIENT, name)

    def create_ingredient(self, name: str, addr: int) -> None:
        """Add an ingredient; the controller sends no answer."""
        self._tell(Command.CREATE_INGREDIENT, name, int(addr))

    def ingredient_address(self, name: str) -> int:
        return _atoi(self._ask(Command.GET_INGREDIENT_ADDR, name))

    def check_name_drink(self, name: str) -> bool:
        return self._confirm(Command.CHECK_NAME_DRINK, name)

    def create_drink(self, drink: Drink) -> bool:
        return self._confirm(Command.CREATE_DRINK, *drink.to_fields())

    def error_text(self, code: int) -> str:
        return self._ask(Command.GET_ERROR, int(code))

    def drink_names(self) -> list[str]:
        """Return each drink's name followed by its picture path."""
        return decode_fields(self._ask(Command.GET_DRINKS_NAME))

    def check_stock(self) -> dict[str, str]:
        return parse_pairs(self._ask(Command.CHECK_STOCK))

    def get_drink(self, name: str) -> Drink:
        fields = decode_fields(self._ask(Command.GET_DRINK, name))
        fields += [MISSING_FIELD] * max(0, FIELD_COUNT - len(fields))
        return Drink.from_fields(fields)


def main(argv: list[str] | None = None) -> int:
    """Show the controller's stock of every ingredient."""
    parser = argparse.ArgumentParser(description="Show the dispenser's stock.")
    parser.add_argument("--host", default=DEFAULT_HOST)
    parser.add_argument("--port", type=int, default=DEFAULT_PORT)
    parser.add_argument("--timeout", type=float, default=10.0)
    args = parser.parse_args(argv)

    print("****FAKE AD GUI****")
    print()
    print("[*] Creating Controller and AC")
    with Client(args.host, args.port, args.timeout) as client:
        admin = AdminClient(client, Controller())
        try:
            stock = admin.check_stock()
        except (OSError, ValueError) as exc:
            print(f"[-] Couldn't read stock: {exc}", file=sys.stderr)
            return 1
    for name in sorted(stock):
        print(f"NAME: {name}")
        print(f"AMT: {stock[name]}")
        print()
    return 0
"""Administration of drinks, ingredients and the dispenser for remote clients."""

from __future__ import annotations

import re
import threading
import time
from typing import Callable

from drinkctl.controller import Controller
from drinkctl.database import Database, DatabaseError, Kind, error_text
from drinkctl.device import CLEAN_STATE, STOCK_STATE, TEMP_STATE
from drinkctl.drink import FIELD_COUNT, Drink
from drinkctl.log import get_logger
from drinkctl.protocol import (
    Command,
    decode_fields,
    encode_fields,
    encode_pairs,
    parse_command,
)

TRUE = "TRUE"
FALSE = "FALSE"
UNKNOWN_REPLY = "UNKNOWN_COMMAND"
MISSING_FIELD = "*"
STOCK_UNIT = 8

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _atoi(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


def _flag(value: bool) -> str:
    return TRUE if value else FALSE


class Admin:
    """Carries out admin requests against the database and the dispenser."""

    def __init__(
        self,
        database: Database,
        device,
        controller: Controller | None = None,
        delay: float = 5.0,
    ) -> None:
        self.database = database
        self.device = device
        self.controller = controller if controller is not None else Controller()
        self.delay = delay
        self._device_lock = threading.Lock()
        self._handlers: dict[int, Callable[[list[str]], str | None]] = {
            Command.CHECK_NAME_DRINK: self._on_check_name_drink,
            Command.CHECK_STOCK: lambda args: encode_pairs(self.check_stock()),
            Command.GET_INGREDIENTS_NAME: lambda args: encode_fields(
                self.ingredient_names()
            ),
            Command.CREATE_DRINK: self._on_create_drink,
            Command.GET_DRINKS_NAME: lambda args: encode_fields(self.drink_names()),
            Command.GET_DRINK: self._on_get_drink,
            Command.CHANGE_DRINK: self._on_change_drink,
            Command.DELETE_DRINK: lambda args: _flag(self.delete_drink(args[1])),
            Command.CHECK_NAME_INGREDIENT: lambda args: _flag(
                self.check_name_ingredient(args[1])
            ),
            Command.CHECK_CONTAINER: lambda args: _flag(
                self.check_container(_atoi(args[1]))
            ),
            Command.CREATE_INGREDIENT: self._on_create_ingredient,
            Command.GET_INGREDIENT_ADDR: lambda args: str(
                self.ingredient_address(args[1])
            ),
            Command.CHANGE_INGREDIENT_ADDR: self._on_change_ingredient_address,
            Command.DELETE_INGREDIENT: lambda args: _flag(
                self.delete_ingredient(args[1])
            ),
            Command.CLEAN: self._on_clean,
            Command.CLEAN_WATER: self._on_clean_water,
            Command.GET_TEMP: lambda args: encode_pairs(self.get_temp()),
        }

    @staticmethod
    def _report(exc: DatabaseError) -> str:
        text = f"DB ERROR: {error_text(exc.code)}"
        get_logger().log(text)
        return text

    def check_name_drink(self, name: str) -> bool:
        return self.database.check_name(Kind.DRINK, name)

    def _read_per_ingredient(self, state: str, label: str) -> dict[str, str] | None:
        try:
            names = self.database.ingredient_names()
        except DatabaseError as exc:
            self._report(exc)
            return None
        readings: dict[str, str] = {}
        with self._device_lock:
            self.device.write(state)
            time.sleep(self.delay)
            for name in names:
                raw = self.device.read()
                readings[name] = raw
                get_logger().log(f"DEBUG: Ingrediens: {name} {label}: {raw}")
        return readings

    def check_stock(self) -> dict[str, str]:
        """Ask the dispenser how much of each ingredient is left."""
        readings = self._read_per_ingredient(STOCK_STATE, "Amt")
        if readings is None:
            return {}
        return {name: str(STOCK_UNIT * _atoi(raw)) for name, raw in readings.items()}

    def get_temp(self) -> dict[str, str]:
        """Ask the dispenser for the temperature of each ingredient."""
        readings = self._read_per_ingredient(TEMP_STATE, "temp")
        return {} if readings is None else readings

    def ingredient_names(self) -> list[str]:
        """Return ingredient names; a failure is reported as a final entry."""
        try:
            return self.database.ingredient_names()
        except DatabaseError as exc:
            return [self._report(exc)]

    def create_drink(self, drink: Drink) -> bool:
        try:
            self.database.create_drink(drink)
        except DatabaseError as exc:
            self._report(exc)
            return False
        return True

    def drink_names(self) -> list[str]:
        """Return each drink's name followed by its picture path."""
        try:
            rows = self.database.drink_names()
        except DatabaseError as exc:
            self._report(exc)
            return []
        return [item for row in rows for item in row]

    def get_drink(self, name: str) -> Drink:
        """Return the drink, or an undeclared drink if it cannot be read."""
        try:
            return self.database.get_drink(name)
        except DatabaseError as exc:
            self._report(exc)
            return Drink()

    def change_drink(self, drink: Drink) -> bool:
        try:
            self.database.change_drink(drink)
        except DatabaseError as exc:
            self._report(exc)
            return False
        return True

    def delete_drink(self, name: str) -> bool:
        try:
            self.database.remove(name, Kind.DRINK)
        except DatabaseError as exc:
            self._report(exc)
            return False
        get_logger().log(f"The entry {name} has been deleted.")
        return True

    def check_name_ingredient(self, name: str) -> bool:
        return self.database.check_name(Kind.INGREDIENT, name)

    def check_container(self, addr: int) -> bool:
        """Tell whether a container address is free."""
        return not self.database.container_in_use(addr)

    def create_ingredient(self, name: str, addr: int) -> bool:
        try:
            self.database.create_ingredient(name, addr)
        except DatabaseError as exc:
            self._report(exc)
            return False
        return True

    def ingredient_address(self, name: str) -> int:
        """Return the container address of an ingredient, or -1 if unknown."""
        try:
            return self.database.ingredient_address(name)
        except DatabaseError as exc:
            self._report(exc)
            return -1

    def change_ingredient_address(self, name: str, addr: int) -> bool:
        try:
            self.database.change_ingredient_address(name, addr)
        except DatabaseError as exc:
            self._report(exc)
            return False
        return True

    def delete_ingredient(self, name: str) -> bool:
        """Delete an ingredient that no drink uses."""
        try:
            if self.database.check_for_use(name):
                get_logger().log(f"DB ERROR: ingredient {name} is in use")
                return False
            self.database.remove(name, Kind.INGREDIENT)
        except DatabaseError as exc:
            self._report(exc)
            return False
        return True

    def _run_clean(self, label: str, waiting: str) -> None:
        logger = get_logger()
        with self._device_lock:
            try:
                written = self.device.write(CLEAN_STATE)
            except OSError:
                logger.log("Write to SPIDEV error")
                return
            time.sleep(min(self.delay, 1.0))
            logger.log(f"Write to PSoC: {label} --> N = {written}")
            while True:
                try:
                    self.device.read()
                    return
                except OSError:
                    logger.log(waiting)
                    time.sleep(min(self.delay, 1.0))

    def clean(self) -> None:
        """Run the dispenser's cleaning cycle and wait for it to answer."""
        self._run_clean("Clean", "Waiting for PSoC clean")

    def clean_water(self) -> None:
        """Run the water rinse cycle and wait for it to answer."""
        self._run_clean("Clean Water", "Waiting for PSoC clean #2")

    def _on_check_name_drink(self, args: list[str]) -> str:
        get_logger().log(f"Entered the case. checking on: {args[1]}")
        return _flag(self.check_name_drink(args[1]))

    @staticmethod
    def _drink_from(args: list[str]) -> Drink:
        return Drink.from_fields(args[1 : 1 + FIELD_COUNT])

    def _on_create_drink(self, args: list[str]) -> str:
        return _flag(self.create_drink(self._drink_from(args)))

    def _on_get_drink(self, args: list[str]) -> str:
        drink = self.get_drink(args[1])
        reply = encode_fields(drink.to_fields())
        get_logger().log(f"gd sending: {reply}")
        return reply

    def _on_change_drink(self, args: list[str]) -> None:
        self.change_drink(self._drink_from(args))

    def _on_create_ingredient(self, args: list[str]) -> None:
        self.create_ingredient(args[1], _atoi(args[2]))

    def _on_change_ingredient_address(self, args: list[str]) -> str:
        get_logger().log(f"INGNAME: : {args[1]}")
        get_logger().log(f"INGADDR: : {args[2]}")
        return _flag(self.change_ingredient_address(args[1], _atoi(args[2])))

    def _on_clean(self, args: list[str]) -> str:
        self.clean()
        return "WATER"

    def _on_clean_water(self, args: list[str]) -> str:
        self.clean_water()
        return "ADD_NORMAL"

    def handle(self, message: str) -> str | None:
        """Carry out one request and return the reply text, if it has one."""
        logger = get_logger()
        logger.log(f"Parser recieved: {message}")
        command = parse_command(message)
        logger.log(f"Command found: {command}")
        fields = decode_fields(message)
        width = 1 + FIELD_COUNT
        args = fields + [MISSING_FIELD] * max(0, width - len(fields))
        handler = self._handlers.get(command)
        if handler is None:
            return UNKNOWN_REPLY
        return handler(args)
"""Queue of drink orders that a background worker pours on the dispenser."""

from __future__ import annotations

import queue
import threading
import time
from typing import Iterable

from drinkctl.controller import Controller
from drinkctl.database import Database, DatabaseError, error_text
from drinkctl.device import ORDER_STATE, STOCK_STATE
from drinkctl.drink import Drink
from drinkctl.log import get_logger

_STOP = object()


class OrderAdmin:
    """Takes confirmed orders and sends their recipes to the dispenser in turn."""

    def __init__(
        self,
        controller: Controller,
        database: Database,
        device,
        delay: float = 3.0,
    ) -> None:
        self.controller = controller
        self.database = database
        self.device = device
        self.delay = delay
        self._orders: queue.Queue = queue.Queue()
        self._device_lock = threading.Lock()
        self._worker: threading.Thread | None = None

    def start(self) -> None:
        """Start the worker that pours queued orders."""
        if self._worker is not None and self._worker.is_alive():
            raise RuntimeError("the order worker is already running")
        self._worker = threading.Thread(
            target=self._run, name="order-worker", daemon=True
        )
        self._worker.start()

    def stop(self) -> None:
        """Let the worker finish the orders queued so far, then end."""
        self._orders.put(_STOP)

    def join(self, timeout: float | None = None) -> bool:
        """Wait for the worker to end; return whether it has ended."""
        if self._worker is None:
            return True
        self._worker.join(timeout)
        return not self._worker.is_alive()

    def order_drinks(self, drinks: Iterable[str]) -> bool:
        """Queue an order if the user confirms it; return whether it was queued."""
        if not self.controller.confirm_order():
            self.controller.print("Order cancelled")
            return False
        self._orders.put(list(drinks))
        return True

    def _run(self) -> None:
        while True:
            batch = self._orders.get()
            if batch is _STOP:
                return
            try:
                self.process(batch)
            except Exception as exc:  # the worker must outlive a failed batch
                get_logger().log(f"Order failed: {exc!r}")

    def process(self, drinks: Iterable[str]) -> None:
        """Send each drink's container addresses and amounts to the dispenser."""
        logger = get_logger()
        for name in drinks:
            with self._device_lock:
                self.device.write(ORDER_STATE)
                try:
                    drink = self.database.get_drink(name)
                except DatabaseError as exc:
                    self.controller.print(f"DB ERROR: {error_text(exc.code)}")
                    continue
                addresses = self.database.get_addresses(drink.name)
                for addr, content in zip(addresses, drink.content):
                    self.device.write(str(addr))
                    self.device.write(str(content.amount))
            logger.log(f"Ingredient: {drink.name} has been written to PSoC")
            self.controller.print(f"Drink {drink.name} Has been ordered")
            try:
                self.database.save_order(drink.name)
            except DatabaseError as exc:
                logger.log(f"DB ERROR: {error_text(exc.code)}")

    def drink_names(self) -> list[str]:
        """Return each drink's name followed by its picture path."""
        try:
            rows = self.database.drink_names()
        except DatabaseError as exc:
            self.controller.print(f"DB ERROR: {error_text(exc.code)}")
            return []
        return [item for row in rows for item in row]

    def get_drink(self, name: str) -> Drink:
        """Return the drink, or an undeclared drink if it cannot be read."""
        try:
            return self.database.get_drink(name)
        except DatabaseError as exc:
            get_logger().log(f"DB ERROR: {error_text(exc.code)}")
            return Drink()

    def check_stock(self) -> dict[str, str]:
        """Return the dispenser's raw stock reading for each ingredient."""
        logger = get_logger()
        try:
            names = self.database.ingredient_names()
        except DatabaseError as exc:
            logger.log(f"DB ERROR: {error_text(exc.code)}")
            return {}
        stock: dict[str, str] = {}
        with self._device_lock:
            self.device.write(STOCK_STATE)
            time.sleep(self.delay)
            for name in names:
                raw = self.device.read()
                stock[name] = raw
                logger.log(f"DEBUG: Ingrediens: {name} Amt: {raw}")
        return stock
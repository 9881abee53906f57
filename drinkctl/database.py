"""SQLite store of drinks, ingredients and placed orders."""

from __future__ import annotations

import re
import sqlite3
import threading
from enum import IntEnum
from itertools import chain
from typing import Iterable

from drinkctl.drink import SLOTS, Drink
from drinkctl.log import get_logger, get_time

DEFAULT_DATABASE_PATH = "/home/root/drinksdatabase.db"

_LEADING_INT = re.compile(r"\s*([+-]?\d+)")


def _to_int(text: str) -> int:
    match = _LEADING_INT.match(text)
    return int(match.group(1)) if match else 0


class ErrorCode(IntEnum):
    """Reasons a database operation fails."""

    NO_ERRORS = 0
    DB_FAILED_TO_OPEN = 1
    DB_QUERY_FAIL = 2
    DB_INGREDIENS_NOT_FOUND = 3
    UNDEFINED_PARAMETER = 4
    DB_ENTRY_ALREADY_EXIST = 5
    DB_DRINK_NOT_FOUND = 6
    DB_INGREDIENS_IN_USE = 7


class Kind(IntEnum):
    """Which table a name belongs to."""

    DRINK = 98
    INGREDIENT = 99


_TABLES = {Kind.DRINK: "Drinks", Kind.INGREDIENT: "Ingredienser"}

_ERROR_TEXTS = {
    ErrorCode.NO_ERRORS: "NO_ERRORS",
    ErrorCode.DB_FAILED_TO_OPEN: "DB_FAILED_TO_OPEN",
    ErrorCode.DB_QUERY_FAIL: "DB_QUERY_FAIL",
    ErrorCode.DB_INGREDIENS_NOT_FOUND: "DB_INGREDIENS_NOT_FOUND",
    ErrorCode.UNDEFINED_PARAMETER: "UNDEFINED_PARAMETER",
    ErrorCode.DB_ENTRY_ALREADY_EXIST: "DB_ENTRY_ALREADY_EXIST",
    ErrorCode.DB_DRINK_NOT_FOUND: "DB_DRINK_NOT_FOUND",
}


def error_text(code: int) -> str:
    """Return the printable name of an error code as reported to clients."""
    return _ERROR_TEXTS.get(code, "UNKNOWN ERROR")


class DatabaseError(Exception):
    """A database operation failed; ``code`` tells why."""

    def __init__(self, code: int, message: str | None = None) -> None:
        self.code = ErrorCode(code)
        super().__init__(message or self.code.name)


_DRINK_COLUMNS = ", ".join(
    chain(
        ["Navn TEXT"],
        chain.from_iterable(
            (f"cont_{slot}_name TEXT", f"cont_{slot}_amt INTEGER")
            for slot in range(1, SLOTS + 1)
        ),
        ["path TEXT"],
    )
)

_SCHEMA = (
    f"CREATE TABLE IF NOT EXISTS Drinks ({_DRINK_COLUMNS})",
    "CREATE TABLE IF NOT EXISTS Ingredienser (Navn TEXT, Addr INTEGER)",
    'CREATE TABLE IF NOT EXISTS Bestillinger '
    '(Dag INTEGER, "Måned" INTEGER, "År" INTEGER, Navn TEXT)',
)


def _table(kind: int) -> str:
    try:
        return _TABLES[Kind(kind)]
    except ValueError:
        raise DatabaseError(ErrorCode.UNDEFINED_PARAMETER) from None


class Database:
    """Thread-safe access to the drinks database."""

    def __init__(self, path: str = DEFAULT_DATABASE_PATH) -> None:
        self._lock = threading.RLock()
        try:
            self._conn = sqlite3.connect(path, check_same_thread=False)
        except sqlite3.Error as exc:
            get_logger().log("Database failed to open")
            raise DatabaseError(ErrorCode.DB_FAILED_TO_OPEN, str(exc)) from exc
        get_logger().log("Database loaded.")

    def create_schema(self) -> None:
        """Create the tables if they are missing."""
        for statement in _SCHEMA:
            self.query(statement)

    def close(self) -> None:
        with self._lock:
            self._conn.close()
        get_logger().log("Database closed.")

    def __enter__(self) -> "Database":
        return self

    def __exit__(self, *args: object) -> None:
        self.close()

    def query(self, sql: str, params: Iterable[object] = ()) -> list[tuple[str, ...]]:
        """Run one statement and return its rows with every cell as text."""
        with self._lock:
            try:
                with self._conn:
                    rows = self._conn.execute(sql, tuple(params)).fetchall()
            except sqlite3.Error as exc:
                get_logger().log("Query failed.")
                raise DatabaseError(ErrorCode.DB_QUERY_FAIL, str(exc)) from exc
        get_logger().log(f"Query to DB: {sql} executed.")
        return [tuple("" if cell is None else str(cell) for cell in row) for row in rows]

    def drink_names(self) -> list[tuple[str, str]]:
        """Return (name, picture path) for every drink in table order."""
        return [(row[0], row[1]) for row in self.query("SELECT Navn, path FROM Drinks")]

    def get_addresses(self, name: str) -> list[int]:
        """Return container addresses of a drink's ingredients in slot order."""
        try:
            drink = self.get_drink(name)
        except DatabaseError:
            return []
        ingredients = self.query("SELECT Navn, Addr FROM Ingredienser")
        return [
            _to_int(addr)
            for content in drink.content
            for ingredient, addr in ingredients
            if ingredient == content.name
        ]

    def check_name(self, kind: int, name: str) -> bool:
        """Tell whether a drink or ingredient of that name exists."""
        table = _table(kind)
        rows = self.query(f"SELECT Navn FROM {table}")
        return any(row[0] == name for row in rows)

    def ingredient_names(self) -> list[str]:
        return [row[0] for row in self.query("SELECT Navn FROM Ingredienser")]

    def create_drink(self, drink: Drink) -> None:
        """Store a new drink; its name must be free."""
        with self._lock:
            if self.check_name(Kind.DRINK, drink.name):
                raise DatabaseError(ErrorCode.DB_ENTRY_ALREADY_EXIST)
            values = [
                drink.name,
                *chain.from_iterable((c.name, c.amount) for c in drink.content),
                drink.path,
            ]
            marks = ", ".join("?" for _ in values)
            self.query(f"INSERT INTO Drinks VALUES({marks})", values)
        get_logger().log(f"Drink: {drink.name} Has been added to the DB")

    def get_drink(self, name: str) -> Drink:
        rows = self.query("SELECT * FROM Drinks WHERE Navn = ?", (name,))
        if not rows:
            raise DatabaseError(ErrorCode.DB_DRINK_NOT_FOUND)
        return Drink.from_fields(rows[0])

    def check_for_use(self, name: str) -> bool:
        """Tell whether any drink row mentions the name in any column."""
        return any(name in row for row in self.query("SELECT * FROM Drinks"))

    def container_in_use(self, addr: int) -> bool:
        rows = self.query("SELECT Addr FROM Ingredienser")
        return any(_to_int(row[0]) == addr for row in rows)

    def change_drink(self, drink: Drink) -> None:
        """Replace the drink of that name, or add it if it is new."""
        with self._lock:
            try:
                self.remove(drink.name, Kind.DRINK)
            except DatabaseError as exc:
                if exc.code != ErrorCode.DB_DRINK_NOT_FOUND:
                    raise
            self.create_drink(drink)

    def remove(self, name: str, kind: int) -> None:
        """Delete a drink, or an ingredient that no drink uses."""
        table = _table(kind)
        with self._lock:
            if Kind(kind) is Kind.DRINK:
                if not self.check_name(Kind.DRINK, name):
                    raise DatabaseError(ErrorCode.DB_DRINK_NOT_FOUND)
            else:
                if not self.check_name(Kind.INGREDIENT, name):
                    raise DatabaseError(ErrorCode.DB_INGREDIENS_NOT_FOUND)
                if self.check_for_use(name):
                    raise DatabaseError(ErrorCode.DB_INGREDIENS_IN_USE)
            self.query(f"DELETE FROM {table} WHERE Navn = ?", (name,))
        label = "Drink" if Kind(kind) is Kind.DRINK else "Ingredient"
        get_logger().log(f"{label}: {name} has been removed from the DB")

    def create_ingredient(self, name: str, addr: int) -> None:
        """Store a new ingredient at a container address; its name must be free."""
        with self._lock:
            if self.check_name(Kind.INGREDIENT, name):
                raise DatabaseError(ErrorCode.DB_ENTRY_ALREADY_EXIST)
            self.query("INSERT INTO Ingredienser VALUES(?, ?)", (name, int(addr)))
        get_logger().log(f"Ingredient {name} has been added to the DB")

    def ingredient_address(self, name: str) -> int:
        rows = self.query("SELECT Addr FROM Ingredienser WHERE Navn = ?", (name,))
        if not rows:
            raise DatabaseError(ErrorCode.DB_INGREDIENS_NOT_FOUND)
        return _to_int(rows[-1][0])

    def change_ingredient_address(self, name: str, addr: int) -> None:
        self.query(
            "UPDATE Ingredienser SET Addr = ? WHERE Navn = ?", (int(addr), name)
        )

    def save_order(self, name: str) -> None:
        """Record that a drink was ordered today."""
        stamp = get_time(False)
        day, month, year = int(stamp[:2]), int(stamp[2:4]), int(stamp[4:8])
        self.query(
            "INSERT INTO Bestillinger VALUES(?, ?, ?, ?)", (day, month, year, name)
        )
        get_logger().log(f"Order: {name} has been saved to the DB")
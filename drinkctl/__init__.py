"""Drink machine controller: recipe database, order worker, admin server and client."""

__version__ = "0.1.0"
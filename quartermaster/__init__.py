"""Inventory allocation and receipt composition."""

__version__ = "0.1.0"

"""Caelum - current and forecast weather for where you are."""

__version__ = "0.1.0"

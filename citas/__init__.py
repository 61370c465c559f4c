"""Citas Bot - WhatsApp appointment booking with race-safe slot reservations."""

__version__ = "1.0.0"

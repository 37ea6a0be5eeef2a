"""Redgear A-15 gaming mouse configuration over HID feature reports."""

__version__ = "0.1.0"

"""Hexfall: falling-tile hex island builder core."""

__version__ = "0.1.0"

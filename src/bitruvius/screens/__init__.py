"""Bitruvius TUI screens."""

from bitruvius.screens.posing import PosingScreen

__all__ = ["PosingScreen"]

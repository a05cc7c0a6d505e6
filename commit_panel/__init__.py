"""Commit review panel: select changes, write a message, commit."""

__VERSION__ = "0.1.0"

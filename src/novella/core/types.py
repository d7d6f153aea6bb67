"""Shared type aliases for the core, domain and service layers."""
from typing import Literal

InterpreterStatus = Literal[
    "idle",
    "running",
    "awaiting_advance",
    "awaiting_choice",
    "ended",
    "halted",
]

Severity = Literal["error", "warning"]

__all__ = ["InterpreterStatus", "Severity"]

"""Service-layer exceptions."""
from __future__ import annotations

from typing import Sequence


class NodeResolutionError(Exception):
    """Raised when a dotted node path does not name an executable node."""

    def __init__(self, path: str, message: str, available: Sequence[str] = ()) -> None:
        super().__init__(message)
        self.path = path
        self.available = list(available)


class NodeNotFoundError(NodeResolutionError):
    """Raised when a path segment is absent; ``prefix`` is the deepest valid part."""

    def __init__(self, path: str, prefix: str, failed_at: str, available: Sequence[str] = ()) -> None:
        super().__init__(
            path,
            f"Node not found: '{path}' (failed at '{failed_at}')",
            available,
        )
        self.prefix = prefix
        self.failed_at = failed_at


class NodePathIsGroupError(NodeResolutionError):
    """Raised when a path names a node group rather than a list of steps."""

    def __init__(self, path: str, available: Sequence[str] = ()) -> None:
        super().__init__(
            path,
            f"Node '{path}' exists but is a nested group, not a step list",
            available,
        )


class InterpreterStateError(Exception):
    """Raised when a signal arrives in a state that cannot accept it."""


class InvalidChoiceError(IndexError):
    """Raised when a choice index does not match an offered option."""

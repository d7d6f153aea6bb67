"""Dotted-path lookup into a nested story node tree."""
from __future__ import annotations

from typing import Iterator, Mapping, Sequence

from novella.domain.defs import NodeTree, StepDef

from .errors import NodeNotFoundError, NodePathIsGroupError

PATH_SEPARATOR = "."


def is_step_list(value: object) -> bool:
    """Leaves are ordered step sequences; strings and mappings never are."""
    return isinstance(value, (list, tuple))


def resolve_node(nodes: NodeTree, path: str) -> Sequence[StepDef]:
    """Return the steps stored at ``path`` such as ``"Park.WithBob"``.

    Raises NodeNotFoundError when a segment is missing and NodePathIsGroupError
    when the path ends on a group.
    """
    if not isinstance(path, str):
        raise NodeNotFoundError(
            path, prefix="", failed_at=repr(path), available=sorted(nodes.keys())
        )
    parts = path.split(PATH_SEPARATOR)
    current: object = nodes
    for index, part in enumerate(parts):
        if not isinstance(current, Mapping) or part not in current:
            available = sorted(current.keys()) if isinstance(current, Mapping) else []
            raise NodeNotFoundError(
                path,
                prefix=PATH_SEPARATOR.join(parts[:index]),
                failed_at=PATH_SEPARATOR.join(parts[: index + 1]),
                available=available,
            )
        current = current[part]
    if is_step_list(current):
        return current  # type: ignore[return-value]
    available = sorted(current.keys()) if isinstance(current, Mapping) else []
    raise NodePathIsGroupError(path, available)


def iter_node_entries(nodes: NodeTree, prefix: str = "") -> Iterator[tuple[str, object]]:
    """Yield ``(path, value)`` for every non-group entry, depth first.

    Values are step lists for well-formed leaves; anything else that is not a
    mapping is yielded as-is so callers can report it.
    """
    for key, value in nodes.items():
        full_path = f"{prefix}{PATH_SEPARATOR}{key}" if prefix else str(key)
        if isinstance(value, Mapping):
            yield from iter_node_entries(value, full_path)
        else:
            yield full_path, value


def iter_leaf_paths(nodes: NodeTree) -> Iterator[tuple[str, Sequence[StepDef]]]:
    """Yield ``(path, steps)`` for every executable leaf node."""
    for path, value in iter_node_entries(nodes):
        if is_step_list(value):
            yield path, value  # type: ignore[misc]

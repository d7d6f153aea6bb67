"""Domain-level state tracking."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict


@dataclass
class StoryState:
    """Mutable variable storage for a single playthrough.

    Compute, test and effect functions receive this object, so story code reads
    values as ``state.variables["score"]``.
    """

    variables: Dict[str, object] = field(default_factory=dict)

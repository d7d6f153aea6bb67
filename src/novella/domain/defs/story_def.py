"""Story document structures consumed by the validator and interpreter."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Mapping, Sequence, Union

from .step_def import StepDef

NodeSteps = Sequence[StepDef]
NodeTree = Mapping[str, Union[NodeSteps, "NodeTree"]]


@dataclass(slots=True)
class CharacterDef:
    """Display name plus a pose-name to image reference mapping."""

    display_name: str
    poses: Dict[str, str] = field(default_factory=dict)


@dataclass(slots=True)
class StoryDef:
    """Authored story: nodes, characters, places, initial variables and start node.

    Fields are optional so that incomplete documents can still be handed to the
    validator and reported on.
    """

    start: str | None = None
    nodes: NodeTree | None = None
    variables: Dict[str, object] | None = None
    characters: Dict[str, CharacterDef] = field(default_factory=dict)
    places: Dict[str, str] = field(default_factory=dict)

    def character_ids(self) -> List[str]:
        return sorted(self.characters.keys())

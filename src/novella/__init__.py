"""Branching visual-novel story interpreter with static validation."""
from __future__ import annotations

from novella.domain.defs import (
    CharacterDef,
    CharacterPose,
    CharacterPosition,
    StepKind,
    StoryDef,
)
from novella.domain.state import StoryState
from novella.services import (
    CommandLog,
    Diagnostic,
    StoryInterpreter,
    resolve_node,
    validate_story,
)
from novella.services.factories import (
    background,
    choice,
    conditional_jump,
    dialogue,
    end_story,
    hide_character,
    jump_to,
    narration,
    set_variable,
    show_character,
)

__version__ = "0.1.0"

__all__ = [
    "CharacterDef",
    "CharacterPose",
    "CharacterPosition",
    "CommandLog",
    "Diagnostic",
    "StepKind",
    "StoryDef",
    "StoryInterpreter",
    "StoryState",
    "background",
    "choice",
    "conditional_jump",
    "dialogue",
    "end_story",
    "hide_character",
    "jump_to",
    "narration",
    "resolve_node",
    "set_variable",
    "show_character",
    "validate_story",
]

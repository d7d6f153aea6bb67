"""Factory helpers for authoring story steps."""

from .step_factory import (
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

__all__ = [
    "background",
    "choice",
    "conditional_jump",
    "dialogue",
    "end_story",
    "hide_character",
    "jump_to",
    "narration",
    "set_variable",
    "show_character",
]

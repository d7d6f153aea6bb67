"""Service layer exports."""

from .display import (
    ClearCharacterSprite,
    CommandLog,
    DisplayCommand,
    RenderSink,
    SetBackground,
    SetCharacterSprite,
    SetDialogue,
    ShowChoices,
    ShowEnded,
)
from .errors import (
    InterpreterStateError,
    InvalidChoiceError,
    NodeNotFoundError,
    NodePathIsGroupError,
    NodeResolutionError,
)
from .node_resolver import iter_leaf_paths, resolve_node
from .story_interpreter import InterpreterView, StoryInterpreter
from .story_validator import Diagnostic, format_diagnostic, log_diagnostics, validate_story

__all__ = [
    "ClearCharacterSprite",
    "CommandLog",
    "Diagnostic",
    "DisplayCommand",
    "InterpreterStateError",
    "InterpreterView",
    "InvalidChoiceError",
    "NodeNotFoundError",
    "NodePathIsGroupError",
    "NodeResolutionError",
    "RenderSink",
    "SetBackground",
    "SetCharacterSprite",
    "SetDialogue",
    "ShowChoices",
    "ShowEnded",
    "StoryInterpreter",
    "format_diagnostic",
    "iter_leaf_paths",
    "log_diagnostics",
    "resolve_node",
    "validate_story",
]

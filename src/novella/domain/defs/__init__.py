"""Domain definition exports."""

from .step_def import (
    MISSING,
    BackgroundStep,
    CharacterPose,
    CharacterPosition,
    ChoiceOption,
    ChoiceStep,
    ConditionalJumpStep,
    DialogueStep,
    EndStoryStep,
    HideCharacterStep,
    JumpToStep,
    NarrationStep,
    SetVariableStep,
    ShowCharacterStep,
    StepDef,
    StepKind,
)
from .story_def import CharacterDef, NodeTree, StoryDef

__all__ = [
    "MISSING",
    "BackgroundStep",
    "CharacterDef",
    "CharacterPose",
    "CharacterPosition",
    "ChoiceOption",
    "ChoiceStep",
    "ConditionalJumpStep",
    "DialogueStep",
    "EndStoryStep",
    "HideCharacterStep",
    "JumpToStep",
    "NarrationStep",
    "NodeTree",
    "SetVariableStep",
    "ShowCharacterStep",
    "StepDef",
    "StepKind",
    "StoryDef",
]

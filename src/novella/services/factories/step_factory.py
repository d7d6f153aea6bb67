"""Factory helpers story modules use to author steps as plain Python."""
from __future__ import annotations

from novella.domain.defs import (
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
)
from novella.domain.defs.step_def import ComputeValue, TestFn


def background(place_id: str) -> BackgroundStep:
    """Change the backdrop to the image registered under ``place_id``."""
    return BackgroundStep(id=place_id)


def show_character(
    character_id: str,
    pose: CharacterPose = CharacterPose.neutral,
    position: CharacterPosition = CharacterPosition.center,
) -> ShowCharacterStep:
    """Place a character sprite, or update its pose if already shown there."""
    return ShowCharacterStep(id=character_id, pose=pose, position=position)


def hide_character(character_id: str) -> HideCharacterStep:
    return HideCharacterStep(id=character_id)


def dialogue(who: str, text: str) -> DialogueStep:
    return DialogueStep(who=who, text=text)


def narration(text: str) -> NarrationStep:
    return NarrationStep(text=text)


def set_variable(key: str, value: ComputeValue | object) -> SetVariableStep:
    """Set ``key`` to a constant, or to ``value(state)`` when value is callable."""
    return SetVariableStep(key=key, value=value)


def jump_to(node_id: str) -> JumpToStep:
    return JumpToStep(node_id=node_id)


def conditional_jump(
    test: TestFn, then_node_id: str, else_node_id: str | None = None
) -> ConditionalJumpStep:
    """Branch on ``test(state)``; without an else-path a failing test continues."""
    return ConditionalJumpStep(test=test, then_node_id=then_node_id, else_node_id=else_node_id)


def choice(prompt: str, *options: ChoiceOption) -> ChoiceStep:
    """Present options shaped ``(label, node_id)`` or ``(label, node_id, effect)``."""
    return ChoiceStep(prompt=prompt, options=tuple(options))


def end_story() -> EndStoryStep:
    return EndStoryStep()

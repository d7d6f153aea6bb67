"""Step definitions: the typed instructions that make up a story node."""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum
from typing import Callable, ClassVar, Tuple, Union

from novella.domain.state import StoryState


class StepKind(str, Enum):
    """Closed set of step kinds understood by the validator and interpreter."""

    BACKGROUND = "background"
    SHOW_CHARACTER = "show_character"
    HIDE_CHARACTER = "hide_character"
    DIALOGUE = "dialogue"
    NARRATION = "narration"
    SET_VARIABLE = "set_variable"
    JUMP_TO = "jump_to"
    CONDITIONAL_JUMP = "conditional_jump"
    CHOICE = "choice"
    END_STORY = "end_story"


class CharacterPose(str, Enum):
    """Common character poses; values double as keys into ``CharacterDef.poses``."""

    neutral = "neutral"
    happy = "happy"
    sad = "sad"


class CharacterPosition(str, Enum):
    """Stage slots a character sprite can occupy."""

    left = "left"
    center = "center"
    right = "right"


class _Missing:
    """Marker for a set_variable step authored without a value."""

    _instance: "_Missing | None" = None

    def __new__(cls) -> "_Missing":
        if cls._instance is None:
            cls._instance = super().__new__(cls)
        return cls._instance

    def __repr__(self) -> str:
        return "MISSING"

    def __bool__(self) -> bool:
        return False


MISSING = _Missing()

ComputeValue = Callable[[StoryState], object]
TestFn = Callable[[StoryState], bool]
EffectFn = Callable[[StoryState], object]
ChoiceOption = Union[Tuple[str, Union[str, None]], Tuple[str, Union[str, None], EffectFn]]


@dataclass(frozen=True, slots=True)
class BackgroundStep:
    kind: ClassVar[StepKind] = StepKind.BACKGROUND

    id: str | None


@dataclass(frozen=True, slots=True)
class ShowCharacterStep:
    kind: ClassVar[StepKind] = StepKind.SHOW_CHARACTER

    id: str | None
    pose: CharacterPose | str | None = CharacterPose.neutral
    position: CharacterPosition | str | None = CharacterPosition.center


@dataclass(frozen=True, slots=True)
class HideCharacterStep:
    kind: ClassVar[StepKind] = StepKind.HIDE_CHARACTER

    id: str | None


@dataclass(frozen=True, slots=True)
class DialogueStep:
    kind: ClassVar[StepKind] = StepKind.DIALOGUE

    who: str | None
    text: str | None


@dataclass(frozen=True, slots=True)
class NarrationStep:
    kind: ClassVar[StepKind] = StepKind.NARRATION

    text: str | None


@dataclass(frozen=True, slots=True)
class SetVariableStep:
    """Stores a literal, or the result of ``value(state)`` when value is callable."""

    kind: ClassVar[StepKind] = StepKind.SET_VARIABLE

    key: str | None
    value: object = MISSING


@dataclass(frozen=True, slots=True)
class JumpToStep:
    kind: ClassVar[StepKind] = StepKind.JUMP_TO

    node_id: str | None


@dataclass(frozen=True, slots=True)
class ConditionalJumpStep:
    """Jump to ``then_node_id`` when ``test`` passes.

    A failing test jumps to ``else_node_id``, or falls through to the next step
    when no else-path is set.
    """

    kind: ClassVar[StepKind] = StepKind.CONDITIONAL_JUMP

    test: TestFn | None
    then_node_id: str | None
    else_node_id: str | None = None


@dataclass(frozen=True, slots=True)
class ChoiceStep:
    """Offers ordered ``(label, target, effect?)`` options.

    A ``None`` target continues in the current node after the effect runs.
    """

    kind: ClassVar[StepKind] = StepKind.CHOICE

    prompt: str | None
    options: Tuple[ChoiceOption, ...] = ()


@dataclass(frozen=True, slots=True)
class EndStoryStep:
    kind: ClassVar[StepKind] = StepKind.END_STORY


StepDef = Union[
    BackgroundStep,
    ShowCharacterStep,
    HideCharacterStep,
    DialogueStep,
    NarrationStep,
    SetVariableStep,
    JumpToStep,
    ConditionalJumpStep,
    ChoiceStep,
    EndStoryStep,
]

STEP_CLASSES: dict[StepKind, type] = {
    StepKind.BACKGROUND: BackgroundStep,
    StepKind.SHOW_CHARACTER: ShowCharacterStep,
    StepKind.HIDE_CHARACTER: HideCharacterStep,
    StepKind.DIALOGUE: DialogueStep,
    StepKind.NARRATION: NarrationStep,
    StepKind.SET_VARIABLE: SetVariableStep,
    StepKind.JUMP_TO: JumpToStep,
    StepKind.CONDITIONAL_JUMP: ConditionalJumpStep,
    StepKind.CHOICE: ChoiceStep,
    StepKind.END_STORY: EndStoryStep,
}


def step_kind_of(step: object) -> StepKind | None:
    """Return the kind of a known step instance, or None for anything else."""
    kind = getattr(type(step), "kind", None)
    if isinstance(kind, StepKind) and isinstance(step, STEP_CLASSES[kind]):
        return kind
    return None


def pose_name(pose: object) -> str | None:
    if isinstance(pose, CharacterPose):
        return pose.value
    if isinstance(pose, str) and pose:
        return pose
    return None


def position_of(position: object) -> CharacterPosition | None:
    if isinstance(position, CharacterPosition):
        return position
    try:
        return CharacterPosition(position)
    except (ValueError, TypeError):
        return None

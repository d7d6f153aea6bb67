"""Story interpreter: walks node steps and suspends for player input."""
from __future__ import annotations

import copy
import logging
import threading
from contextlib import contextmanager
from dataclasses import dataclass, field
from typing import Dict, Iterator, List, Literal, Sequence, Tuple

from novella.core.types import InterpreterStatus
from novella.domain.defs import (
    MISSING,
    BackgroundStep,
    CharacterPosition,
    ChoiceStep,
    ConditionalJumpStep,
    DialogueStep,
    HideCharacterStep,
    JumpToStep,
    NarrationStep,
    SetVariableStep,
    ShowCharacterStep,
    StepDef,
    StepKind,
    StoryDef,
)
from novella.domain.defs.step_def import EffectFn, pose_name, position_of, step_kind_of
from novella.domain.state import StoryState

from .display import (
    ClearCharacterSprite,
    CommandLog,
    RenderSink,
    SetBackground,
    SetCharacterSprite,
    SetDialogue,
    ShowChoices,
    ShowEnded,
)
from .errors import InterpreterStateError, InvalidChoiceError, NodeResolutionError
from .node_resolver import resolve_node

logger = logging.getLogger("novella.interpreter")

DEFAULT_CHOICE_PROMPT = "Choose:"
DEFAULT_MAX_TRANSFERS = 10_000

_Flow = Literal["continue", "suspend", "jump", "halt"]


@dataclass(frozen=True, slots=True)
class OfferedChoice:
    """A choice option that passed shape checks and is shown to the player."""

    label: str
    target: str | None
    effect: EffectFn | None = None


@dataclass(slots=True)
class InterpreterView:
    """Read-only snapshot for debug panels and tests."""

    status: InterpreterStatus
    node_id: str | None
    cursor: int
    variables: Dict[str, object]
    visible_characters: Dict[CharacterPosition, str | None]
    choices: List[str] = field(default_factory=list)


class StoryInterpreter:
    """Executes a story one step at a time against a private variable state.

    The walk stops on dialogue, narration and choices until ``advance()`` or
    ``choose()`` is called, and for good once ``end_story`` runs. Lookup failures
    are logged and skipped; exceptions raised by author-supplied compute, test or
    effect functions propagate to the caller.
    """

    def __init__(
        self,
        story: StoryDef,
        sink: RenderSink | None = None,
        *,
        max_transfers: int = DEFAULT_MAX_TRANSFERS,
    ) -> None:
        self._story = story
        self._sink: RenderSink = sink if sink is not None else CommandLog()
        self._state = StoryState(variables=copy.deepcopy(dict(story.variables or {})))
        self._status: InterpreterStatus = "idle"
        self._node_id: str | None = None
        self._steps: Sequence[StepDef] = ()
        self._cursor = 0
        self._visible: Dict[CharacterPosition, str | None] = {
            position: None for position in CharacterPosition
        }
        self._pending_choices: List[OfferedChoice] = []
        self._max_transfers = max_transfers
        self._lock = threading.Lock()

    @property
    def story(self) -> StoryDef:
        return self._story

    @property
    def sink(self) -> RenderSink:
        return self._sink

    @property
    def state(self) -> StoryState:
        return self._state

    @property
    def status(self) -> InterpreterStatus:
        return self._status

    @property
    def current_node_id(self) -> str | None:
        return self._node_id

    @property
    def cursor(self) -> int:
        return self._cursor

    @property
    def current_step(self) -> StepDef | None:
        if self._cursor < len(self._steps):
            return self._steps[self._cursor]
        return None

    @property
    def visible_characters(self) -> Dict[CharacterPosition, str | None]:
        return dict(self._visible)

    @property
    def pending_choices(self) -> Tuple[str, ...]:
        return tuple(option.label for option in self._pending_choices)

    def snapshot(self) -> InterpreterView:
        return InterpreterView(
            status=self._status,
            node_id=self._node_id,
            cursor=self._cursor,
            variables=copy.deepcopy(self._state.variables),
            visible_characters=dict(self._visible),
            choices=list(self.pending_choices),
        )

    def start(self) -> None:
        """Enter the story's start node and run until the first suspension."""
        with self._exclusive("start"):
            if self._status != "idle":
                raise InterpreterStateError(f"start() called while {self._status}.")
            self._status = "running"
            start = self._story.start
            if not start or self._story.nodes is None:
                logger.error("Story has no start node or no nodes; nothing to run")
                self._status = "halted"
                return
            if self._jump(start):
                self._walk()
            else:
                self._status = "halted"

    def advance(self) -> bool:
        """Continue past the current dialogue or narration line.

        Returns False without changing anything unless the interpreter is
        awaiting an advance signal.
        """
        with self._exclusive("advance"):
            if self._status != "awaiting_advance":
                logger.debug("Ignoring advance() while %s", self._status)
                return False
            self._cursor += 1
            self._walk()
            return True

    def choose(self, option_index: int) -> bool:
        """Apply the selected option: run its effect, then jump or continue in place."""
        with self._exclusive("choose"):
            if self._status == "ended":
                logger.debug("Ignoring choose(%s) after the story ended", option_index)
                return False
            if self._status != "awaiting_choice":
                raise InterpreterStateError(f"choose() called while {self._status}.")
            if not 0 <= option_index < len(self._pending_choices):
                raise InvalidChoiceError(
                    f"Choice index {option_index} is invalid for node '{self._node_id}'."
                )
            option = self._pending_choices[option_index]
            if option.effect is not None:
                try:
                    option.effect(self._state)
                except Exception:
                    logger.exception(
                        "Error executing choice %r in node %r", option.label, self._node_id
                    )
                    raise
            self._pending_choices = []
            if option.target:
                self._status = "running"
                if not self._jump(option.target):
                    self._cursor = len(self._steps)
                    self._status = "halted"
                    return True
            else:
                self._cursor += 1
            self._walk()
            return True

    @contextmanager
    def _exclusive(self, operation: str) -> Iterator[None]:
        if not self._lock.acquire(blocking=False):
            raise InterpreterStateError(
                f"{operation}() called while another interpreter call is in progress."
            )
        try:
            yield
        finally:
            self._lock.release()

    def _jump(self, node_id: str) -> bool:
        assert self._story.nodes is not None
        try:
            steps = resolve_node(self._story.nodes, node_id)
        except NodeResolutionError as exc:
            logger.error("Cannot jump to node %r: %s", node_id, exc)
            if exc.available:
                logger.error("Available at this level: %s", ", ".join(exc.available))
            return False
        self._node_id = node_id
        self._steps = steps
        self._cursor = 0
        self._pending_choices = []
        return True

    def _walk(self) -> None:
        self._status = "running"
        transfers = 0
        while self._cursor < len(self._steps):
            step = self._steps[self._cursor]
            try:
                flow = self._execute_step(step)
            except Exception:
                logger.exception(
                    "Error executing step %d in node %r", self._cursor, self._node_id
                )
                self._status = "halted"
                raise
            if flow == "continue":
                self._cursor += 1
            elif flow == "jump":
                transfers += 1
                if transfers > self._max_transfers:
                    logger.error(
                        "Halting after %d jumps without player input (last node %r)",
                        self._max_transfers,
                        self._node_id,
                    )
                    self._cursor = len(self._steps)
                    break
            elif flow == "halt":
                self._cursor = len(self._steps)
                break
            else:
                return
        self._status = "halted"
        logger.info("Node complete: %s", self._node_id)

    def _execute_step(self, step: StepDef) -> _Flow:
        kind = step_kind_of(step)
        if kind is StepKind.BACKGROUND:
            return self._set_background(step)  # type: ignore[arg-type]
        if kind is StepKind.SHOW_CHARACTER:
            return self._show_character(step)  # type: ignore[arg-type]
        if kind is StepKind.HIDE_CHARACTER:
            return self._hide_character(step)  # type: ignore[arg-type]
        if kind is StepKind.DIALOGUE:
            return self._show_dialogue(step)  # type: ignore[arg-type]
        if kind is StepKind.NARRATION:
            return self._show_narration(step)  # type: ignore[arg-type]
        if kind is StepKind.SET_VARIABLE:
            return self._set_variable(step)  # type: ignore[arg-type]
        if kind is StepKind.JUMP_TO:
            return self._jump_to(step)  # type: ignore[arg-type]
        if kind is StepKind.CONDITIONAL_JUMP:
            return self._conditional_jump(step)  # type: ignore[arg-type]
        if kind is StepKind.CHOICE:
            return self._show_choices(step)  # type: ignore[arg-type]
        if kind is StepKind.END_STORY:
            return self._end_story()
        logger.error("Unknown step type in node %r: %r", self._node_id, step)
        return "continue"

    def _set_background(self, step: BackgroundStep) -> _Flow:
        image = self._story.places.get(step.id) if isinstance(step.id, str) else None
        if image is None:
            logger.error(
                "Background %r not found in story.places (available: %s)",
                step.id,
                ", ".join(sorted(self._story.places)),
            )
            return "continue"
        self._sink.render(SetBackground(place_id=step.id, image=image))
        return "continue"

    def _show_character(self, step: ShowCharacterStep) -> _Flow:
        character = self._story.characters.get(step.id) if isinstance(step.id, str) else None
        if character is None:
            logger.error(
                "Character %r not found in story.characters (available: %s)",
                step.id,
                ", ".join(self._story.character_ids()),
            )
            return "continue"
        name = pose_name(step.pose)
        if name is None:
            logger.error("Invalid pose for character %r: %r", step.id, step.pose)
            return "continue"
        image = character.poses.get(name)
        if image is None:
            logger.error(
                "Pose %r not found for character %r (available: %s)",
                name,
                step.id,
                ", ".join(sorted(character.poses)),
            )
            return "continue"
        position = position_of(step.position)
        if position is None:
            logger.error(
                "Unknown position %r for character %r; valid positions: left, center, right",
                step.position,
                step.id,
            )
            return "continue"
        self._sink.render(SetCharacterSprite(position=position, image=image, character_id=step.id))
        self._visible[position] = step.id
        return "continue"

    def _hide_character(self, step: HideCharacterStep) -> _Flow:
        if not step.id:
            logger.error("hide_character step missing id in node %r", self._node_id)
            return "continue"
        for position, visible_id in self._visible.items():
            if visible_id == step.id:
                self._sink.render(ClearCharacterSprite(position=position, character_id=step.id))
                self._visible[position] = None
        return "continue"

    def _show_dialogue(self, step: DialogueStep) -> _Flow:
        if not isinstance(step.who, str) or not step.who:
            logger.error('Dialogue step has no valid "who" in node %r: %r', self._node_id, step.who)
            return "continue"
        if not step.text:
            logger.error("Dialogue for %r missing text in node %r", step.who, self._node_id)
            return "continue"
        character = self._story.characters.get(step.who)
        if character is None:
            logger.warning("Character %r not found in story.characters, using id as name", step.who)
        speaker = character.display_name if character is not None else step.who
        self._sink.render(SetDialogue(speaker=speaker, text=step.text))
        self._status = "awaiting_advance"
        return "suspend"

    def _show_narration(self, step: NarrationStep) -> _Flow:
        if not step.text:
            logger.error("Narration step missing text in node %r", self._node_id)
            return "continue"
        self._sink.render(SetDialogue(speaker=None, text=step.text))
        self._status = "awaiting_advance"
        return "suspend"

    def _set_variable(self, step: SetVariableStep) -> _Flow:
        if not isinstance(step.key, str) or not step.key:
            logger.error("set_variable step has no valid key in node %r: %r", self._node_id, step.key)
            return "continue"
        if step.value is MISSING:
            logger.error("set_variable %r has no value in node %r", step.key, self._node_id)
            return "continue"
        if callable(step.value):
            result = step.value(self._state)
        else:
            result = step.value
        self._state.variables[step.key] = result
        logger.debug("Variable set: %s = %r", step.key, result)
        return "continue"

    def _jump_to(self, step: JumpToStep) -> _Flow:
        if not step.node_id:
            logger.error("jump_to step missing node id in node %r", self._node_id)
            return "halt"
        return "jump" if self._jump(step.node_id) else "halt"

    def _conditional_jump(self, step: ConditionalJumpStep) -> _Flow:
        if not callable(step.test):
            logger.error("conditional_jump step has no test function in node %r", self._node_id)
            return "continue"
        passed = bool(step.test(self._state))
        if passed and step.then_node_id:
            target = step.then_node_id
        elif not passed and step.else_node_id:
            target = step.else_node_id
        else:
            return "continue"
        return "jump" if self._jump(target) else "halt"

    def _show_choices(self, step: ChoiceStep) -> _Flow:
        offered: List[OfferedChoice] = []
        for index, option in enumerate(step.options or ()):
            if not isinstance(option, (list, tuple)) or len(option) not in (2, 3):
                logger.error(
                    "Choice option %d is not a (label, node_id[, effect]) tuple: %r", index, option
                )
                continue
            label, target = option[0], option[1]
            if not label:
                logger.error("Choice option %d missing label in node %r", index, self._node_id)
                continue
            effect = option[2] if len(option) == 3 else None
            offered.append(OfferedChoice(label=label, target=target, effect=effect))
        if not offered:
            logger.error("Choice step has no valid options in node %r", self._node_id)
            return "continue"
        self._pending_choices = offered
        self._sink.render(
            ShowChoices(
                prompt=step.prompt or DEFAULT_CHOICE_PROMPT,
                labels=tuple(option.label for option in offered),
            )
        )
        self._status = "awaiting_choice"
        return "suspend"

    def _end_story(self) -> _Flow:
        self._sink.render(ShowEnded())
        self._status = "ended"
        logger.info("Story ended in node %r", self._node_id)
        return "suspend"

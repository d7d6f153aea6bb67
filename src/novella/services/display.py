"""Display commands emitted by the interpreter and the sink interface that receives them."""
from __future__ import annotations

from dataclasses import dataclass, field
from typing import List, Protocol, Sequence, Tuple, Type, TypeVar

from novella.domain.defs import CharacterPosition


@dataclass(frozen=True, slots=True)
class DisplayCommand:
    """Base class for display commands."""


@dataclass(frozen=True, slots=True)
class SetBackground(DisplayCommand):
    place_id: str
    image: str


@dataclass(frozen=True, slots=True)
class SetCharacterSprite(DisplayCommand):
    position: CharacterPosition
    image: str
    character_id: str


@dataclass(frozen=True, slots=True)
class ClearCharacterSprite(DisplayCommand):
    position: CharacterPosition
    character_id: str


@dataclass(frozen=True, slots=True)
class SetDialogue(DisplayCommand):
    """A spoken line, or narration when ``speaker`` is None."""

    speaker: str | None
    text: str


@dataclass(frozen=True, slots=True)
class ShowChoices(DisplayCommand):
    prompt: str
    labels: Tuple[str, ...]


@dataclass(frozen=True, slots=True)
class ShowEnded(DisplayCommand):
    pass


class RenderSink(Protocol):
    """Anything that can turn display commands into visible output."""

    def render(self, command: DisplayCommand) -> None:
        ...


C = TypeVar("C", bound=DisplayCommand)


@dataclass(slots=True)
class CommandLog:
    """Render sink that records commands in memory, for tests and headless runs."""

    commands: List[DisplayCommand] = field(default_factory=list)

    def render(self, command: DisplayCommand) -> None:
        self.commands.append(command)

    def of_type(self, command_type: Type[C]) -> List[C]:
        return [command for command in self.commands if isinstance(command, command_type)]

    def last(self) -> DisplayCommand | None:
        return self.commands[-1] if self.commands else None

    def clear(self) -> Sequence[DisplayCommand]:
        drained = list(self.commands)
        self.commands.clear()
        return drained

"""Shared CLI rendering helpers and the console render sink."""
from __future__ import annotations

import os
import textwrap
from typing import Dict, Iterable, Mapping, Sequence

from novella.domain.defs import CharacterPosition
from novella.services.display import (
    ClearCharacterSprite,
    DisplayCommand,
    SetBackground,
    SetCharacterSprite,
    SetDialogue,
    ShowChoices,
    ShowEnded,
)
from novella.services.story_validator import Diagnostic, format_diagnostic

_BOX_WIDTH = 72


def debug_enabled() -> bool:
    """Return True only when NOVELLA_DEBUG is explicitly set to '1'."""
    return os.getenv("NOVELLA_DEBUG") == "1"


def wrap_text_for_box(text: str, width: int, *, indent_continuation: bool = True) -> list[str]:
    """
    Wrap text to fit within a fixed width, breaking on word boundaries.

    Args:
        text: The text to wrap
        width: Maximum width per line
        indent_continuation: If True, indent continuation lines with 2 spaces

    Returns:
        List of wrapped lines, each <= width characters
    """
    if not text or width <= 0:
        return [text] if text else [""]
    subsequent_indent = "  " if indent_continuation else ""
    wrapped = textwrap.fill(
        text,
        width=width,
        initial_indent="",
        subsequent_indent=subsequent_indent,
        break_long_words=False,
        break_on_hyphens=False,
    )
    return wrapped.split("\n")


def render_heading(title: str) -> None:
    """Print a consistent section heading."""
    print(f"\n=== {title} ===")


def render_line(speaker: str | None, text: str) -> None:
    """Print a dialogue line, or narration when there is no speaker."""
    if speaker:
        print(f"{speaker}:")
        lines = wrap_text_for_box(text, _BOX_WIDTH - 2)
        for line in lines:
            print(f"  {line}")
        return
    for line in wrap_text_for_box(text, _BOX_WIDTH, indent_continuation=False):
        print(line)


def render_choices(prompt: str, choices: Sequence[str]) -> None:
    """Display numbered story choices."""
    if not choices:
        return
    render_heading(prompt)
    for idx, label in enumerate(choices, start=1):
        print(f"{idx}. {label}")


def render_bullet_lines(lines: Iterable[str]) -> None:
    """Print bullet-prefixed lines."""
    for line in lines:
        print(f"- {line}")


def render_diagnostics(diagnostics: Sequence[Diagnostic]) -> None:
    """Print validation findings, or a pass message when there are none."""
    if not diagnostics:
        print("Story validation passed.")
        return
    errors = sum(1 for diagnostic in diagnostics if diagnostic.severity == "error")
    render_heading(
        f"Story validation: {errors} error(s), {len(diagnostics) - errors} warning(s)"
    )
    render_bullet_lines(format_diagnostic(diagnostic) for diagnostic in diagnostics)


def render_variables(variables: Mapping[str, object]) -> None:
    """Debug panel: dump the current story variables."""
    render_heading("Variables")
    if not variables:
        print("(none)")
        return
    width = max(len(key) for key in variables)
    for key, value in variables.items():
        print(f"{key.ljust(width)}  {value!r}")


class ConsoleRenderSink:
    """Render sink that prints scene changes and text to stdout."""

    def __init__(self) -> None:
        self.background: str | None = None
        self.sprites: Dict[CharacterPosition, str] = {}

    def render(self, command: DisplayCommand) -> None:
        if isinstance(command, SetBackground):
            self.background = command.place_id
            if debug_enabled():
                print(f"[background: {command.place_id} -> {command.image}]")
        elif isinstance(command, SetCharacterSprite):
            self.sprites[command.position] = command.character_id
            if debug_enabled():
                print(f"[{command.position.value}: {command.character_id} -> {command.image}]")
        elif isinstance(command, ClearCharacterSprite):
            self.sprites.pop(command.position, None)
        elif isinstance(command, SetDialogue):
            print()
            render_line(command.speaker, command.text)
        elif isinstance(command, ShowChoices):
            render_choices(command.prompt, command.labels)
        elif isinstance(command, ShowEnded):
            render_heading("THE END")

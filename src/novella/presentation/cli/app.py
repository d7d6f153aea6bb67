"""Console-driven play loop for novella stories."""
from __future__ import annotations

import argparse
import logging
from pathlib import Path
from typing import Sequence

from novella.data import DEFAULT_STORY, DataError, list_bundled_stories, load_story
from novella.domain.defs import StoryDef
from novella.services import StoryInterpreter, log_diagnostics, validate_story

from .config import load_config, log_level
from .render import ConsoleRenderSink, debug_enabled, render_diagnostics, render_heading, render_variables

logger = logging.getLogger("novella.cli")


def parse_args(argv: Sequence[str] | None) -> argparse.Namespace:
    parser = argparse.ArgumentParser(description="Play or validate a novella story.")
    parser.add_argument(
        "--story",
        default=DEFAULT_STORY,
        help="Dotted module name or path to a .py file exposing a 'story' (default: %(default)s)",
    )
    parser.add_argument(
        "--validate-only",
        action="store_true",
        help="Print validation diagnostics and exit; non-zero exit status on errors.",
    )
    parser.add_argument("--list", action="store_true", help="List bundled stories and exit.")
    parser.add_argument("--config", type=Path, default=None, help="Path to a config JSON file.")
    return parser.parse_args(argv)


def main(argv: Sequence[str] | None = None) -> int:
    """Start the interactive CLI session and return the exit status."""
    args = parse_args(argv)
    config = load_config(args.config)
    logging.basicConfig(level=log_level(config), format="%(levelname)s %(name)s: %(message)s")

    if args.list:
        for name in list_bundled_stories():
            print(name)
        return 0

    try:
        story = load_story(args.story)
    except DataError as exc:
        print(f"Could not load story: {exc}")
        return 1

    diagnostics = validate_story(story)
    if args.validate_only:
        render_diagnostics(diagnostics)
        return 1 if any(diagnostic.severity == "error" for diagnostic in diagnostics) else 0

    error_count = log_diagnostics(diagnostics, logger)
    if error_count and config["block_on_errors"]:
        print(f"Story has {error_count} critical error(s); refusing to start.")
        return 1
    if error_count:
        logger.error("Story has %d critical error(s). Game may not work correctly.", error_count)

    while True:
        if not _run_story_loop(story):
            break
        if not _prompt_restart():
            break
    print("Goodbye!")
    return 0


def _run_story_loop(story: StoryDef) -> bool:
    """Play one playthrough; return False when the player quits early."""
    interpreter = StoryInterpreter(story, ConsoleRenderSink())
    interpreter.start()
    while True:
        status = interpreter.status
        if status == "awaiting_advance":
            action = _prompt_advance()
            if action == "quit":
                return False
            if action == "debug":
                render_variables(interpreter.snapshot().variables)
                continue
            interpreter.advance()
        elif status == "awaiting_choice":
            index = _prompt_choice(len(interpreter.pending_choices))
            if index is None:
                return False
            interpreter.choose(index)
        else:
            if status == "halted":
                render_heading("The story stops here")
            return True


def _prompt_advance() -> str:
    hint = "[Enter] continue, d: variables, q: quit" if debug_enabled() else "[Enter] continue, q: quit"
    while True:
        raw = input(f"{hint} > ").strip().lower()
        if raw == "q":
            return "quit"
        if raw == "d" and debug_enabled():
            return "debug"
        if not raw:
            return "advance"
        print("Press Enter to continue.")


def _prompt_choice(choice_count: int) -> int | None:
    while True:
        raw = input("Select an option (q to quit): ").strip()
        if raw.lower() == "q":
            return None
        try:
            index = int(raw) - 1
        except ValueError:
            print("Please enter a number.")
            continue
        if 0 <= index < choice_count:
            return index
        print(f"Please enter a value between 1 and {choice_count}.")


def _prompt_restart() -> bool:
    while True:
        raw = input("Play again? (y/n): ").strip().lower()
        if raw in ("y", "yes"):
            return True
        if raw in ("n", "no", ""):
            return False
        print("Please answer y or n.")

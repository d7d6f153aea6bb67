"""Static story validation utilities."""
from __future__ import annotations

import logging
from dataclasses import dataclass, field
from typing import Dict, List, MutableMapping, Sequence, Tuple

from novella.core.types import Severity
from novella.domain.defs import (
    MISSING,
    BackgroundStep,
    ChoiceStep,
    ConditionalJumpStep,
    DialogueStep,
    HideCharacterStep,
    JumpToStep,
    NarrationStep,
    SetVariableStep,
    ShowCharacterStep,
    StepKind,
    StoryDef,
)
from novella.domain.defs.step_def import pose_name, position_of, step_kind_of

from .errors import NodeNotFoundError, NodePathIsGroupError
from .node_resolver import is_step_list, iter_node_entries, resolve_node

_TERMINATING_KINDS = {
    StepKind.JUMP_TO,
    StepKind.CONDITIONAL_JUMP,
    StepKind.CHOICE,
    StepKind.END_STORY,
}

_SUSPENDING_KINDS = {StepKind.DIALOGUE, StepKind.NARRATION, StepKind.CHOICE, StepKind.END_STORY}


@dataclass(frozen=True, slots=True)
class Diagnostic:
    severity: Severity
    code: str
    message: str
    location: str


@dataclass(slots=True)
class _ValidationContext:
    story: StoryDef
    diagnostics: List[Diagnostic] = field(default_factory=list)
    # node path -> locations of the steps referencing it, in discovery order
    referenced: Dict[str, List[str]] = field(default_factory=dict)
    auto_advance_edges: Dict[str, str] = field(default_factory=dict)

    def error(self, code: str, message: str, location: str) -> None:
        self.diagnostics.append(Diagnostic("error", code, message, location))

    def warning(self, code: str, message: str, location: str) -> None:
        self.diagnostics.append(Diagnostic("warning", code, message, location))

    def reference(self, node_id: object, field_name: str, location: str) -> None:
        if not isinstance(node_id, str):
            self.not_a_string(field_name, node_id, location)
            return
        self.referenced.setdefault(node_id, []).append(location)

    def not_a_string(self, field_name: str, value: object, location: str) -> None:
        self.error(
            "INVALID_FIELD",
            f"{field_name} must be a string, got {type(value).__name__} {value!r}",
            location,
        )


def format_diagnostic(diagnostic: Diagnostic) -> str:
    suffix = f" at {diagnostic.location}" if diagnostic.location else ""
    return f"[{diagnostic.severity}] {diagnostic.code}: {diagnostic.message}{suffix}"


def summarize_diagnostics(diagnostics: Sequence[Diagnostic]) -> Tuple[int, int]:
    """Return ``(error_count, warning_count)``."""
    errors = sum(1 for diagnostic in diagnostics if diagnostic.severity == "error")
    return errors, len(diagnostics) - errors


def log_diagnostics(diagnostics: Sequence[Diagnostic], logger: logging.Logger) -> int:
    """Write every diagnostic to ``logger`` and return the error count."""
    if not diagnostics:
        logger.info("Story validation passed")
        return 0
    errors, warnings = summarize_diagnostics(diagnostics)
    logger.warning("Story validation found %d error(s) and %d warning(s)", errors, warnings)
    for diagnostic in diagnostics:
        level = logging.ERROR if diagnostic.severity == "error" else logging.WARNING
        logger.log(level, format_diagnostic(diagnostic))
    return errors


def validate_story(story: StoryDef) -> List[Diagnostic]:
    """Run every static check over ``story`` and return the findings in order.

    Never raises; whether errors block play is the caller's decision.
    """
    ctx = _ValidationContext(story=story)
    if not story.start:
        ctx.error("MISSING_START", 'Story missing required "start" property', "story.start")
    if story.nodes is None:
        ctx.error("MISSING_NODES", 'Story missing required "nodes" property', "story.nodes")
        return ctx.diagnostics
    if story.variables is None:
        ctx.warning("MISSING_VARIABLES", 'Story missing "variables" property', "story.variables")

    if story.start:
        _validate_start(ctx, story.start)

    leaf_paths: List[str] = []
    invalid_paths: set[str] = set()
    for path, value in iter_node_entries(story.nodes):
        if not is_step_list(value):
            ctx.error(
                "INVALID_NODE",
                f'Node "{path}" has invalid value (must be a list of steps or a group)',
                path,
            )
            invalid_paths.add(path)
            continue
        leaf_paths.append(path)
        _validate_steps(ctx, path, value)

    valid_paths = set(leaf_paths)
    for node_id, locations in ctx.referenced.items():
        if node_id in valid_paths:
            continue
        message = _describe_bad_reference(ctx, node_id, invalid_paths)
        for location in locations:
            ctx.error("MISSING_NODE_REF", message, location)

    for path in leaf_paths:
        if path != story.start and path not in ctx.referenced:
            ctx.warning(
                "UNREACHABLE_NODE",
                f'Node "{path}" is defined but never referenced (unreachable)',
                path,
            )

    _validate_auto_advance_cycles(ctx)
    return ctx.diagnostics


def _describe_bad_reference(ctx: _ValidationContext, node_id: str, invalid_paths: set[str]) -> str:
    assert ctx.story.nodes is not None
    if node_id in invalid_paths:
        return f'Referenced node "{node_id}" has an invalid value'
    try:
        resolve_node(ctx.story.nodes, node_id)
    except NodePathIsGroupError as exc:
        return (
            f'Referenced node "{node_id}" is a node group, not a list of steps '
            f"(contains: {', '.join(exc.available)})"
        )
    except NodeNotFoundError:
        pass
    return f'Referenced node "{node_id}" does not exist'


def _validate_start(ctx: _ValidationContext, start: str) -> None:
    assert ctx.story.nodes is not None
    try:
        resolve_node(ctx.story.nodes, start)
    except NodeNotFoundError:
        ctx.error("INVALID_START", f'Start node "{start}" does not exist', "story.start")
    except NodePathIsGroupError:
        ctx.error(
            "INVALID_START",
            f'Start node "{start}" is a node group, not a list of steps',
            "story.start",
        )


def _validate_steps(ctx: _ValidationContext, node_id: str, steps: Sequence[object]) -> None:
    if not steps:
        ctx.warning("EMPTY_NODE", f'Node "{node_id}" has no steps (empty)', node_id)
        return

    suspends = False
    branches = False
    for index, step in enumerate(steps):
        location = f"{node_id}[{index}]"
        kind = step_kind_of(step)
        if kind is None:
            ctx.error("UNKNOWN_STEP_KIND", f"Unknown step type: {step!r}", location)
            continue
        if kind in _SUSPENDING_KINDS:
            suspends = True
        if kind is StepKind.CONDITIONAL_JUMP:
            branches = True
        _validate_step(ctx, kind, step, location)

    last_kind = step_kind_of(steps[-1])
    if last_kind not in _TERMINATING_KINDS:
        ctx.warning(
            "ABRUPT_NODE_END",
            f'Node "{node_id}" doesn\'t end with a jump, choice, or end_story (will stop abruptly)',
            node_id,
        )
    elif last_kind is StepKind.JUMP_TO and not suspends and not branches:
        target = steps[-1].node_id  # type: ignore[union-attr]
        if target and isinstance(target, str):
            ctx.auto_advance_edges[node_id] = target


def _validate_step(ctx: _ValidationContext, kind: StepKind, step: object, location: str) -> None:
    if kind is StepKind.BACKGROUND:
        _check_background(ctx, step, location)  # type: ignore[arg-type]
    elif kind is StepKind.SHOW_CHARACTER:
        _check_show_character(ctx, step, location)  # type: ignore[arg-type]
    elif kind is StepKind.HIDE_CHARACTER:
        _check_hide_character(ctx, step, location)  # type: ignore[arg-type]
    elif kind is StepKind.DIALOGUE:
        _check_dialogue(ctx, step, location)  # type: ignore[arg-type]
    elif kind is StepKind.NARRATION:
        _check_narration(ctx, step, location)  # type: ignore[arg-type]
    elif kind is StepKind.SET_VARIABLE:
        _check_set_variable(ctx, step, location)  # type: ignore[arg-type]
    elif kind is StepKind.JUMP_TO:
        _check_jump_to(ctx, step, location)  # type: ignore[arg-type]
    elif kind is StepKind.CONDITIONAL_JUMP:
        _check_conditional_jump(ctx, step, location)  # type: ignore[arg-type]
    elif kind is StepKind.CHOICE:
        _check_choice(ctx, step, location)  # type: ignore[arg-type]
    elif kind is StepKind.END_STORY:
        pass
    else:
        raise ValueError(f"Unhandled step kind: {kind}")


def _check_background(ctx: _ValidationContext, step: BackgroundStep, location: str) -> None:
    if not step.id:
        ctx.error("MISSING_FIELD", 'background step missing "id" property', location)
    elif not isinstance(step.id, str):
        ctx.not_a_string('background "id"', step.id, location)
    elif step.id not in ctx.story.places:
        ctx.error("UNKNOWN_PLACE", f'Background "{step.id}" not defined in story.places', location)


def _check_show_character(ctx: _ValidationContext, step: ShowCharacterStep, location: str) -> None:
    if not step.id:
        ctx.error("MISSING_FIELD", 'show_character step missing "id" property', location)
    elif not isinstance(step.id, str):
        ctx.not_a_string('show_character "id"', step.id, location)
    elif step.id not in ctx.story.characters:
        ctx.error(
            "UNKNOWN_CHARACTER",
            f'Character "{step.id}" not defined in story.characters',
            location,
        )
    elif step.pose:
        name = pose_name(step.pose)
        if name is None or name not in ctx.story.characters[step.id].poses:
            ctx.error(
                "UNKNOWN_POSE",
                f'Pose "{name or step.pose!r}" not defined for character "{step.id}"',
                location,
            )
    if not step.pose:
        ctx.warning("MISSING_FIELD", 'show_character step missing "pose" property', location)
    if not step.position:
        ctx.warning("MISSING_FIELD", 'show_character step missing "position" property', location)
    elif position_of(step.position) is None:
        ctx.error(
            "UNKNOWN_POSITION",
            f'Position "{step.position}" is not one of left, center, right',
            location,
        )


def _check_hide_character(ctx: _ValidationContext, step: HideCharacterStep, location: str) -> None:
    if not step.id:
        ctx.error("MISSING_FIELD", 'hide_character step missing "id" property', location)
    elif not isinstance(step.id, str):
        ctx.not_a_string('hide_character "id"', step.id, location)


def _check_dialogue(ctx: _ValidationContext, step: DialogueStep, location: str) -> None:
    if not step.who:
        ctx.error("MISSING_FIELD", 'dialogue step missing "who" property', location)
    elif not isinstance(step.who, str):
        ctx.not_a_string('dialogue "who"', step.who, location)
    elif step.who not in ctx.story.characters:
        ctx.error(
            "UNKNOWN_CHARACTER",
            f'Character "{step.who}" in dialogue not defined in story.characters',
            location,
        )
    if not step.text:
        ctx.error("MISSING_FIELD", 'dialogue step missing "text" property', location)


def _check_narration(ctx: _ValidationContext, step: NarrationStep, location: str) -> None:
    if not step.text:
        ctx.error("MISSING_FIELD", 'narration step missing "text" property', location)


def _check_set_variable(ctx: _ValidationContext, step: SetVariableStep, location: str) -> None:
    if not step.key:
        ctx.error("MISSING_FIELD", 'set_variable step missing "key" property', location)
    elif not isinstance(step.key, str):
        ctx.not_a_string('set_variable "key"', step.key, location)
    if step.value is MISSING:
        ctx.error("MISSING_FIELD", 'set_variable step missing "value" property', location)


def _check_jump_to(ctx: _ValidationContext, step: JumpToStep, location: str) -> None:
    if not step.node_id:
        ctx.error("MISSING_FIELD", 'jump_to step missing "node_id" property', location)
    else:
        ctx.reference(step.node_id, 'jump_to "node_id"', location)


def _check_conditional_jump(
    ctx: _ValidationContext, step: ConditionalJumpStep, location: str
) -> None:
    if step.test is None:
        ctx.error("MISSING_FIELD", 'conditional_jump step missing "test" function', location)
    elif not callable(step.test):
        ctx.error("INVALID_FIELD", 'conditional_jump "test" must be callable', location)
    if not step.then_node_id:
        ctx.error(
            "MISSING_FIELD", 'conditional_jump step missing "then_node_id" property', location
        )
    else:
        ctx.reference(step.then_node_id, 'conditional_jump "then_node_id"', location)
    if step.else_node_id:
        ctx.reference(step.else_node_id, 'conditional_jump "else_node_id"', location)


def _check_choice(ctx: _ValidationContext, step: ChoiceStep, location: str) -> None:
    if not step.prompt:
        ctx.warning("MISSING_FIELD", 'choice step missing "prompt" property', location)
    if not isinstance(step.options, (list, tuple)):
        ctx.error("INVALID_FIELD", 'choice step missing or invalid "options" list', location)
        return
    if not step.options:
        ctx.error("MISSING_FIELD", "choice step has no options", location)
        return
    for option_index, option in enumerate(step.options):
        option_location = f"{location}.options[{option_index}]"
        if not isinstance(option, (list, tuple)) or len(option) not in (2, 3):
            ctx.error(
                "INVALID_CHOICE_OPTION",
                f"choice option {option_index} must be (label, node_id[, effect])",
                option_location,
            )
            continue
        label, target = option[0], option[1]
        if not label:
            ctx.error(
                "MISSING_FIELD", f"choice option {option_index} missing label", option_location
            )
        if len(option) == 3 and option[2] is not None and not callable(option[2]):
            ctx.error(
                "INVALID_FIELD",
                f"choice option {option_index} effect must be callable",
                option_location,
            )
        if target:
            ctx.reference(target, f"choice option {option_index} target", option_location)


def _validate_auto_advance_cycles(ctx: _ValidationContext) -> None:
    adjacency: MutableMapping[str, str] = {
        node_id: target
        for node_id, target in ctx.auto_advance_edges.items()
        if target in ctx.auto_advance_edges
    }
    # Each node has at most one outgoing edge, so every walk is a simple chain.
    walked: set[str] = set()
    cycles: list[list[str]] = []
    for origin in sorted(adjacency):
        if origin in walked:
            continue
        chain: list[str] = []
        chain_index: Dict[str, int] = {}
        node: str | None = origin
        while node is not None and node not in walked:
            walked.add(node)
            chain_index[node] = len(chain)
            chain.append(node)
            node = adjacency.get(node)
        if node is not None and node in chain_index:
            cycles.append(chain[chain_index[node] :])

    for cycle in cycles:
        cycle_path = " -> ".join(cycle + [cycle[0]])
        ctx.warning(
            "AUTOADVANCE_CYCLE",
            f"Nodes jump to each other without waiting for input: {cycle_path}",
            cycle[0],
        )

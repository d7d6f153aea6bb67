import logging

import pytest

from novella import (
    CharacterDef,
    CharacterPose,
    CharacterPosition,
    CommandLog,
    StoryDef,
    StoryInterpreter,
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
from novella.domain.defs import DialogueStep, ShowCharacterStep
from novella.services.display import (
    ClearCharacterSprite,
    SetBackground,
    SetCharacterSprite,
    SetDialogue,
    ShowChoices,
    ShowEnded,
)
from novella.services.errors import InterpreterStateError, InvalidChoiceError


def _make_story(nodes, *, start: str = "Start", variables=None) -> StoryDef:
    return StoryDef(
        start=start,
        nodes=nodes,
        variables=dict(variables or {}),
        characters={
            "bob": CharacterDef(
                display_name="Bob",
                poses={"neutral": "bob/neutral.png", "happy": "bob/happy.png"},
            ),
        },
        places={"park": "park.png"},
    )


def _start(story: StoryDef) -> tuple[StoryInterpreter, CommandLog]:
    sink = CommandLog()
    interpreter = StoryInterpreter(story, sink)
    interpreter.start()
    return interpreter, sink


def test_linear_dialogue_scenario() -> None:
    story = _make_story({"Start": [narration("A"), narration("B"), end_story()]})
    interpreter, sink = _start(story)

    assert interpreter.status == "awaiting_advance"
    assert sink.last() == SetDialogue(speaker=None, text="A")
    assert interpreter.cursor == 0
    assert interpreter.current_step == narration("A")

    assert interpreter.advance() is True
    assert interpreter.status == "awaiting_advance"
    assert sink.last() == SetDialogue(speaker=None, text="B")
    assert interpreter.cursor == 1

    assert interpreter.advance() is True
    assert interpreter.status == "ended"
    assert sink.last() == ShowEnded()
    assert interpreter.cursor == 2


def test_interpreter_is_idle_until_started() -> None:
    sink = CommandLog()
    interpreter = StoryInterpreter(_make_story({"Start": [narration("A"), end_story()]}), sink)
    assert interpreter.status == "idle"
    assert interpreter.advance() is False
    assert sink.commands == []


def test_start_twice_is_rejected() -> None:
    interpreter, _ = _start(_make_story({"Start": [narration("A"), end_story()]}))
    with pytest.raises(InterpreterStateError):
        interpreter.start()


def test_variable_driven_branch_scenario() -> None:
    story = _make_story(
        {
            "A": [
                set_variable("score", lambda state: state.variables["score"] + 5),
                conditional_jump(lambda state: state.variables["score"] >= 5, "Win", "Lose"),
            ],
            "Win": [narration("win"), end_story()],
            "Lose": [narration("lose"), end_story()],
        },
        start="A",
        variables={"score": 0},
    )
    interpreter, sink = _start(story)

    assert interpreter.current_node_id == "Win"
    assert interpreter.cursor == 0
    assert interpreter.state.variables["score"] == 5
    assert sink.last() == SetDialogue(speaker=None, text="win")


def test_else_branch_taken_when_test_fails() -> None:
    story = _make_story(
        {
            "Start": [conditional_jump(lambda state: False, "Win", "Lose")],
            "Win": [narration("win"), end_story()],
            "Lose": [narration("lose"), end_story()],
        }
    )
    interpreter, _ = _start(story)
    assert interpreter.current_node_id == "Lose"


def test_conditional_fallthrough_continues_in_place() -> None:
    story = _make_story(
        {
            "Start": [
                narration("before"),
                conditional_jump(lambda state: False, "Win"),
                narration("after"),
                end_story(),
            ],
            "Win": [end_story()],
        }
    )
    interpreter, sink = _start(story)
    interpreter.advance()

    assert interpreter.current_node_id == "Start"
    assert interpreter.cursor == 2
    assert interpreter.status == "awaiting_advance"
    assert sink.commands == [
        SetDialogue(speaker=None, text="before"),
        SetDialogue(speaker=None, text="after"),
    ]


def test_choice_with_null_target_scenario() -> None:
    story = _make_story(
        {
            "Start": [
                choice(
                    "Pick",
                    ("Red", None, lambda state: state.variables.__setitem__("color", "red")),
                    ("Blue", None, lambda state: state.variables.__setitem__("color", "blue")),
                ),
                narration("done"),
                end_story(),
            ]
        }
    )
    interpreter, sink = _start(story)
    assert interpreter.status == "awaiting_choice"
    assert sink.last() == ShowChoices(prompt="Pick", labels=("Red", "Blue"))
    assert interpreter.pending_choices == ("Red", "Blue")

    assert interpreter.choose(0) is True

    assert interpreter.state.variables["color"] == "red"
    assert interpreter.current_node_id == "Start"
    assert interpreter.cursor == 1
    assert interpreter.status == "awaiting_advance"
    assert sink.last() == SetDialogue(speaker=None, text="done")


def test_choice_effect_runs_before_jump() -> None:
    observed = []

    def effect(state) -> None:
        state.variables["picked"] = True

    story = _make_story(
        {
            "Start": [choice("Go?", ("Go", "Next", effect))],
            "Next": [
                set_variable("seen", lambda state: observed.append(state.variables.get("picked"))),
                narration("arrived"),
                end_story(),
            ],
        }
    )
    interpreter, _ = _start(story)
    interpreter.choose(0)

    assert observed == [True]
    assert interpreter.current_node_id == "Next"


def test_every_jump_resets_cursor_to_zero() -> None:
    story = _make_story(
        {
            "Start": [
                narration("one"),
                narration("two"),
                choice("Where?", ("Middle", "Middle")),
            ],
            "Middle": [
                narration("m"),
                jump_to("Branch"),
            ],
            "Branch": [
                conditional_jump(lambda state: True, "End"),
            ],
            "End": [narration("end"), end_story()],
        }
    )
    interpreter, _ = _start(story)
    interpreter.advance()
    interpreter.advance()
    assert interpreter.cursor == 2

    interpreter.choose(0)
    assert interpreter.current_node_id == "Middle"
    assert interpreter.cursor == 0

    interpreter.advance()
    assert interpreter.current_node_id == "End"
    assert interpreter.cursor == 0


def test_cursor_increases_by_one_per_advance() -> None:
    story = _make_story({"Start": [narration(str(index)) for index in range(5)]})
    interpreter, _ = _start(story)
    cursors = [interpreter.cursor]
    while interpreter.advance():
        cursors.append(interpreter.cursor)
    assert cursors == [0, 1, 2, 3, 4, 5]
    assert interpreter.status == "halted"


def test_terminal_state_ignores_signals() -> None:
    story = _make_story({"Start": [narration("A"), end_story(), narration("never")]})
    interpreter, sink = _start(story)
    interpreter.advance()
    before = interpreter.snapshot()
    command_count = len(sink.commands)

    assert interpreter.advance() is False
    assert interpreter.choose(0) is False
    assert interpreter.snapshot() == before
    assert len(sink.commands) == command_count


def test_invalid_choice_index_changes_nothing() -> None:
    story = _make_story({"Start": [choice("Pick", ("Only", None)), end_story()]})
    interpreter, sink = _start(story)
    before = interpreter.snapshot()
    with pytest.raises(InvalidChoiceError):
        interpreter.choose(3)
    with pytest.raises(IndexError):
        interpreter.choose(-1)
    assert interpreter.snapshot() == before
    assert interpreter.status == "awaiting_choice"


def test_choose_while_awaiting_advance_is_rejected() -> None:
    interpreter, _ = _start(_make_story({"Start": [narration("A"), end_story()]}))
    with pytest.raises(InterpreterStateError):
        interpreter.choose(0)
    assert interpreter.status == "awaiting_advance"


def test_advance_while_awaiting_choice_is_ignored() -> None:
    interpreter, _ = _start(_make_story({"Start": [choice("Pick", ("A", None)), end_story()]}))
    assert interpreter.advance() is False
    assert interpreter.status == "awaiting_choice"
    assert interpreter.cursor == 0


def test_reentrant_calls_are_rejected() -> None:
    holder = {}

    def sneaky(state):
        return holder["interpreter"].advance()

    story = _make_story({"Start": [set_variable("x", sneaky), end_story()]})
    interpreter = StoryInterpreter(story, CommandLog())
    holder["interpreter"] = interpreter
    with pytest.raises(InterpreterStateError):
        interpreter.start()


def test_scene_commands_for_characters_and_backgrounds() -> None:
    story = _make_story(
        {
            "Start": [
                background("park"),
                show_character("bob", CharacterPose.neutral, CharacterPosition.left),
                show_character("bob", CharacterPose.happy, CharacterPosition.right),
                dialogue("bob", "Hi!"),
                hide_character("bob"),
                hide_character("bob"),
                end_story(),
            ]
        }
    )
    interpreter, sink = _start(story)
    assert interpreter.visible_characters[CharacterPosition.left] == "bob"
    assert interpreter.visible_characters[CharacterPosition.right] == "bob"
    interpreter.advance()

    assert sink.commands == [
        SetBackground(place_id="park", image="park.png"),
        SetCharacterSprite(position=CharacterPosition.left, image="bob/neutral.png", character_id="bob"),
        SetCharacterSprite(position=CharacterPosition.right, image="bob/happy.png", character_id="bob"),
        SetDialogue(speaker="Bob", text="Hi!"),
        ClearCharacterSprite(position=CharacterPosition.left, character_id="bob"),
        ClearCharacterSprite(position=CharacterPosition.right, character_id="bob"),
        ShowEnded(),
    ]
    assert all(value is None for value in interpreter.visible_characters.values())


def test_lookup_failures_are_logged_and_skipped(caplog) -> None:
    story = _make_story(
        {
            "Start": [
                background("moon"),
                show_character("alice"),
                show_character("bob", CharacterPose.sad),
                ShowCharacterStep(id="bob", pose=CharacterPose.neutral, position="top"),
                narration("still here"),
                end_story(),
            ]
        }
    )
    with caplog.at_level(logging.ERROR, logger="novella.interpreter"):
        interpreter, sink = _start(story)

    assert sink.commands == [SetDialogue(speaker=None, text="still here")]
    assert interpreter.status == "awaiting_advance"
    assert len([r for r in caplog.records if r.levelno == logging.ERROR]) == 4


def test_unknown_speaker_uses_id_as_name(caplog) -> None:
    story = _make_story({"Start": [dialogue("stranger", "Psst."), end_story()]})
    with caplog.at_level(logging.WARNING, logger="novella.interpreter"):
        _, sink = _start(story)
    assert sink.last() == SetDialogue(speaker="stranger", text="Psst.")
    assert any("stranger" in record.getMessage() for record in caplog.records)


def test_dialogue_missing_text_does_not_suspend() -> None:
    story = _make_story({"Start": [DialogueStep(who="bob", text=""), narration("next"), end_story()]})
    interpreter, sink = _start(story)
    assert sink.commands == [SetDialogue(speaker=None, text="next")]
    assert interpreter.cursor == 1


def test_failed_jump_halts_the_node(caplog) -> None:
    story = _make_story({"Start": [jump_to("Nowhere"), narration("unreachable")]})
    with caplog.at_level(logging.ERROR, logger="novella.interpreter"):
        interpreter, sink = _start(story)
    assert interpreter.status == "halted"
    assert interpreter.current_node_id == "Start"
    assert interpreter.cursor == 2
    assert sink.commands == []
    assert any("Nowhere" in record.getMessage() for record in caplog.records)


def test_jump_to_group_halts() -> None:
    story = _make_story({"Start": [jump_to("Park")], "Park": {"Inner": [end_story()]}})
    interpreter, _ = _start(story)
    assert interpreter.status == "halted"


def test_missing_start_node_halts() -> None:
    interpreter, sink = _start(_make_story({"Other": [end_story()]}))
    assert interpreter.status == "halted"
    assert interpreter.current_node_id is None
    assert sink.commands == []


def test_node_exhaustion_halts_silently() -> None:
    interpreter, _ = _start(_make_story({"Start": [set_variable("x", 1)]}))
    assert interpreter.status == "halted"
    assert interpreter.state.variables["x"] == 1
    assert interpreter.advance() is False


def test_nested_node_paths() -> None:
    story = _make_story(
        {
            "Start": [jump_to("Park.WithBob")],
            "Park": {"WithBob": [narration("bob"), jump_to("Park.Deep.Pond")], "Deep": {"Pond": [end_story()]}},
        }
    )
    interpreter, _ = _start(story)
    assert interpreter.current_node_id == "Park.WithBob"
    interpreter.advance()
    assert interpreter.current_node_id == "Park.Deep.Pond"
    assert interpreter.status == "ended"


def test_variables_are_copied_from_story() -> None:
    story = _make_story({"Start": [set_variable("items", lambda s: s.variables["items"] + ["x"]), end_story()]},
                        variables={"items": []})
    original_items = story.variables["items"]
    interpreter, _ = _start(story)
    assert interpreter.state.variables["items"] == ["x"]
    assert original_items == []
    assert story.variables == {"items": []}


def test_compute_function_errors_propagate() -> None:
    def boom(state):
        raise RuntimeError("bad compute")

    interpreter = StoryInterpreter(_make_story({"Start": [set_variable("x", boom), end_story()]}))
    with pytest.raises(RuntimeError, match="bad compute"):
        interpreter.start()
    assert interpreter.status == "halted"


def test_choice_effect_errors_propagate_and_keep_choice_open() -> None:
    def boom(state):
        raise ValueError("bad effect")

    interpreter, _ = _start(_make_story({"Start": [choice("Pick", ("Boom", None, boom)), end_story()]}))
    with pytest.raises(ValueError, match="bad effect"):
        interpreter.choose(0)
    assert interpreter.status == "awaiting_choice"
    assert interpreter.pending_choices == ("Boom",)


def test_invalid_options_are_not_offered() -> None:
    story = _make_story({"Start": [choice("", ("", "X"), ("Keep", None), "junk"), end_story()]})
    interpreter, sink = _start(story)
    assert sink.last() == ShowChoices(prompt="Choose:", labels=("Keep",))
    interpreter.choose(0)
    assert interpreter.status == "ended"


def test_runaway_jump_loop_is_halted(caplog) -> None:
    story = _make_story({"Start": [jump_to("Loop")], "Loop": [jump_to("Start")]})
    interpreter = StoryInterpreter(story, CommandLog(), max_transfers=50)
    with caplog.at_level(logging.ERROR, logger="novella.interpreter"):
        interpreter.start()
    assert interpreter.status == "halted"
    assert any("without player input" in record.getMessage() for record in caplog.records)


def test_non_string_choice_target_halts_without_crashing(caplog) -> None:
    story = _make_story({"Start": [choice("Pick", ("Go", 5)), narration("after"), end_story()]})
    interpreter, sink = _start(story)
    with caplog.at_level(logging.ERROR, logger="novella.interpreter"):
        assert interpreter.choose(0) is True
    assert interpreter.status == "halted"
    assert interpreter.current_node_id == "Start"
    assert SetDialogue(speaker=None, text="after") not in sink.commands
    assert any("Cannot jump" in record.getMessage() for record in caplog.records)


def test_non_string_jump_target_halts() -> None:
    interpreter, _ = _start(_make_story({"Start": [jump_to(["Next"])], "Next": [end_story()]}))
    assert interpreter.status == "halted"


def test_non_string_step_fields_are_logged_and_skipped() -> None:
    story = _make_story(
        {
            "Start": [
                background(["park"]),
                show_character(["bob"]),
                hide_character(["bob"]),
                dialogue(["bob"], "Hi"),
                set_variable(["x"], 1),
                narration("still here"),
                end_story(),
            ]
        }
    )
    interpreter, sink = _start(story)
    assert sink.commands == [SetDialogue(speaker=None, text="still here")]
    assert interpreter.state.variables == {}

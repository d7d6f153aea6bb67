"""A weekend at the park, organised into nested node groups."""
from __future__ import annotations

from novella.domain.defs import CharacterDef, CharacterPose, CharacterPosition, StoryDef
from novella.services.factories import (
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

LEFT = CharacterPosition.left
CENTER = CharacterPosition.center
RIGHT = CharacterPosition.right


def _poses(folder: str) -> dict[str, str]:
    return {pose.value: f"assets/characters/{folder}/{pose.value}.png" for pose in CharacterPose}


def _add(key: str, amount: int):
    return lambda state: state.variables[key] + amount


def _bring_snacks(state) -> None:
    state.variables["packedSnacks"] = True


def _skip_snacks(state) -> None:
    state.variables["packedSnacks"] = False


story = StoryDef(
    start="Start",
    variables={
        "abigailAffection": 0,
        "bobAffection": 0,
        "visitedPark": False,
        "helpedAbigail": False,
        "packedSnacks": False,
    },
    nodes={
        "Start": [
            background("bedroom"),
            show_character("you", CharacterPose.neutral, CENTER),
            narration("Saturday. Sunlight leaks through the curtains."),
            narration("You hear voices from the living room."),
            choice(
                "Before you go, pack some snacks?",
                ("Grab a bag of chips", None, _bring_snacks),
                ("Travel light", None, _skip_snacks),
            ),
            hide_character("you"),
            choice(
                "What now?",
                ("Go see who is up", "LivingRoom.Main"),
                ("Stay in bed a little longer", "Bedroom.StayInBed"),
            ),
        ],
        "Bedroom": {
            "StayInBed": [
                narration("You pull the covers over your head and doze a while longer."),
                show_character("abigail", CharacterPose.neutral, CENTER),
                dialogue("abigail", "Hey, sleepyhead! Bob wants to show us something at the park."),
                set_variable("abigailAffection", _add("abigailAffection", -1)),
                hide_character("abigail"),
                narration("The front door closes. You get up and follow them."),
                jump_to("Park.WithBob"),
            ],
        },
        "LivingRoom": {
            "Main": [
                background("living"),
                show_character("you", CharacterPose.neutral, CENTER),
                show_character("abigail", CharacterPose.happy, LEFT),
                show_character("bob", CharacterPose.neutral, RIGHT),
                dialogue("abigail", "Morning! I have errands to run, want to help?"),
                dialogue("bob", "Or come to the park with me. I found a hidden path!"),
                hide_character("you"),
                choice(
                    "Who do you join?",
                    ("I'll help you, Abigail!", "LivingRoom.HelpAbigail"),
                    ("The park sounds great, Bob.", "LivingRoom.GoWithBob"),
                ),
            ],
            "HelpAbigail": [
                set_variable("helpedAbigail", True),
                set_variable("abigailAffection", _add("abigailAffection", 2)),
                show_character("abigail", CharacterPose.happy, LEFT),
                dialogue("abigail", "Thanks! I really appreciate it."),
                hide_character("abigail"),
                hide_character("bob"),
                narration("You spend the next hour running errands, then head to the park."),
                jump_to("Park.WithAbigail"),
            ],
            "GoWithBob": [
                set_variable("bobAffection", _add("bobAffection", 2)),
                show_character("abigail", CharacterPose.sad, LEFT),
                dialogue("abigail", "Oh... okay. I'll catch up with you later."),
                hide_character("abigail"),
                show_character("bob", CharacterPose.happy, RIGHT),
                dialogue("bob", "Cool! Let's go!"),
                hide_character("bob"),
                jump_to("Park.WithBob"),
            ],
        },
        "Park": {
            "WithAbigail": [
                background("park"),
                set_variable("visitedPark", True),
                show_character("abigail", CharacterPose.happy, LEFT),
                show_character("bob", CharacterPose.happy, RIGHT),
                dialogue("bob", "You made it! Check out this path."),
                jump_to("Park.Picnic"),
            ],
            "WithBob": [
                background("park"),
                set_variable("visitedPark", True),
                show_character("bob", CharacterPose.happy, RIGHT),
                narration("You and Bob explore the path and find a quiet, scenic spot."),
                show_character("abigail", CharacterPose.neutral, LEFT),
                dialogue("abigail", "There you both are."),
                jump_to("Park.Picnic"),
            ],
            "Picnic": [
                conditional_jump(lambda state: not state.variables["packedSnacks"], "Park.Ending"),
                narration("You open the bag of chips and everyone digs in."),
                set_variable("bobAffection", _add("bobAffection", 1)),
                set_variable("abigailAffection", _add("abigailAffection", 1)),
                jump_to("Park.Ending"),
            ],
            "Ending": [
                hide_character("abigail"),
                hide_character("bob"),
                conditional_jump(
                    lambda state: state.variables["abigailAffection"]
                    + state.variables["bobAffection"]
                    >= 3,
                    "Endings.Friends",
                    "Endings.Quiet",
                ),
            ],
        },
        "Endings": {
            "Friends": [
                narration("The three of you stay until sunset, laughing the whole time."),
                narration("*** BEST ENDING: Park Pals ***"),
                end_story(),
            ],
            "Quiet": [
                narration("The afternoon is pleasant, if a little quiet."),
                narration("*** ENDING: A Walk in the Park ***"),
                end_story(),
            ],
        },
    },
    characters={
        "you": CharacterDef(display_name="You", poses=_poses("alice")),
        "abigail": CharacterDef(display_name="Abigail", poses=_poses("abigail")),
        "bob": CharacterDef(display_name="Bob", poses=_poses("bob")),
    },
    places={
        "bedroom": "assets/backgrounds/room-bedroom.png",
        "living": "assets/backgrounds/room-living.png",
        "park": "assets/backgrounds/outdoor-park.png",
    },
)

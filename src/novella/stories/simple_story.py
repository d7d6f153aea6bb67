"""A short rainy-day story exercising every step kind."""
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


def _befriend(amount: int):
    return lambda state: state.variables["friendlyPoints"] + amount


story = StoryDef(
    start="Start",
    variables={
        "tookUmbrella": False,
        "friendlyPoints": 0,
    },
    nodes={
        "Start": [
            background("bedroom"),
            show_character("you", CharacterPose.neutral, CENTER),
            narration("It's Monday morning. You wake up and check your phone."),
            narration('There\'s a weather alert: "Heavy rain expected this afternoon."'),
            hide_character("you"),
            choice(
                "Do you take an umbrella?",
                ("Yes, better safe than sorry", "TakeUmbrella"),
                ("No, it probably won't rain", "SkipUmbrella"),
            ),
        ],
        "TakeUmbrella": [
            narration("You grab your umbrella before heading out."),
            set_variable("tookUmbrella", True),
            jump_to("School"),
        ],
        "SkipUmbrella": [
            narration("You decide to risk it and leave the umbrella at home."),
            set_variable("tookUmbrella", False),
            jump_to("School"),
        ],
        "School": [
            background("park"),
            show_character("bob", CharacterPose.happy, RIGHT),
            dialogue("bob", "Hey! Ready for the big test today?"),
            show_character("you", CharacterPose.neutral, LEFT),
            choice(
                "How do you respond?",
                ("Yeah! I studied all weekend.", "Confident"),
                ("Ugh, don't remind me...", "Nervous"),
            ),
        ],
        "Confident": [
            show_character("you", CharacterPose.happy, LEFT),
            dialogue("you", "Yeah! I studied all weekend."),
            show_character("bob", CharacterPose.happy, RIGHT),
            dialogue("bob", "That's the spirit! Want to study together at lunch?"),
            set_variable("friendlyPoints", _befriend(1)),
            jump_to("Lunch"),
        ],
        "Nervous": [
            show_character("you", CharacterPose.sad, LEFT),
            dialogue("you", "Ugh, don't remind me..."),
            show_character("bob", CharacterPose.neutral, RIGHT),
            dialogue("bob", "Don't worry! Want to study together at lunch?"),
            jump_to("Lunch"),
        ],
        "Lunch": [
            hide_character("you"),
            hide_character("bob"),
            narration("Lunch time arrives. You and Bob review your notes together."),
            narration("Suddenly, you hear thunder outside."),
            show_character("bob", CharacterPose.neutral, CENTER),
            dialogue("bob", "Looks like it's starting to rain heavily!"),
            hide_character("bob"),
            conditional_jump(
                lambda state: state.variables["tookUmbrella"],
                "HasUmbrella",
                "NoUmbrella",
            ),
        ],
        "HasUmbrella": [
            show_character("you", CharacterPose.happy, CENTER),
            narration("Good thing you brought your umbrella!"),
            show_character("bob", CharacterPose.sad, RIGHT),
            dialogue("bob", "Man, I forgot mine. I'm going to get soaked..."),
            hide_character("you"),
            choice(
                "What do you do?",
                ("Share your umbrella with Bob", "ShareUmbrella"),
                ("Wish him luck and go home", "GoHomeAlone"),
            ),
        ],
        "NoUmbrella": [
            show_character("you", CharacterPose.sad, CENTER),
            show_character("bob", CharacterPose.sad, RIGHT),
            narration("Neither of you has an umbrella."),
            dialogue("bob", "We're both going to get drenched!"),
            show_character("bob", CharacterPose.happy, RIGHT),
            dialogue("bob", "Well, at least we're in this together!"),
            set_variable("friendlyPoints", _befriend(1)),
            jump_to("EndingTogether"),
        ],
        "ShareUmbrella": [
            show_character("you", CharacterPose.happy, LEFT),
            show_character("bob", CharacterPose.neutral, RIGHT),
            dialogue("you", "Don't worry! We can share mine."),
            show_character("bob", CharacterPose.happy, RIGHT),
            dialogue("bob", "Really? Thanks! You're the best!"),
            set_variable("friendlyPoints", _befriend(2)),
            jump_to("EndingBest"),
        ],
        "GoHomeAlone": [
            show_character("you", CharacterPose.neutral, CENTER),
            dialogue("you", "Good luck! See you tomorrow."),
            hide_character("you"),
            show_character("bob", CharacterPose.sad, CENTER),
            dialogue("bob", "Yeah... see you."),
            hide_character("bob"),
            jump_to("EndingAlone"),
        ],
        "EndingBest": [
            hide_character("you"),
            hide_character("bob"),
            narration("You walk home together under the umbrella, laughing and chatting."),
            narration("The rain doesn't seem so bad when you're with a friend."),
            show_character("you", CharacterPose.happy, LEFT),
            show_character("bob", CharacterPose.happy, RIGHT),
            dialogue("bob", "Thanks again. I owe you one!"),
            hide_character("you"),
            hide_character("bob"),
            narration("*** BEST ENDING: True Friendship ***"),
            end_story(),
        ],
        "EndingTogether": [
            hide_character("you"),
            hide_character("bob"),
            narration("You both make a run for it through the rain."),
            narration("By the time you get home, you're both completely soaked but laughing."),
            narration("Sometimes the best memories come from unexpected moments."),
            narration("*** GOOD ENDING: Shared Experience ***"),
            end_story(),
        ],
        "EndingAlone": [
            narration("You make it home dry under your umbrella."),
            narration("As you close the door, you can't help but feel a little guilty."),
            narration("Maybe you should have been more generous..."),
            narration("*** ENDING: Dry but Lonely ***"),
            end_story(),
        ],
    },
    characters={
        "you": CharacterDef(display_name="You", poses=_poses("alice")),
        "bob": CharacterDef(display_name="Bob", poses=_poses("bob")),
    },
    places={
        "bedroom": "assets/backgrounds/room-bedroom.png",
        "park": "assets/backgrounds/outdoor-park.png",
    },
)

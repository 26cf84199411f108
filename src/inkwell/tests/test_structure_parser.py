from inkwell.story.prompts import all_structures_query
from inkwell.story.structure_parser import default_story, parse_structure_stories

CHARACTER = {"name": "Pip", "species": "Fox"}
PLOT = {"setting": "the Whispering Woods", "conflict": "a lost map", "goal": "find the way home"}


def test_labelled_sections_are_extracted():
    reply = """Freytag's Pyramid:
Pip found a map in the woods and set out on an adventure.
---
Three Act Structure:
Pip lost the map, searched all day, and finally found it under a log.
---
Fichtean Curve:
Storm after storm hit Pip, but each time Pip kept going until home appeared."""

    stories = parse_structure_stories(reply, CHARACTER, PLOT)

    assert stories.stage == "structured"
    assert stories.freytag == "Pip found a map in the woods and set out on an adventure."
    assert stories.three_act == "Pip lost the map, searched all day, and finally found it under a log."
    assert stories.fichtean == "Storm after storm hit Pip, but each time Pip kept going until home appeared."


def test_labels_without_separators():
    reply = (
        "Freytag's Pyramid: Pip climbs a hill. "
        "Three Act Structure: Pip crosses a river. "
        "Fichtean Curve: Pip braves a storm."
    )

    stories = parse_structure_stories(reply, CHARACTER, PLOT)

    assert stories.stage == "structured"
    assert stories.freytag == "Pip climbs a hill."
    assert stories.three_act == "Pip crosses a river."
    assert stories.fichtean == "Pip braves a storm."


def test_missing_section_gets_default_story():
    reply = "Freytag's Pyramid: Pip climbs a hill.\n---\nThree Act Structure: Pip crosses a river."

    stories = parse_structure_stories(reply, CHARACTER, PLOT)

    assert stories.stage == "structured"
    assert stories.freytag == "Pip climbs a hill."
    assert stories.three_act == "Pip crosses a river."
    assert stories.fichtean == default_story(CHARACTER, PLOT)


def test_unlabelled_parts_are_assigned_in_order():
    reply = "Pip climbs a hill.\n---\nPip crosses a river."

    stories = parse_structure_stories(reply, CHARACTER, PLOT)

    assert stories.stage == "delimited"
    assert stories.freytag == "Pip climbs a hill."
    assert stories.three_act == "Pip crosses a river."
    assert stories.fichtean == default_story(CHARACTER, PLOT)


def test_empty_separator_parts_are_skipped():
    reply = "---\n\n---Pip climbs a hill.---   ---Pip crosses a river.---Pip braves a storm."

    stories = parse_structure_stories(reply, CHARACTER, PLOT)

    assert stories.stage == "delimited"
    assert (stories.freytag, stories.three_act, stories.fichtean) == (
        "Pip climbs a hill.",
        "Pip crosses a river.",
        "Pip braves a storm.",
    )


def test_empty_reply_uses_default_everywhere():
    stories = parse_structure_stories("", CHARACTER, PLOT)

    expected = (
        "Once upon a time, Pip lived in the Whispering Woods. They faced a lost map "
        "and worked hard to find the way home. In the end, they succeeded and learned "
        "an important lesson."
    )
    assert stories.stage == "default"
    assert stories.freytag == stories.three_act == stories.fichtean == expected


def test_default_story_without_character_or_plot():
    assert default_story(None, None) == (
        "Once upon a time, a hero lived in a magical place. They faced a challenge "
        "and worked hard to achieve their goal. In the end, they succeeded and learned "
        "an important lesson."
    )


def test_response_shape():
    response = parse_structure_stories("", CHARACTER, PLOT).to_response()

    assert set(response) == {"freytag", "threeAct", "fichtean"}
    assert response["threeAct"]["structure_type"] == "threeAct"
    assert response["fichtean"]["story"].startswith("Once upon a time, Pip")


def test_bold_labels_are_extracted():
    reply = (
        "**Freytag's Pyramid:**\nPip found a map.\n\n"
        "**Three Act Structure:**\nPip set out at dawn.\n\n"
        "**Fichtean Curve:**\nPip ran through the storm."
    )

    stories = parse_structure_stories(reply, CHARACTER, PLOT)

    assert stories.stage == "structured"
    assert stories.freytag == "Pip found a map."
    assert stories.three_act == "Pip set out at dawn."
    assert stories.fichtean == "Pip ran through the storm."


def test_all_structures_query_asks_for_bold_labels():
    query = all_structures_query(CHARACTER, PLOT)

    for label in ("**Freytag's Pyramid:**", "**Three Act Structure:**", "**Fichtean Curve:**"):
        assert label in query
    assert "Character name: Pip" in query
    assert "Setting: the Whispering Woods" in query

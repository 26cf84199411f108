"""
Split one AI reply into the three structure example stories.

The reply is parsed in up to three stages, stopping at the first that yields
anything:

1. structured: regex extraction of the labelled sections
2. delimited: splitting on the "---" separator and assigning parts in order
3. default: a templated story built from the character and plot

Slots still empty after the winning stage get the default story.
"""

import re
from dataclasses import dataclass
from typing import Any, Literal, Optional

ParseStage = Literal["structured", "delimited", "default"]

SEPARATOR = "---"

_FLAGS = re.IGNORECASE | re.DOTALL

FREYTAG_PATTERN = re.compile(r"Freytag'?s?\s+Pyramid:?\s*([^-]+?)(?=---|Three|Fichtean|$)", _FLAGS)
THREE_ACT_PATTERN = re.compile(r"Three\s+Act\s+Structure:?\s*([^-]+?)(?=---|Fichtean|$)", _FLAGS)
FICHTEAN_PATTERN = re.compile(r"Fichtean\s+Curve:?\s*([^-]+?)(?=---|$)", _FLAGS)


@dataclass
class StructureStories:
    freytag: str
    three_act: str
    fichtean: str
    stage: ParseStage

    def to_response(self) -> dict[str, Any]:
        return {
            "freytag": {"story": self.freytag, "structure_type": "freytag"},
            "threeAct": {"story": self.three_act, "structure_type": "threeAct"},
            "fichtean": {"story": self.fichtean, "structure_type": "fichtean"},
        }


def default_story(character: Optional[dict], plot: Optional[dict]) -> str:
    character = character or {}
    plot = plot or {}
    name = character.get("name") or "a hero"
    setting = plot.get("setting") or "a magical place"
    conflict = plot.get("conflict") or "a challenge"
    goal = plot.get("goal") or "achieve their goal"
    return (
        f"Once upon a time, {name} lived in {setting}. "
        f"They faced {conflict} and worked hard to {goal}. "
        "In the end, they succeeded and learned an important lesson."
    )


def _capture(pattern: re.Pattern, text: str) -> str:
    match = pattern.search(text)
    # Bold labels ("**Freytag's Pyramid:**") leave their closing and the next opening asterisks in the capture
    return match.group(1).strip().strip("*").strip() if match else ""


def extract_sections(text: str) -> tuple[str, str, str]:
    return (
        _capture(FREYTAG_PATTERN, text),
        _capture(THREE_ACT_PATTERN, text),
        _capture(FICHTEAN_PATTERN, text),
    )


def split_sections(text: str) -> tuple[str, str, str]:
    parts = [part.strip() for part in text.split(SEPARATOR)]
    parts = [part for part in parts if part]
    parts += [""] * (3 - len(parts))
    return parts[0], parts[1], parts[2]


def parse_structure_stories(
    reply: str, character: Optional[dict], plot: Optional[dict]
) -> StructureStories:
    reply = reply or ""
    stage: ParseStage = "structured"
    sections = extract_sections(reply)

    if not any(sections):
        stage = "delimited"
        sections = split_sections(reply)

    if not any(sections):
        stage = "default"

    fallback = default_story(character, plot)
    freytag, three_act, fichtean = (section or fallback for section in sections)

    return StructureStories(
        freytag=freytag,
        three_act=three_act,
        fichtean=fichtean,
        stage=stage,
    )

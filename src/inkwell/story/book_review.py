from dataclasses import dataclass
from typing import Literal, Mapping, Sequence

from inkwell.story.word_count import count_words

ReviewType = Literal["recommendation", "critical", "literary"]

WRITING_TIPS: dict[str, dict] = {
    "recommendation": {
        "title": "Writing Tips for Recommendation Review",
        "tips": [
            "Start with what made you pick up this book - hook your readers!",
            "Share specific parts you loved (characters, plot twists, emotions)",
            "Be genuine - tell readers why YOU think they should read it",
            "Mention who might enjoy this book (age, interests, reading style)",
            "End with a clear recommendation that makes readers excited!",
        ],
    },
    "critical": {
        "title": "Writing Tips for Critical Review",
        "tips": [
            "Look at both strengths AND weaknesses - be fair and balanced",
            "Mention what worked well (characters, writing style, themes)",
            "Point out what didn't work (plot holes, pacing, confusing parts)",
            "Use examples from the book to support your points",
            "Give an honest overall assessment - what's your final verdict?",
        ],
    },
    "literary": {
        "title": "Writing Tips for Literary Review",
        "tips": [
            "Explore the deeper meanings - what themes does the book explore?",
            "Look for symbols, metaphors, and literary devices the author uses",
            "Analyze how characters develop and what they represent",
            "Examine the writing style - how does the author craft sentences?",
            "Connect the book's message to bigger ideas about life and society",
        ],
    },
}


def writing_tips(review_type: str) -> dict:
    return WRITING_TIPS.get(review_type, WRITING_TIPS["recommendation"])


@dataclass
class DraftCheck:
    word_count: int
    bypassed: bool
    accepted: bool


def check_draft(
    section_texts: Mapping[int, str], min_words: int, bypass_keyword: str
) -> DraftCheck:
    """A draft is publishable at min_words, or earlier if any section mentions the bypass keyword."""
    word_count = count_words(" ".join(section_texts.values()))
    keyword = bypass_keyword.lower()
    bypassed = bool(keyword) and any(
        keyword in text.strip().lower() for text in section_texts.values()
    )
    return DraftCheck(
        word_count=word_count,
        bypassed=bypassed,
        accepted=bypassed or word_count >= min_words,
    )


def assemble_review(outline: Sequence[str], section_texts: Mapping[int, str]) -> str:
    return "\n\n".join(
        f"{heading}:\n{section_texts.get(index, '')}" for index, heading in enumerate(outline)
    )

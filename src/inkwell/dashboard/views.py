"""
Read-side views for the teacher dashboard.

Stages log intermediate copies of the same artifact (a story saved while
writing and again at review). These views rebuild the "final record wins"
rule at read time; the store itself keeps everything.
"""

import math
from dataclasses import dataclass, field
from typing import Any, Dict, Iterable, List, Literal, Optional

from inkwell.schemas.interaction import Interaction
from inkwell.story.word_count import count_words

ArticleType = Literal["all", "story", "bookReview", "letter"]

ARTICLE_STAGES: Dict[str, set[str]] = {
    "story": {"review", "writing", "character", "plot", "structure"},
    "bookReview": {"bookReviewComplete", "bookReviewWriting", "bookSelection", "bookReviewTypeSelection"},
    "letter": {"letterComplete", "letterGame", "letterPuzzle", "letterAdventure"},
}

ARTICLE_FIELDS: Dict[str, str] = {
    "story": "story",
    "bookReview": "review",
    "letter": "letter",
}

# intermediate stage -> (final stage, field whose text must match)
SUPERSEDED_BY: Dict[str, tuple[str, str]] = {
    "writing": ("review", "story"),
    "bookReviewWriting": ("bookReviewComplete", "review"),
    "letterGame": ("letterComplete", "letter"),
}


def js_round(value: float) -> int:
    return math.floor(value + 0.5)


def filter_by_article_type(interactions: Iterable[Interaction], article_type: str) -> List[Interaction]:
    if article_type not in ARTICLE_STAGES:
        return list(interactions)
    stages = ARTICLE_STAGES[article_type]
    text_field = ARTICLE_FIELDS[article_type]
    return [i for i in interactions if getattr(i, text_field) or i.stage in stages]


@dataclass
class DashboardStats:
    total_interactions: int
    total_users: int
    total_api_calls: int
    recent_activity: int
    stage_counts: Dict[str, int]

    def to_json(self) -> Dict[str, Any]:
        total = self.total_interactions
        return {
            "totalInteractions": total,
            "totalUsers": self.total_users,
            "totalApiCalls": self.total_api_calls,
            "recentActivity": self.recent_activity,
            "stageCounts": self.stage_counts,
            "stagePercentages": {
                stage: js_round(count / total * 100) for stage, count in self.stage_counts.items()
            }
            if total
            else {},
            "averageInteractionsPerUser": js_round(total / self.total_users) if self.total_users else 0,
            "averageApiCallsPerInteraction": round(self.total_api_calls / total, 1) if total else 0,
        }


def compute_stats(
    interactions: List[Interaction],
    filtered: List[Interaction],
    no_ai_users: Iterable[str],
    now_ms: int,
    recent_window_hours: float = 24,
) -> DashboardStats:
    """Statistics over students who used the AI; known no-AI students are excluded."""
    excluded = set(no_ai_users)
    users_with_ai = {i.user_id for i in interactions if i.api_call_count} - excluded

    ai_interactions = [
        i
        for i in filtered
        if i.user_id not in excluded and (i.user_id in users_with_ai or i.api_call_count)
    ]

    stage_counts: Dict[str, int] = {}
    for i in ai_interactions:
        stage_counts[i.stage] = stage_counts.get(i.stage, 0) + 1

    window_ms = recent_window_hours * 60 * 60 * 1000
    recent = [i for i in ai_interactions if now_ms - i.timestamp < window_ms]

    return DashboardStats(
        total_interactions=len(ai_interactions),
        total_users=len(users_with_ai),
        total_api_calls=sum(i.api_call_count for i in ai_interactions),
        recent_activity=len(recent),
        stage_counts=stage_counts,
    )


def is_superseded(interaction: Interaction, user_interactions: List[Interaction]) -> bool:
    if interaction.stage not in SUPERSEDED_BY:
        return False
    final_stage, text_field = SUPERSEDED_BY[interaction.stage]
    text = getattr(interaction, text_field)
    if not text:
        return False
    return any(
        other.stage == final_stage and getattr(other, text_field) == text
        for other in user_interactions
    )


def most_complete_plot(plots: List[Interaction]) -> Optional[Interaction]:
    """The plot record with the longest conversation; ties go to the newest. Expects newest first."""
    best: Optional[Interaction] = None
    for plot in plots:
        if best is None:
            best = plot
            continue
        messages = plot.messages
        if messages is not None and (best.messages is None or len(messages) > len(best.messages)):
            best = plot
    return best


def group_by_stage(user_interactions: List[Interaction], is_no_ai: bool) -> Dict[str, List[Interaction]]:
    ordered = sorted(user_interactions, key=lambda i: i.timestamp, reverse=True)
    stages: Dict[str, List[Interaction]] = {}

    for interaction in ordered:
        # Without the AI, review is the only place a finished story shows up
        if is_no_ai and interaction.stage == "writing" and interaction.story:
            continue
        if is_superseded(interaction, ordered):
            continue
        stages.setdefault(interaction.stage, []).append(interaction)

    if "plot" in stages:
        best = most_complete_plot(stages["plot"])
        stages["plot"] = [best] if best else []

    return stages


def _text(value: Any) -> str:
    return value if isinstance(value, str) else ""


def article_summaries(interaction: Interaction) -> List[Dict[str, Any]]:
    """Written pieces on one record. Fields that are not text are not articles."""
    articles = []
    story = _text(interaction.story)
    if not story and isinstance(interaction.output, dict):
        story = _text(interaction.output.get("story"))
    if story:
        articles.append(
            {
                "type": "story",
                "text": story,
                "final": interaction.stage == "review",
                "characters": len(story),
                "words": count_words(story),
            }
        )
    review = _text(interaction.review)
    if review:
        articles.append(
            {
                "type": "bookReview",
                "text": review,
                "reviewType": interaction.review_type,
                "bookTitle": interaction.book_title,
                "bookCoverUrl": interaction.book_cover_url,
                "characters": len(review),
                "words": count_words(review),
            }
        )
    letter = _text(interaction.letter)
    if letter:
        articles.append(
            {
                "type": "letter",
                "text": letter,
                "recipient": interaction.recipient,
                "occasion": interaction.occasion,
                "characters": len(letter),
                "words": count_words(letter),
            }
        )
    return articles


@dataclass
class StudentView:
    user_id: str
    has_ai: bool
    story_count: int
    review_count: int
    interaction_count: int
    stages: Dict[str, List[Interaction]] = field(default_factory=dict)

    def to_json(self) -> Dict[str, Any]:
        return {
            "userId": self.user_id,
            "hasAi": self.has_ai,
            "storyCount": self.story_count,
            "reviewCount": self.review_count,
            "interactionCount": self.interaction_count,
            "stages": {
                stage: [
                    {**i.to_json(), "articles": article_summaries(i)} for i in records
                ]
                for stage, records in self.stages.items()
            },
        }


def build_student_view(
    user_id: str, user_interactions: List[Interaction], no_ai_users: Iterable[str]
) -> StudentView:
    has_ai = any(i.api_call_count for i in user_interactions)
    is_no_ai = user_id in set(no_ai_users) or not has_ai

    if is_no_ai:
        stories = [i for i in user_interactions if i.stage == "review" and i.story]
    else:
        stories = [i for i in user_interactions if i.story]
    reviews = [i for i in user_interactions if i.review or i.stage == "bookReviewComplete"]

    return StudentView(
        user_id=user_id,
        has_ai=not is_no_ai,
        story_count=len(stories),
        review_count=len(reviews),
        interaction_count=len(user_interactions),
        stages=group_by_stage(user_interactions, is_no_ai),
    )


def build_student_views(
    interactions: List[Interaction], filtered: List[Interaction], no_ai_users: Iterable[str]
) -> List[StudentView]:
    """One view per student seen in the log, in order of first appearance."""
    no_ai_users = list(no_ai_users)
    by_user: Dict[str, List[Interaction]] = {}
    for interaction in filtered:
        by_user.setdefault(interaction.user_id, []).append(interaction)

    user_ids = list(dict.fromkeys(i.user_id for i in interactions))
    return [build_student_view(user_id, by_user.get(user_id, []), no_ai_users) for user_id in user_ids]

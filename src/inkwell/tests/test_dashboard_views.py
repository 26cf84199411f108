from inkwell.dashboard.views import (
    build_student_view,
    build_student_views,
    compute_stats,
    filter_by_article_type,
    group_by_stage,
)
from inkwell.schemas.interaction import Interaction

CALL = {"endpoint": "/api/dify-plot-summary", "request": {}, "response": {}}


def record(user_id="stark", stage="plot", timestamp=1_000, **fields) -> Interaction:
    return Interaction.model_validate({"user_id": user_id, "stage": stage, "timestamp": timestamp, **fields})


def turns(n: int) -> dict:
    return {"messages": [{"role": "user" if i % 2 == 0 else "assistant", "content": f"turn {i}"} for i in range(n)]}


def test_review_supersedes_identical_writing_record():
    records = [
        record(stage="writing", timestamp=1, story="The dragon slept.", api_calls=[CALL]),
        record(stage="review", timestamp=2, story="The dragon slept.", api_calls=[CALL]),
    ]

    stages = group_by_stage(records, is_no_ai=False)

    assert list(stages) == ["review"]
    assert stages["review"][0].timestamp == 2


def test_writing_record_with_different_text_is_kept():
    records = [
        record(stage="writing", timestamp=1, story="First draft."),
        record(stage="review", timestamp=2, story="Final draft."),
    ]

    stages = group_by_stage(records, is_no_ai=False)

    assert set(stages) == {"writing", "review"}


def test_book_review_and_letter_final_versions_win():
    records = [
        record(stage="bookReviewWriting", timestamp=1, review="Loved it."),
        record(stage="bookReviewComplete", timestamp=2, review="Loved it."),
        record(stage="letterGame", timestamp=3, letter="Dear Gran,"),
        record(stage="letterComplete", timestamp=4, letter="Dear Gran,"),
    ]

    stages = group_by_stage(records, is_no_ai=False)

    assert set(stages) == {"bookReviewComplete", "letterComplete"}


def test_no_ai_students_never_show_writing_stories():
    records = [
        record(user_id="Rogers", stage="writing", timestamp=1, story="Draft."),
        record(user_id="Rogers", stage="review", timestamp=2, story="Final."),
    ]

    stages = group_by_stage(records, is_no_ai=True)

    assert list(stages) == ["review"]


def test_only_longest_plot_conversation_is_kept():
    records = [
        record(stage="plot", timestamp=1, input=turns(2)),
        record(stage="plot", timestamp=2, input=turns(6)),
        record(stage="plot", timestamp=3, input=turns(4)),
    ]

    stages = group_by_stage(records, is_no_ai=False)

    assert len(stages["plot"]) == 1
    assert stages["plot"][0].timestamp == 2


def test_plot_tie_goes_to_most_recent():
    records = [
        record(stage="plot", timestamp=1, input=turns(3)),
        record(stage="plot", timestamp=5, input=turns(3)),
    ]

    stages = group_by_stage(records, is_no_ai=False)

    assert [r.timestamp for r in stages["plot"]] == [5]


def test_stage_records_are_newest_first():
    records = [
        record(stage="character", timestamp=1),
        record(stage="character", timestamp=3),
        record(stage="character", timestamp=2),
    ]

    stages = group_by_stage(records, is_no_ai=False)

    assert [r.timestamp for r in stages["character"]] == [3, 2, 1]


def test_student_counts():
    ai_records = [
        record(stage="writing", timestamp=1, story="Draft.", api_calls=[CALL]),
        record(stage="review", timestamp=2, story="Final."),
        record(stage="bookReviewComplete", timestamp=3, review="Nice book."),
    ]
    view = build_student_view("stark", ai_records, ["Rogers"])

    assert view.has_ai is True
    assert view.story_count == 2
    assert view.review_count == 1
    assert view.interaction_count == 3

    no_ai_records = [
        record(user_id="Rogers", stage="writing", timestamp=1, story="Draft."),
        record(user_id="Rogers", stage="review", timestamp=2, story="Final."),
    ]
    view = build_student_view("Rogers", no_ai_records, ["Rogers"])

    assert view.has_ai is False
    assert view.story_count == 1


def test_article_type_filter():
    records = [
        record(stage="plot"),
        record(stage="bookSelection"),
        record(stage="letterPuzzle"),
        record(stage="custom", story="A story outside the usual stages."),
        record(stage="custom", letter="Dear friend,"),
    ]

    assert len(filter_by_article_type(records, "all")) == 5
    assert [r.stage for r in filter_by_article_type(records, "story")] == ["plot", "custom"]
    assert [r.stage for r in filter_by_article_type(records, "bookReview")] == ["bookSelection"]
    assert [r.stage for r in filter_by_article_type(records, "letter")] == ["letterPuzzle", "custom"]


def test_stats_exclude_students_without_ai():
    now = 100 * 60 * 60 * 1000
    day_ms = 24 * 60 * 60 * 1000
    records = [
        record(user_id="stark", stage="plot", timestamp=now - 1_000, api_calls=[CALL, CALL]),
        record(user_id="stark", stage="writing", timestamp=now - 2 * day_ms),
        record(user_id="halk", stage="plot", timestamp=now - 5_000, api_calls=[CALL]),
        record(user_id="Rogers", stage="writing", timestamp=now, api_calls=[CALL]),
        record(user_id="quiet", stage="writing", timestamp=now),
    ]

    stats = compute_stats(records, records, ["Rogers"], now_ms=now)
    payload = stats.to_json()

    assert stats.total_users == 2
    assert stats.total_interactions == 3
    assert stats.total_api_calls == 3
    assert stats.recent_activity == 2
    assert stats.stage_counts == {"plot": 2, "writing": 1}
    assert payload["stagePercentages"] == {"plot": 67, "writing": 33}
    assert payload["averageInteractionsPerUser"] == 2
    assert payload["averageApiCallsPerInteraction"] == 1.0


def test_empty_stats():
    payload = compute_stats([], [], [], now_ms=0).to_json()

    assert payload["totalInteractions"] == 0
    assert payload["stagePercentages"] == {}
    assert payload["averageInteractionsPerUser"] == 0
    assert payload["averageApiCallsPerInteraction"] == 0


def test_student_views_follow_first_appearance():
    records = [
        record(user_id="halk", stage="plot", timestamp=1),
        record(user_id="stark", stage="plot", timestamp=2),
        record(user_id="halk", stage="writing", timestamp=3, story="Tale.", api_calls=[CALL]),
    ]

    views = build_student_views(records, records, [])

    assert [v.user_id for v in views] == ["halk", "stark"]
    assert views[0].interaction_count == 2
    payload = views[0].to_json()
    assert payload["stages"]["writing"][0]["articles"][0]["words"] == 1


def test_non_text_fields_are_not_articles():
    records = [
        record(user_id="stark", stage="writing", timestamp=1, story=42, api_calls="several"),
        record(user_id="stark", stage="letterGame", timestamp=2, letter={"to": "Gran"}, api_calls=[CALL]),
    ]

    [view] = build_student_views(records, records, [])
    payload = view.to_json()

    assert payload["stages"]["writing"][0]["articles"] == []
    assert payload["stages"]["letterGame"][0]["articles"] == []
    assert compute_stats(records, records, [], now_ms=10).total_api_calls == 1

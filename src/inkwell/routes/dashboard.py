from typing import Optional

from litestar import get
from litestar.di import Provide

from inkwell.config import settings
from inkwell.dashboard.views import build_student_views, compute_stats, filter_by_article_type
from inkwell.database.store import InteractionStore, now_ms
from inkwell.dependencies import get_interaction_store


@get("/api/dashboard", dependencies={"store": Provide(get_interaction_store)})
async def dashboard(
    store: InteractionStore,
    user_id: Optional[str] = None,
    article_type: str = "all",
) -> dict:
    """Statistics and per-student views for the teacher. Clients poll this every refreshSeconds."""
    interactions = await store.list(user_id or None)
    filtered = filter_by_article_type(interactions, article_type)
    no_ai_users = list(settings.dashboard.no_ai_users)

    stats = compute_stats(
        interactions,
        filtered,
        no_ai_users,
        now_ms(),
        float(settings.dashboard.recent_window_hours),
    )
    students = build_student_views(interactions, filtered, no_ai_users)

    return {
        "stats": stats.to_json(),
        "students": [student.to_json() for student in students],
        "refreshSeconds": settings.dashboard.refresh_seconds,
    }

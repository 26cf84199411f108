import asyncio

from litestar import post, Request
from litestar.di import Provide
from litestar.status_codes import HTTP_200_OK
import httpx

from inkwell.config import settings
from inkwell.database.store import InteractionStore
from inkwell.dependencies import (
    ProviderKeys,
    get_dify_httpx_client,
    get_fal_httpx_client,
    get_interaction_store,
    get_provider_keys,
)
from inkwell.errors import ClientInputError
from inkwell.routes.conversation import summarize_book, user_or_default
from inkwell.routes.images import create_book_cover
from inkwell.schemas.gateway import BookReviewPrepareRequest, BookReviewPublishRequest
from inkwell.schemas.interaction import NewInteraction
from inkwell.story.book_review import assemble_review, check_draft, writing_tips


@post(
    "/api/book-review/prepare",
    status_code=HTTP_200_OK,
    dependencies={
        "dify_client": Provide(get_dify_httpx_client),
        "fal_client": Provide(get_fal_httpx_client),
        "keys": Provide(get_provider_keys),
    },
)
async def prepare_book_review(
    request: Request,
    data: BookReviewPrepareRequest,
    dify_client: httpx.AsyncClient,
    fal_client: httpx.AsyncClient,
    keys: ProviderKeys,
) -> dict:
    """
    Set up the writing space: cover and summary are fetched together.

    Each half degrades to an empty string on its own, so a failed cover never
    costs the student the summary and vice versa.
    """
    if not data.book_title or not data.book_title.strip():
        raise ClientInputError("Book title cannot be empty")

    user = user_or_default(data.user_id)
    cover, summary = await asyncio.gather(
        create_book_cover(fal_client, keys, data.book_title, request.logger, fallback=""),
        summarize_book(dify_client, keys, data.book_title, user, request.logger),
        return_exceptions=True,
    )

    if isinstance(cover, BaseException):
        request.logger.error(f"Book cover generation failed: {cover!r}")
        cover = ""
    if isinstance(summary, BaseException):
        request.logger.error(f"Book summary failed: {summary!r}")
        summary_text = ""
    else:
        summary_text = summary.answer

    return {
        "bookCoverUrl": cover,
        "bookSummary": summary_text,
        "tips": writing_tips(data.review_type),
    }


@post(
    "/api/book-review/publish",
    status_code=HTTP_200_OK,
    dependencies={"store": Provide(get_interaction_store)},
)
async def publish_book_review(
    request: Request, data: BookReviewPublishRequest, store: InteractionStore
) -> dict:
    draft = check_draft(
        data.sections,
        int(settings.book_review.min_words),
        settings.book_review.bypass_keyword,
    )
    if not draft.accepted:
        raise ClientInputError(
            f"Your review needs at least {settings.book_review.min_words} words",
            details={"wordCount": draft.word_count},
        )

    review = assemble_review(data.outline, data.sections)
    interaction = await store.add(
        NewInteraction(
            user_id=user_or_default(data.user_id),
            stage="bookReviewComplete",
            review=review,
            review_type=data.review_type,
            book_title=data.book_title,
            book_cover_url=data.book_cover_url or None,
        )
    )
    request.logger.info(
        f"Published {data.review_type} review of {data.book_title} for {interaction.user_id} "
        f"({draft.word_count} words)"
    )

    return {
        "success": True,
        "review": review,
        "wordCount": draft.word_count,
        "interaction": interaction.to_json(),
    }

from litestar import post, Request, Response
from litestar.background_tasks import BackgroundTask
from litestar.di import Provide
from litestar.status_codes import HTTP_200_OK
from litestar.types.protocols import Logger
import httpx

from inkwell.config import settings
from inkwell.database.store import InteractionStore, record_api_call
from inkwell.dependencies import (
    ProviderKeys,
    get_dify_httpx_client,
    get_interaction_store,
    get_provider_keys,
)
from inkwell.errors import ClientInputError
from inkwell.integrations.dify import DifyReply, chat_message
from inkwell.schemas.gateway import BookSelectionRequest, BookSummaryRequest, PlotSummaryRequest
from inkwell.story import prompts

conversation_dependencies = {
    "dify_client": Provide(get_dify_httpx_client),
    "store": Provide(get_interaction_store),
    "keys": Provide(get_provider_keys),
}


def user_or_default(user_id: str | None) -> str:
    return user_id or settings.dify.default_user


async def summarize_book(
    dify_client: httpx.AsyncClient,
    keys: ProviderKeys,
    book_title: str,
    user: str,
    logger: Logger,
    conversation_id: str | None = None,
) -> DifyReply:
    """Ask the book persona for a short summary of the book being reviewed."""
    api_key = keys.require_dify()
    logger.info(f"Requesting summary for book: {book_title}")
    return await chat_message(
        dify_client,
        api_key,
        settings.dify.apps.book_summary,
        prompts.book_summary_query(book_title),
        {"book_title": book_title},
        user,
        conversation_id,
    )


@post("/api/dify-book-selection", status_code=HTTP_200_OK, dependencies=conversation_dependencies)
async def book_selection(
    request: Request,
    data: BookSelectionRequest,
    dify_client: httpx.AsyncClient,
    store: InteractionStore,
    keys: ProviderKeys,
) -> Response:
    """Guide a student through picking the book they will review."""
    if not data.review_type or not data.book_title:
        raise ClientInputError("Review type and book title are required")

    api_key = keys.require_dify()
    user = user_or_default(data.user_id)

    request.logger.info(
        f"Book selection turn: review_type={data.review_type}, book_title={data.book_title}, "
        f"has_conversation_id={bool(data.conversation_id)}"
    )

    reply = await chat_message(
        dify_client,
        api_key,
        settings.dify.apps.book_selection,
        prompts.book_selection_query(data.review_type, data.book_title),
        {"review_type": data.review_type, "book_title": data.book_title},
        user,
        data.conversation_id,
    )

    return Response(
        content={
            "message": reply.answer,
            "conversationId": reply.conversation_id,
            "messageId": reply.message_id,
        },
        background=BackgroundTask(
            record_api_call,
            store,
            user,
            "bookSelection",
            "/api/dify-book-selection",
            {
                "reviewType": data.review_type,
                "bookTitle": data.book_title,
                "conversation_id": data.conversation_id,
            },
            {
                "answer": reply.answer,
                "conversation_id": reply.conversation_id,
                "message_id": reply.message_id,
            },
            request.logger,
        ),
    )


@post("/api/dify-plot-summary", status_code=HTTP_200_OK, dependencies=conversation_dependencies)
async def plot_summary(
    request: Request,
    data: PlotSummaryRequest,
    dify_client: httpx.AsyncClient,
    store: InteractionStore,
    keys: ProviderKeys,
) -> Response:
    """Summarize setting, conflict and goal from the plot brainstorming conversation."""
    api_key = keys.require_dify()

    history = [turn.model_dump() for turn in data.conversation_history]
    transcript = prompts.conversation_transcript(history)
    if not transcript.strip():
        raise ClientInputError("No conversation history provided")

    user = user_or_default(data.user_id)
    request.logger.info(
        f"Plot summary request: {len(history)} turns, {len(transcript)} characters, "
        f"has_conversation_id={bool(data.conversation_id)}"
    )

    reply = await chat_message(
        dify_client,
        api_key,
        settings.dify.apps.plot_summary,
        prompts.plot_summary_query(transcript),
        {"conversation": transcript},
        user,
        data.conversation_id,
    )

    return Response(
        content={"summary": reply.answer, "conversation_id": reply.conversation_id},
        background=BackgroundTask(
            record_api_call,
            store,
            user,
            "plot",
            "/api/dify-plot-summary",
            {"conversation_history": history, "conversation_id": data.conversation_id},
            {"summary": reply.answer, "conversation_id": reply.conversation_id},
            request.logger,
        ),
    )


@post("/api/dify-book-summary", status_code=HTTP_200_OK, dependencies=conversation_dependencies)
async def book_summary(
    request: Request,
    data: BookSummaryRequest,
    dify_client: httpx.AsyncClient,
    store: InteractionStore,
    keys: ProviderKeys,
) -> Response:
    if not data.book_title or not data.book_title.strip():
        raise ClientInputError("Book title cannot be empty")

    user = user_or_default(data.user_id)
    reply = await summarize_book(
        dify_client, keys, data.book_title, user, request.logger, data.conversation_id
    )

    return Response(
        content={"message": reply.answer, "conversationId": reply.conversation_id},
        background=BackgroundTask(
            record_api_call,
            store,
            user,
            "bookReviewLoading",
            "/api/dify-book-summary",
            {"bookTitle": data.book_title},
            {"message": reply.answer, "conversation_id": reply.conversation_id},
            request.logger,
        ),
    )

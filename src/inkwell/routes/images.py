import asyncio
from typing import Optional

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
    get_fal_httpx_client,
    get_interaction_store,
    get_provider_keys,
)
from inkwell.errors import ClientInputError, UpstreamError
from inkwell.integrations.fal import generate_image, placeholder_image_url
from inkwell.routes.conversation import user_or_default
from inkwell.schemas.gateway import BookCoverRequest, LetterReaderRequest
from inkwell.story import prompts

image_dependencies = {
    "fal_client": Provide(get_fal_httpx_client),
    "store": Provide(get_interaction_store),
    "keys": Provide(get_provider_keys),
}


async def create_book_cover(
    fal_client: httpx.AsyncClient,
    keys: ProviderKeys,
    book_title: str,
    logger: Logger,
    fallback: Optional[str] = None,
    deadline: Optional[float] = None,
) -> str:
    """
    Generate a front-facing 2:3 cover for the book under review.

    The whole provider call is abandoned after `deadline` seconds (fal.cover_timeout
    by default). Any upstream failure, timeout or empty result returns `fallback`;
    when that is None, a placeholder seeded by the title.
    """
    fal_key = keys.require_fal()
    if fallback is None:
        fallback = placeholder_image_url(settings.placeholder_image_url, book_title)
    if deadline is None:
        deadline = float(settings.fal.cover_timeout)
    logger.info(f"Generating book cover for: {book_title}")

    try:
        async with asyncio.timeout(deadline):
            url = await generate_image(
                fal_client,
                fal_key,
                settings.fal.models.illustration,
                {
                    "prompt": prompts.book_cover_prompt(book_title),
                    "num_images": 1,
                    "output_format": "jpeg",
                    "aspect_ratio": "2:3",
                    "sync_mode": True,
                },
                timeout=deadline,
            )
    except TimeoutError:
        logger.error(f"Book cover generation timed out after {deadline}s")
        return fallback
    except UpstreamError as e:
        logger.error(f"Book cover generation failed: {e.message} ({e.details})")
        return fallback

    return url or fallback


@post("/api/generate-book-cover", status_code=HTTP_200_OK, dependencies=image_dependencies)
async def book_cover(
    request: Request,
    data: BookCoverRequest,
    fal_client: httpx.AsyncClient,
    store: InteractionStore,
    keys: ProviderKeys,
) -> Response:
    if not data.book_title or not data.book_title.strip():
        raise ClientInputError("Book title cannot be empty")

    image_url = await create_book_cover(fal_client, keys, data.book_title, request.logger)

    return Response(
        content={"imageUrl": image_url},
        background=BackgroundTask(
            record_api_call,
            store,
            user_or_default(data.user_id),
            "bookReviewWriting",
            "/api/generate-book-cover (Fal.ai)",
            {"bookTitle": data.book_title},
            {"imageUrl": image_url},
            request.logger,
        ),
    )


@post("/api/generate-letter-reader", status_code=HTTP_200_OK, dependencies=image_dependencies)
async def letter_reader(
    request: Request,
    data: LetterReaderRequest,
    fal_client: httpx.AsyncClient,
    store: InteractionStore,
    keys: ProviderKeys,
) -> Response:
    """Picture the letter's recipient reading it. The letter game carries on without one."""
    fal_key = keys.require_fal()

    image_url = None
    try:
        image_url = await generate_image(
            fal_client,
            fal_key,
            settings.fal.models.letter_reader,
            {
                "prompt": prompts.letter_reader_prompt(data.recipient, data.occasion),
                "image_size": "square",
                "num_inference_steps": 30,
                "guidance_scale": 7.5,
            },
        )
    except UpstreamError as e:
        request.logger.error(f"Letter reader image failed: {e.message} ({e.details})")

    return Response(
        content={"imageUrl": image_url},
        background=BackgroundTask(
            record_api_call,
            store,
            user_or_default(data.user_id),
            "letterGame",
            "/api/generate-letter-reader (Fal.ai)",
            {"recipient": data.recipient, "occasion": data.occasion},
            {"imageUrl": image_url},
            request.logger,
        ),
    )

import json
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
    get_dify_httpx_client,
    get_fal_httpx_client,
    get_interaction_store,
    get_provider_keys,
)
from inkwell.errors import UpstreamError
from inkwell.integrations.dify import chat_message
from inkwell.integrations.fal import generate_image, placeholder_image_url
from inkwell.routes.conversation import user_or_default
from inkwell.schemas.gateway import StructureExamplesRequest
from inkwell.story import prompts
from inkwell.story.structure_parser import default_story, parse_structure_stories


async def ask_for_stories(
    dify_client: httpx.AsyncClient,
    api_key: str,
    query: str,
    inputs: dict,
    user: str,
    logger: Logger,
) -> str:
    """Example stories are illustrative, so an upstream failure yields an empty reply."""
    try:
        reply = await chat_message(
            dify_client, api_key, settings.dify.apps.structure_examples, query, inputs, user
        )
    except UpstreamError as e:
        logger.error(f"Structure example generation failed, using default story: {e.message} ({e.details})")
        return ""
    return reply.answer


async def illustrate_story(
    fal_client: httpx.AsyncClient,
    fal_key: str,
    character: Optional[dict],
    plot: Optional[dict],
    logger: Logger,
) -> str:
    seed = str((character or {}).get("name") or "story")
    placeholder = placeholder_image_url(settings.placeholder_image_url, seed)

    if not fal_key:
        logger.warning("FAL_KEY not configured, skipping image generation")
        return placeholder

    image_prompt = prompts.story_illustration_prompt(character, plot)
    logger.info(f"Image prompt: {image_prompt}")

    try:
        url = await generate_image(
            fal_client,
            fal_key,
            settings.fal.models.illustration,
            {
                "prompt": image_prompt,
                "num_images": 1,
                "output_format": "jpeg",
                "aspect_ratio": "16:9",
                "sync_mode": True,
            },
        )
    except UpstreamError as e:
        logger.error(f"Story illustration failed, using placeholder: {e.message} ({e.details})")
        return placeholder

    if not url:
        logger.warning("No image URL in response, using placeholder")
        return placeholder
    return url


@post(
    "/api/dify-structure-examples",
    status_code=HTTP_200_OK,
    dependencies={
        "dify_client": Provide(get_dify_httpx_client),
        "fal_client": Provide(get_fal_httpx_client),
        "store": Provide(get_interaction_store),
        "keys": Provide(get_provider_keys),
    },
)
async def structure_examples(
    request: Request,
    data: StructureExamplesRequest,
    dify_client: httpx.AsyncClient,
    fal_client: httpx.AsyncClient,
    store: InteractionStore,
    keys: ProviderKeys,
) -> Response:
    """Write example stories showing the student's character and plot in each narrative structure."""
    api_key = keys.require_dify()
    user = user_or_default(data.user_id)
    character, plot = data.character, data.plot
    inputs = {
        "character_info": json.dumps(character or {}, ensure_ascii=False),
        "plot_info": json.dumps(plot or {}, ensure_ascii=False),
    }

    if data.generate_all:
        request.logger.info("Generating examples for all structures")
        reply = await ask_for_stories(
            dify_client,
            api_key,
            prompts.all_structures_query(character, plot),
            inputs,
            user,
            request.logger,
        )
        stories = parse_structure_stories(reply, character, plot)
        request.logger.info(f"Structure examples parsed at stage: {stories.stage}")
        content = stories.to_response()
    else:
        structure_type = data.structure_type or ""
        structure_name = prompts.STRUCTURE_NAMES.get(structure_type, structure_type)
        request.logger.info(f"Generating example for structure: {structure_type}")

        reply = await ask_for_stories(
            dify_client,
            api_key,
            prompts.single_structure_query(structure_name, character, plot),
            {**inputs, "structure_type": structure_type},
            user,
            request.logger,
        )
        story = reply if reply.strip() else default_story(character, plot)
        image_url = await illustrate_story(fal_client, keys.fal_key, character, plot, request.logger)
        content = {"story": story, "imageUrl": image_url, "structure_type": data.structure_type}

    return Response(
        content=content,
        background=BackgroundTask(
            record_api_call,
            store,
            user,
            "structure",
            "/api/dify-structure-examples",
            data.model_dump(exclude_none=True),
            content,
            request.logger,
        ),
    )

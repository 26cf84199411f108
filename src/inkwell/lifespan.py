from contextlib import asynccontextmanager
from typing import AsyncGenerator
from litestar import Litestar

from inkwell.config import settings
from inkwell.database.store import create_interaction_store
from inkwell.dependencies import ProviderKeys
from inkwell.integrations.dify import create_dify_client
from inkwell.integrations.fal import create_fal_client


@asynccontextmanager
async def lifespan(app: Litestar) -> AsyncGenerator[None, None]:
    logger = app.logger
    if logger is None:
        raise RuntimeError("App logger is None")

    dify_httpx_client = create_dify_client(settings.dify.base_url, float(settings.dify.timeout))
    fal_httpx_client = create_fal_client(settings.fal.base_url, float(settings.fal.timeout))

    provider_keys = ProviderKeys(
        dify_api_key=settings.get("DIFY_API_KEY", ""),
        fal_key=settings.get("FAL_KEY", ""),
    )
    if not provider_keys.dify_api_key:
        logger.warning("DIFY_API_KEY is not set; conversational routes will fail")
    if not provider_keys.fal_key:
        logger.warning("FAL_KEY is not set; image routes will fail or use placeholders")

    interaction_store = await create_interaction_store(
        settings.interactions.backend, settings.interactions.db_path, logger
    )

    app.state.dify_httpx_client = dify_httpx_client
    app.state.fal_httpx_client = fal_httpx_client
    app.state.provider_keys = provider_keys
    app.state.interaction_store = interaction_store

    try:
        yield
    finally:
        await dify_httpx_client.aclose()
        await fal_httpx_client.aclose()
        await interaction_store.close()

from typing import Any, Optional

from litestar import delete, get, post, Request
from litestar.di import Provide
from litestar.status_codes import HTTP_200_OK
from pydantic import ValidationError

from inkwell.config import settings
from inkwell.database.store import InteractionStore
from inkwell.dependencies import get_interaction_store
from inkwell.errors import ClientInputError, UnauthorizedError
from inkwell.schemas.interaction import NewInteraction

store_dependencies = {"store": Provide(get_interaction_store)}


@get("/api/interactions", dependencies=store_dependencies)
async def list_interactions(store: InteractionStore, user_id: Optional[str] = None) -> dict:
    interactions = await store.list(user_id or None)
    return {"interactions": [i.to_json() for i in interactions]}


@post("/api/interactions", status_code=HTTP_200_OK, dependencies=store_dependencies)
async def create_interaction(request: Request, store: InteractionStore, data: dict[str, Any]) -> dict:
    """Append one stage event. Only user_id and stage are required; the rest is stored as sent."""
    if not data.get("user_id") or not data.get("stage"):
        raise ClientInputError("user_id and stage are required")

    try:
        record = NewInteraction.model_validate(data)
    except ValidationError as e:
        raise ClientInputError("Invalid interaction", details=e.errors(include_url=False, include_context=False)) from e

    interaction = await store.add(record)
    request.logger.info(f"Recorded {interaction.stage} interaction for {interaction.user_id}")
    return {"success": True, "interaction": interaction.to_json()}


@delete("/api/interactions", status_code=HTTP_200_OK, dependencies=store_dependencies)
async def clear_interactions(request: Request, store: InteractionStore, password: Optional[str] = None) -> dict:
    if password != settings.teacher.password:
        raise UnauthorizedError("Unauthorized")

    await store.clear()
    request.logger.warning("All interactions cleared")
    return {"success": True, "message": "All interactions cleared"}

from dataclasses import dataclass
from litestar.datastructures import State
import httpx

from inkwell.database.store import InteractionStore
from inkwell.errors import ConfigurationError


@dataclass
class ProviderKeys:
    """API keys for the external AI services. Either may be absent at boot."""

    dify_api_key: str = ""
    fal_key: str = ""

    def require_dify(self) -> str:
        if not self.dify_api_key:
            raise ConfigurationError("DIFY_API_KEY not configured")
        return self.dify_api_key

    def require_fal(self) -> str:
        if not self.fal_key:
            raise ConfigurationError("FAL_KEY not configured")
        return self.fal_key


async def get_dify_httpx_client(state: State) -> httpx.AsyncClient:
    return state.dify_httpx_client


async def get_fal_httpx_client(state: State) -> httpx.AsyncClient:
    return state.fal_httpx_client


async def get_interaction_store(state: State) -> InteractionStore:
    return state.interaction_store


async def get_provider_keys(state: State) -> ProviderKeys:
    return state.provider_keys

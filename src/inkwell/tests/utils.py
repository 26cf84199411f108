"""Test utilities and shared mocks."""

import json
from typing import Callable, Optional

import httpx
from litestar.datastructures import State
from litestar.testing import TestClient, create_test_client

from inkwell.app import route_handlers
from inkwell.database.store import InteractionStore, MemoryInteractionStore
from inkwell.dependencies import ProviderKeys
from inkwell.errors import exception_handlers


class MockLogger:
    """Mock logger that implements the Litestar Logger protocol and keeps error lines."""

    def __init__(self):
        self.errors: list[str] = []

    def debug(self, *args, **kwargs): pass
    def info(self, *args, **kwargs): pass
    def warning(self, *args, **kwargs): pass
    def warn(self, *args, **kwargs): pass
    def error(self, msg, *args, **kwargs): self.errors.append(str(msg))
    def exception(self, msg, *args, **kwargs): self.errors.append(str(msg))
    def critical(self, *args, **kwargs): pass
    def fatal(self, *args, **kwargs): pass
    def setLevel(self, *args, **kwargs): pass


Handler = Callable[[httpx.Request], httpx.Response]


def unreachable(request: httpx.Request) -> httpx.Response:
    raise AssertionError(f"Unexpected outbound call to {request.url}")


def dify_answer(answer: str, conversation_id: str = "conv-1", message_id: str = "msg-1") -> Handler:
    """Dify handler that answers every chat turn the same way and remembers the bodies it saw."""
    seen: list[dict] = []

    def handler(request: httpx.Request) -> httpx.Response:
        seen.append(json.loads(request.content))
        return httpx.Response(
            200, json={"answer": answer, "conversation_id": conversation_id, "id": message_id}
        )

    handler.seen = seen  # type: ignore[attr-defined]
    return handler


def gateway_client(
    dify_handler: Handler = unreachable,
    fal_handler: Handler = unreachable,
    store: Optional[InteractionStore] = None,
    dify_api_key: str = "test-dify-key",
    fal_key: str = "test-fal-key",
) -> TestClient:
    state = State(
        {
            "dify_httpx_client": httpx.AsyncClient(
                transport=httpx.MockTransport(dify_handler), base_url="http://dify.test/v1"
            ),
            "fal_httpx_client": httpx.AsyncClient(
                transport=httpx.MockTransport(fal_handler), base_url="http://fal.test"
            ),
            "interaction_store": store if store is not None else MemoryInteractionStore(),
            "provider_keys": ProviderKeys(dify_api_key=dify_api_key, fal_key=fal_key),
        }
    )
    return create_test_client(
        route_handlers=route_handlers,
        state=state,
        exception_handlers=exception_handlers,
    )

from dataclasses import dataclass
from typing import Any, Optional

import httpx

from inkwell.errors import UpstreamError


@dataclass
class DifyReply:
    answer: str
    conversation_id: Optional[str]
    message_id: Optional[str]
    raw: dict


def create_dify_client(base_url: str, timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
    )


async def chat_message(
    client: httpx.AsyncClient,
    api_key: str,
    app_id: str,
    query: str,
    inputs: dict[str, Any],
    user: str,
    conversation_id: Optional[str] = None,
) -> DifyReply:
    """
    Send one blocking chat turn to a Dify app.

    Args:
        client: The httpx AsyncClient pointed at the Dify API
        api_key: Dify API key, sent as a bearer token
        app_id: Which hosted app (persona) answers the turn
        query: The instruction shown to the app as the user's message
        inputs: App input variables
        user: End-user identifier Dify scopes conversations by
        conversation_id: Continue an existing conversation when given

    Returns:
        DifyReply with the answer text and conversation identifiers

    Raises:
        UpstreamError: Dify answered non-2xx (status propagated) or was unreachable
    """
    body: dict[str, Any] = {
        "inputs": inputs,
        "query": query,
        "response_mode": "blocking",
        "user": user,
        "app_id": app_id,
    }
    if conversation_id:
        body["conversation_id"] = conversation_id

    try:
        response = await client.post(
            "/chat-messages",
            json=body,
            headers={"Authorization": f"Bearer {api_key}"},
        )
    except httpx.TimeoutException as e:
        raise UpstreamError("Dify API timeout", details=str(e), status_code=504) from e
    except httpx.HTTPError as e:
        raise UpstreamError("Dify API unreachable", details=str(e)) from e

    if response.is_error:
        raise UpstreamError(
            f"Dify API error: {response.reason_phrase}",
            details=response.text,
            status_code=response.status_code,
        )

    data = response.json()
    answer = data.get("answer") or data.get("message") or data.get("text") or ""

    return DifyReply(
        answer=answer,
        conversation_id=data.get("conversation_id"),
        message_id=data.get("id"),
        raw=data,
    )

from typing import Any, Callable, List, Optional, Tuple
from urllib.parse import quote

import httpx

from inkwell.errors import UpstreamError


def create_fal_client(base_url: str, timeout: float) -> httpx.AsyncClient:
    return httpx.AsyncClient(
        base_url=base_url,
        timeout=timeout,
    )


def _first_image(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    images = data.get("images")
    if not isinstance(images, list) or not images:
        return None
    first = images[0]
    if isinstance(first, dict):
        url = first.get("url")
        return url if isinstance(url, str) and url else None
    if isinstance(first, str) and first:
        return first
    return None


def _image_object(data: Any) -> Optional[str]:
    if not isinstance(data, dict) or not isinstance(data.get("image"), dict):
        return None
    url = data["image"].get("url")
    return url if isinstance(url, str) and url else None


def _bare_url(data: Any) -> Optional[str]:
    if not isinstance(data, dict):
        return None
    url = data.get("url")
    return url if isinstance(url, str) and url else None


def _raw_string(data: Any) -> Optional[str]:
    return data if isinstance(data, str) and data else None


# Known response shapes, tried in order. New shapes go here.
IMAGE_URL_SHAPES: List[Tuple[str, Callable[[Any], Optional[str]]]] = [
    ("images", _first_image),
    ("image", _image_object),
    ("url", _bare_url),
    ("raw", _raw_string),
]


def extract_image_url(data: Any) -> Tuple[Optional[str], Optional[str]]:
    """Return (url, shape name) for the first matching response shape, or (None, None)."""
    for shape, extract in IMAGE_URL_SHAPES:
        url = extract(data)
        if url:
            return url, shape
    return None, None


def placeholder_image_url(base_url: str, seed: str) -> str:
    return f"{base_url}?seed={quote(seed)}"


async def generate_image(
    client: httpx.AsyncClient,
    fal_key: str,
    model: str,
    arguments: dict[str, Any],
    timeout: Optional[float] = None,
) -> Optional[str]:
    """
    Run a fal.ai model synchronously and return the generated image URL.

    Returns None when the response carries no recognizable image URL.
    Raises UpstreamError on non-2xx responses, timeouts and transport failures.
    """
    kwargs: dict[str, Any] = {}
    if timeout is not None:
        kwargs["timeout"] = timeout

    try:
        response = await client.post(
            model,
            json=arguments,
            headers={"Authorization": f"Key {fal_key}"},
            **kwargs,
        )
    except httpx.TimeoutException as e:
        raise UpstreamError(
            "Image generation timeout. Please try again.", details=str(e), status_code=504
        ) from e
    except httpx.HTTPError as e:
        raise UpstreamError("Image service unreachable", details=str(e)) from e

    if response.is_error:
        raise UpstreamError(
            f"Image generation failed ({response.status_code})",
            details=response.text,
            status_code=response.status_code,
        )

    try:
        data = response.json()
    except ValueError:
        data = response.text

    url, _ = extract_image_url(data)
    return url

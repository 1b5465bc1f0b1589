"""HTTP client for the remote food image classifier.

Single attempt, no retry: any failure is mapped to a typed
ClassificationError so the adapter can fall back to the local
heuristic. The endpoint is expected to answer like the Hugging Face
image-classification inference API, i.e. a JSON list of
``{"label": str, "score": float}`` or ``{"error": str}``.
"""

from __future__ import annotations

import time
from typing import Any, Optional

import httpx
import structlog

from ..domain.shared.errors import ClassificationError

__all__ = [
    "ClassifierCallError",
    "ClassifierTimeoutError",
    "ClassifierTransientError",
    "ClassifierResponseError",
    "call_food_classifier",
]

logger = structlog.get_logger(__name__)


class ClassifierCallError(ClassificationError):
    """Generic classifier call failure (non-success status, bad input)."""


class ClassifierTimeoutError(ClassifierCallError):
    """Timeout while waiting for the classifier."""


class ClassifierTransientError(ClassifierCallError):
    """Transport error, rate limit or 5xx."""


class ClassifierResponseError(ClassifierCallError):
    """Response body is an error payload or not the expected shape."""


async def call_food_classifier(
    *,
    image_bytes: bytes,
    endpoint_url: str,
    api_token: Optional[str] = None,
    timeout_s: float = 10.0,
    content_type: Optional[str] = None,
    client: Optional[httpx.AsyncClient] = None,
) -> Any:
    """Post the image and return the decoded JSON body.

    The image is sent as multipart form field ``image``. A caller-owned
    ``client`` is used as is (tests pass one with a MockTransport);
    otherwise a client is created and closed here.

    Raises:
        ClassifierTimeoutError: Request timed out
        ClassifierTransientError: Transport failure, 429 or 5xx
        ClassifierCallError: Other non-success status
        ClassifierResponseError: Body is not JSON
    """
    start = time.perf_counter()
    status: Optional[int] = None
    headers = {"Accept": "application/json"}
    if api_token:
        headers["Authorization"] = f"Bearer {api_token}"
    files = {"image": ("image", image_bytes, content_type or "application/octet-stream")}

    http = client if client is not None else httpx.AsyncClient(timeout=httpx.Timeout(timeout_s))
    try:
        try:
            response = await http.post(
                endpoint_url,
                files=files,
                headers=headers,
                timeout=timeout_s,
            )
        except httpx.TimeoutException as exc:
            raise ClassifierTimeoutError(f"timeout:{exc}") from exc
        except httpx.TransportError as exc:
            raise ClassifierTransientError(f"transport:{exc}") from exc

        status = response.status_code
        if status == 429 or 500 <= status < 600:
            raise ClassifierTransientError(f"HTTP_{status}")
        if not 200 <= status < 300:
            raise ClassifierCallError(f"HTTP_{status}")

        try:
            return response.json()
        except ValueError as exc:
            raise ClassifierResponseError("INVALID_JSON") from exc
    finally:
        if client is None:
            await http.aclose()
        logger.info(
            "classifier.call",
            elapsed_ms=int((time.perf_counter() - start) * 1000.0),
            status=status,
            image_bytes=len(image_bytes),
        )

"""Category source adapters.

Variants of the CategorySource port:

* HeuristicCategorySource: decode → color profile → category estimate
* RemoteClassifierSource: remote food classifier over HTTP
* FallbackCategorySource: one primary attempt, fallback on any
  ClassificationError (no retry, no backoff)

``get_active_source`` picks the variant from ``CLASSIFIER_MODE``. Sources
are cheap and created per evaluation, so the ``last_*`` bookkeeping
attributes are never shared between requests.
"""

from __future__ import annotations

import asyncio
from typing import Any, List, Optional

import httpx
import structlog
from pydantic import ValidationError

from ..domain.evaluation.category_estimator import estimate_categories
from ..domain.evaluation.color_profiler import profile_colors
from ..domain.evaluation.models import CategoryGuess, DishImage
from ..domain.evaluation.ports import CategorySource
from ..domain.shared.errors import ClassificationError
from ..infrastructure.config import (
    get_classifier_endpoint,
    get_classifier_mode,
    get_classifier_timeout_s,
    get_classifier_token,
)
from ..metrics.dish_evaluation import fallback_count, record_fallback, time_evaluation
from .classifier_client import (
    ClassifierCallError,
    ClassifierResponseError,
    ClassifierTimeoutError,
    ClassifierTransientError,
    call_food_classifier,
)
from .image_decoder import decode_rgba

logger = structlog.get_logger(__name__)


class HeuristicCategorySource:
    """Local color heuristic; always yields at least one guess.

    Decoding and color profiling are CPU bound and run in the default
    executor so large uploads do not stall the event loop.
    """

    def name(self) -> str:
        return "heuristic"

    async def classify(self, image: DishImage) -> List[CategoryGuess]:
        with time_evaluation(phase="classify", source=self.name()):
            loop = asyncio.get_running_loop()
            return await loop.run_in_executor(None, _heuristic_categories, image)


def _heuristic_categories(image: DishImage) -> List[CategoryGuess]:
    if image.pixels is not None:
        pixels = image.pixels
    else:
        pixels = decode_rgba(image.raw or b"")
    return estimate_categories(profile_colors(pixels))


def parse_classifier_payload(payload: Any) -> List[CategoryGuess]:
    """Validate a classifier response body into category guesses.

    Raises:
        ClassifierResponseError: error payload, wrong shape, empty list
            or an item without a usable label/score
    """
    if isinstance(payload, dict) and "error" in payload:
        raise ClassifierResponseError(f"ERROR_PAYLOAD:{payload['error']}")
    if not isinstance(payload, list):
        raise ClassifierResponseError("UNEXPECTED_SHAPE")
    if not payload:
        raise ClassifierResponseError("EMPTY_RESULT")
    guesses: List[CategoryGuess] = []
    for item in payload:
        if not isinstance(item, dict):
            raise ClassifierResponseError("INVALID_ITEM")
        try:
            guesses.append(
                CategoryGuess.model_validate(
                    {"label": item.get("label"), "score": item.get("score")}
                )
            )
        except ValidationError as exc:
            raise ClassifierResponseError(f"INVALID_ITEM:{exc.error_count()}") from exc
    return guesses


class RemoteClassifierSource:
    """
    Remote classifier adapter.

    Needs the original upload bytes; a pixel-only image raises
    ``ClassifierCallError("IMAGE_BYTES_MISSING")``.
    """

    def __init__(
        self,
        *,
        endpoint_url: Optional[str] = None,
        api_token: Optional[str] = None,
        timeout_s: Optional[float] = None,
        client: Optional[httpx.AsyncClient] = None,
    ) -> None:
        self.endpoint_url = endpoint_url or get_classifier_endpoint()
        self.api_token = api_token if api_token is not None else get_classifier_token()
        self.timeout_s = timeout_s if timeout_s is not None else get_classifier_timeout_s()
        self.client = client

    def name(self) -> str:
        return "remote"

    async def classify(self, image: DishImage) -> List[CategoryGuess]:
        with time_evaluation(phase="classify", source=self.name()):
            if not image.raw:
                raise ClassifierCallError("IMAGE_BYTES_MISSING")
            payload = await call_food_classifier(
                image_bytes=image.raw,
                endpoint_url=self.endpoint_url,
                api_token=self.api_token,
                timeout_s=self.timeout_s,
                content_type=image.content_type,
                client=self.client,
            )
            return parse_classifier_payload(payload)


def fallback_reason_code(exc: ClassificationError) -> str:
    """Low-cardinality reason tag for metrics."""
    if isinstance(exc, ClassifierTimeoutError):
        return "TIMEOUT"
    if isinstance(exc, ClassifierTransientError):
        return "TRANSIENT"
    if isinstance(exc, ClassifierResponseError):
        return "RESPONSE"
    if isinstance(exc, ClassifierCallError):
        return "CALL_ERR"
    return "CLASSIFICATION"


class FallbackCategorySource:
    """
    Primary source with synchronous fallback.

    Exactly one primary attempt. A ClassificationError from the primary
    records a fallback metric, sets ``last_fallback_reason`` and hands
    the same image to the fallback source. Errors of the fallback source
    propagate.
    """

    def __init__(self, primary: CategorySource, fallback: CategorySource) -> None:
        self.primary = primary
        self.fallback = fallback
        self.last_fallback_reason: Optional[str] = None
        self.last_source: Optional[str] = None

    def name(self) -> str:
        return self.primary.name()

    async def classify(self, image: DishImage) -> List[CategoryGuess]:
        self.last_fallback_reason = None
        try:
            categories = await self.primary.classify(image)
        except ClassificationError as exc:
            self.last_fallback_reason = f"{fallback_reason_code(exc)}:{exc}"
            record_fallback(fallback_reason_code(exc), source=self.primary.name())
            logger.warning(
                "classifier.fallback",
                primary=self.primary.name(),
                fallback=self.fallback.name(),
                reason=self.last_fallback_reason,
                fallbacks_total=fallback_count(source=self.primary.name()),
            )
        else:
            self.last_source = self.primary.name()
            return categories

        categories = await self.fallback.classify(image)
        self.last_source = self.fallback.name()
        return categories


def resolved_source_name(source: CategorySource) -> str:
    """Name of the variant that actually produced the last categories."""
    last = getattr(source, "last_source", None)
    return last if isinstance(last, str) and last else source.name()


def get_active_source(client: Optional[httpx.AsyncClient] = None) -> CategorySource:
    """Build the category source selected by ``CLASSIFIER_MODE``.

    ``remote`` chains the remote classifier with the heuristic fallback;
    anything else (including unset) uses the heuristic alone.
    """
    mode = get_classifier_mode()
    if mode == "remote":
        return FallbackCategorySource(
            primary=RemoteClassifierSource(client=client),
            fallback=HeuristicCategorySource(),
        )
    return HeuristicCategorySource()

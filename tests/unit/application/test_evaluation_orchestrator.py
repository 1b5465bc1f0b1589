from typing import Callable
from unittest.mock import AsyncMock, MagicMock

import pytest

from cookscore.application.evaluation.orchestrator import DishEvaluationOrchestrator
from cookscore.application.history.recorder import HistoryRecorder
from cookscore.domain.evaluation.models import CategoryGuess, DishImage, PixelBuffer
from cookscore.domain.evaluation.phrase_catalog import JA_CATALOG
from cookscore.domain.evaluation.service import DishEvaluationService
from cookscore.domain.shared.errors import ClassificationError, ImageDecodeError
from cookscore.inference.adapter import HeuristicCategorySource
from cookscore.infrastructure.persistence.in_memory.history_repository import (
    InMemoryHistoryRepository,
)
from cookscore.metrics.dish_evaluation import counter_value, snapshot


def _source(name: str = "remote", result=None, error: Exception | None = None) -> MagicMock:
    source = MagicMock()
    source.name.return_value = name
    source.last_source = None
    if error is not None:
        source.classify = AsyncMock(side_effect=error)
    else:
        source.classify = AsyncMock(return_value=result or [])
    return source


@pytest.fixture
def recorder() -> HistoryRecorder:
    return HistoryRecorder(InMemoryHistoryRepository())


@pytest.mark.asyncio
async def test_evaluate_with_categories(fixed_random: Callable, recorder: HistoryRecorder) -> None:
    source = _source(result=[CategoryGuess(label="vegetables", score=1.0)])
    orchestrator = DishEvaluationOrchestrator(
        category_source=source,
        service=DishEvaluationService(rng=fixed_random()),
        history=recorder,
    )
    image = DishImage.from_bytes(b"img", content_type="image/jpeg")

    assessment = await orchestrator.evaluate(image)

    source.classify.assert_awaited_once_with(image)
    assert assessment.result.score == 70
    assert assessment.source == "remote"
    assert assessment.fallback is False
    assert orchestrator.last_history_item is not None
    assert orchestrator.last_history_item.score == 70
    assert [i.id for i in await recorder.list()] == [orchestrator.last_history_item.id]

    snap = snapshot()
    assert counter_value(snap, "dish_evaluation_requests_total", phase="evaluate", status="completed") == 1
    assert counter_value(snap, "dish_evaluation_fallback_total") == 0


@pytest.mark.asyncio
async def test_source_name_follows_fallback_chain(fixed_random: Callable) -> None:
    source = _source(result=[CategoryGuess(label="rice", score=0.5)])
    source.last_source = "heuristic"
    orchestrator = DishEvaluationOrchestrator(
        category_source=source, service=DishEvaluationService(rng=fixed_random())
    )
    assessment = await orchestrator.evaluate(DishImage.from_bytes(b"img"))
    assert assessment.source == "heuristic"


@pytest.mark.asyncio
@pytest.mark.parametrize(
    "error",
    [ImageDecodeError("DECODE_FAILED:bad"), ClassificationError("boom")],
)
async def test_failures_degrade_to_fallback(
    fixed_random: Callable, recorder: HistoryRecorder, error: Exception
) -> None:
    orchestrator = DishEvaluationOrchestrator(
        category_source=_source(name="heuristic", error=error),
        service=DishEvaluationService(rng=fixed_random([20])),
        history=recorder,
    )

    assessment = await orchestrator.evaluate(DishImage.from_bytes(b"broken"))

    assert assessment.fallback is True
    assert assessment.source == "fallback"
    assert assessment.result.score == 80
    assert assessment.notice == JA_CATALOG.fallback_notice
    assert assessment.categories == []
    assert assessment.nutrients is None
    # fallback results are recorded like any other
    assert orchestrator.last_history_item is not None
    assert orchestrator.last_history_item.score == 80
    assert counter_value(
        snapshot(), "dish_evaluation_fallback_total", reason=type(error).__name__, source="fallback"
    ) == 1


@pytest.mark.asyncio
async def test_unexpected_errors_propagate(fixed_random: Callable) -> None:
    orchestrator = DishEvaluationOrchestrator(
        category_source=_source(error=RuntimeError("bug")),
        service=DishEvaluationService(rng=fixed_random()),
    )
    with pytest.raises(RuntimeError):
        await orchestrator.evaluate(DishImage.from_bytes(b"img"))
    assert counter_value(
        snapshot(), "dish_evaluation_requests_total", phase="evaluate", status="failed"
    ) == 1


@pytest.mark.asyncio
async def test_heuristic_end_to_end_without_history(fixed_random: Callable) -> None:
    orchestrator = DishEvaluationOrchestrator(
        category_source=HeuristicCategorySource(),
        service=DishEvaluationService(rng=fixed_random()),
    )
    pixels = PixelBuffer([200, 50, 50, 255] * 50 + [0, 200, 0, 255] * 50)
    assessment = await orchestrator.evaluate(DishImage.from_pixels(pixels))

    assert [c.label for c in assessment.categories] == ["vegetables", "meat_or_tomato"]
    # 50 + 20 * 0.5 + 15 * 0.5 = 67.5 -> 68
    assert assessment.result.score == 68
    assert assessment.source == "heuristic"
    assert orchestrator.last_history_item is None


@pytest.mark.asyncio
async def test_garbage_upload_with_real_heuristic(fixed_random: Callable) -> None:
    orchestrator = DishEvaluationOrchestrator(
        category_source=HeuristicCategorySource(),
        service=DishEvaluationService(rng=fixed_random([0])),
    )
    assessment = await orchestrator.evaluate(DishImage.from_bytes(b"not an image"))
    assert assessment.fallback is True
    assert assessment.result.score == 60

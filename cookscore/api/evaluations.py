"""REST endpoints for dish evaluation and history."""

from __future__ import annotations

import logging
from typing import List, Optional

from fastapi import APIRouter, Depends, File, HTTPException, UploadFile
from pydantic import BaseModel, ConfigDict, Field

from ..application.evaluation.orchestrator import DishEvaluationOrchestrator
from ..application.history.recorder import HistoryRecorder
from ..domain.evaluation.models import (
    CategoryGuess,
    DishImage,
    DishSummary,
    NutrientProfile,
)
from ..domain.evaluation.phrase_catalog import get_catalog
from ..domain.evaluation.service import DishEvaluationService
from ..domain.history.models import HistoryItem
from ..inference.adapter import get_active_source
from ..infrastructure.config import (
    get_feedback_locale,
    get_history_max_items,
    get_max_upload_bytes,
)
from ..infrastructure.persistence.factory import get_history_repository

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/v1", tags=["evaluation"])


class EvaluationResponse(BaseModel):
    """Evaluation payload returned to the client."""

    model_config = ConfigDict(populate_by_name=True)

    score: int
    good_points: List[str] = Field(alias="goodPoints")
    improvements: List[str]
    categories: List[CategoryGuess]
    nutrients: Optional[NutrientProfile] = None
    dish: Optional[DishSummary] = None
    source: str
    fallback: bool
    notice: Optional[str] = None
    history_item: Optional[HistoryItem] = Field(None, alias="historyItem")


class HistoryResponse(BaseModel):
    items: List[HistoryItem]


class ClearHistoryResponse(BaseModel):
    cleared: bool


def get_history_recorder() -> HistoryRecorder:
    return HistoryRecorder(
        repository=get_history_repository(),
        max_items=get_history_max_items(),
    )


def get_orchestrator(
    history: HistoryRecorder = Depends(get_history_recorder),
) -> DishEvaluationOrchestrator:
    """One orchestrator (and category source) per request."""
    return DishEvaluationOrchestrator(
        category_source=get_active_source(),
        service=DishEvaluationService(catalog=get_catalog(get_feedback_locale())),
        history=history,
    )


def validate_upload(file: UploadFile) -> None:
    """Reject anything that is not declared as an image.

    Raises:
        HTTPException: 400 for a non-image content type
    """
    content_type = file.content_type or ""
    if not content_type.startswith("image/"):
        raise HTTPException(
            status_code=400,
            detail="Invalid file type. Please upload an image file.",
        )


@router.post("/evaluations", response_model=EvaluationResponse)
async def create_evaluation(
    file: UploadFile = File(...),
    orchestrator: DishEvaluationOrchestrator = Depends(get_orchestrator),
) -> EvaluationResponse:
    validate_upload(file)
    data = await file.read()
    if not data:
        raise HTTPException(status_code=400, detail="Empty file")
    max_bytes = get_max_upload_bytes()
    if len(data) > max_bytes:
        raise HTTPException(
            status_code=413,
            detail=f"File too large. Maximum size: {max_bytes // (1024 * 1024)}MB",
        )

    logger.info(
        "Evaluating upload",
        extra={"filename": file.filename, "size": len(data), "content_type": file.content_type},
    )
    assessment = await orchestrator.evaluate(
        DishImage.from_bytes(data, content_type=file.content_type)
    )
    return EvaluationResponse(
        score=assessment.result.score,
        good_points=assessment.result.good_points,
        improvements=assessment.result.improvements,
        categories=assessment.categories,
        nutrients=assessment.nutrients,
        dish=assessment.dish,
        source=assessment.source,
        fallback=assessment.fallback,
        notice=assessment.notice,
        history_item=orchestrator.last_history_item,
    )


@router.get("/history", response_model=HistoryResponse)
async def list_history(
    history: HistoryRecorder = Depends(get_history_recorder),
) -> HistoryResponse:
    return HistoryResponse(items=await history.list())


@router.delete("/history", response_model=ClearHistoryResponse)
async def clear_history(
    history: HistoryRecorder = Depends(get_history_recorder),
) -> ClearHistoryResponse:
    await history.clear()
    return ClearHistoryResponse(cleared=True)

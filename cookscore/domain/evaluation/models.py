"""
Domain models for dish evaluation.

Value objects flowing through the evaluation engine: pixel input,
category guesses, score/feedback result and nutrient profile.
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, List, Optional, Sequence, Union

import numpy as np
from pydantic import BaseModel, ConfigDict, Field, field_validator


class InvalidPixelBufferError(ValueError):
    """Pixel samples are not a flat RGBA sequence of 0-255 integers."""


PixelSource = Union[bytes, bytearray, memoryview, Sequence[int], "np.ndarray[Any, Any]"]


class PixelBuffer:
    """
    Immutable flat RGBA sample buffer.

    Layout is ``[r0, g0, b0, a0, r1, g1, ...]`` exactly like the canvas
    ``ImageData.data`` array; length is always ``4 * total_pixels``.

    Example:
        >>> buf = PixelBuffer([0, 200, 0, 255] * 100)
        >>> buf.total_pixels
        100
    """

    __slots__ = ("_data",)

    def __init__(self, samples: PixelSource, *, copy: bool = True) -> None:
        """
        Args:
            samples: Flat or shaped RGBA samples
            copy: With False a uint8 ndarray is adopted without copying;
                the caller must not write to it afterwards
        """
        if isinstance(samples, (bytes, bytearray, memoryview)):
            # bytes() copies only mutable inputs
            data = np.frombuffer(bytes(samples), dtype=np.uint8)
        else:
            raw = np.asarray(samples).reshape(-1)
            if raw.dtype != np.uint8 and raw.size:
                if not np.issubdtype(raw.dtype, np.integer):
                    raise InvalidPixelBufferError(
                        f"Pixel samples must be integers, got {raw.dtype}"
                    )
                if int(raw.min()) < 0 or int(raw.max()) > 255:
                    raise InvalidPixelBufferError("Pixel samples must be in [0, 255]")
            if raw.dtype == np.uint8 and not copy:
                data = raw
            else:
                data = raw.astype(np.uint8, copy=True)
        if data.size % 4 != 0:
            raise InvalidPixelBufferError(
                f"RGBA buffer length must be a multiple of 4, got {data.size}"
            )
        data.setflags(write=False)
        self._data = data

    @property
    def total_pixels(self) -> int:
        return int(self._data.size // 4)

    def channels(self) -> "np.ndarray[Any, Any]":
        """Read-only ``(total_pixels, 4)`` view of the samples."""
        return self._data.reshape(-1, 4)

    def __len__(self) -> int:
        return int(self._data.size)

    def __repr__(self) -> str:
        return f"PixelBuffer(total_pixels={self.total_pixels})"


@dataclass(frozen=True, slots=True)
class ColorCounts:
    """Per-bucket pixel counts produced by the color profiler."""

    green: int
    red: int
    brown: int
    yellow: int
    total_pixels: int


@dataclass(frozen=True)
class DishImage:
    """
    Engine input: raw upload bytes, decoded pixels, or both.

    Remote classifiers need ``raw``; the heuristic uses ``pixels`` when
    present and decodes ``raw`` otherwise.
    """

    raw: Optional[bytes] = None
    pixels: Optional[PixelBuffer] = None
    content_type: Optional[str] = None

    def __post_init__(self) -> None:
        if self.raw is None and self.pixels is None:
            raise ValueError("DishImage requires raw bytes or a PixelBuffer")

    @classmethod
    def from_bytes(cls, raw: bytes, content_type: Optional[str] = None) -> DishImage:
        return cls(raw=raw, content_type=content_type)

    @classmethod
    def from_pixels(cls, pixels: PixelBuffer) -> DishImage:
        return cls(pixels=pixels)


class CategoryGuess(BaseModel):
    """
    Single labeled food category with relative confidence.

    Produced either by the color heuristic or by the remote classifier;
    consumers never know which. Duplicate labels in a sequence are
    allowed and accumulate weight.

    Example:
        >>> guess = CategoryGuess(label="vegetables", score=0.42)
        >>> guess.score
        0.42
    """

    model_config = ConfigDict(frozen=True)

    label: str = Field(..., min_length=1, description="Category label")
    score: float = Field(
        ..., ge=0.0, le=1.0, allow_inf_nan=False, description="Relative confidence"
    )

    @field_validator("label")
    @classmethod
    def not_blank(cls, v: str) -> str:
        """Ensure label is not just whitespace."""
        if not v.strip():
            raise ValueError("Category label cannot be blank")
        return v


class EvaluationResult(BaseModel):
    """
    Score plus feedback lists for one evaluated dish.

    Serialised with the camelCase keys of the persisted history record.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    score: int = Field(..., ge=0, le=100, description="Nutrition score")
    good_points: List[str] = Field(default_factory=list, alias="goodPoints")
    improvements: List[str] = Field(default_factory=list)


class NutrientProfile(BaseModel):
    """Five-axis nutrient estimate, every axis in [0, 100]."""

    model_config = ConfigDict(frozen=True)

    protein: float = Field(..., ge=0.0, le=100.0)
    carb: float = Field(..., ge=0.0, le=100.0)
    fat: float = Field(..., ge=0.0, le=100.0)
    vitamin: float = Field(..., ge=0.0, le=100.0)
    mineral: float = Field(..., ge=0.0, le=100.0)


class Detection(BaseModel):
    """Category shown to the user with a whole-percent confidence."""

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    label: str
    confidence_pct: int = Field(..., ge=0, alias="confidencePct")


class DishSummary(BaseModel):
    """
    Presentation summary of the detected categories.

    Attributes:
        dish_name: Label of the primary (first) guess
        ingredients: Labels of the first five guesses
        detections: First three guesses with percent confidence
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    dish_name: str = Field(..., alias="dishName")
    ingredients: List[str] = Field(default_factory=list)
    detections: List[Detection] = Field(default_factory=list)


class DishAssessment(BaseModel):
    """
    Complete outcome of one evaluation pass.

    ``nutrients`` and ``dish`` are None on the fallback (score-only)
    path, where no categories were derived.
    """

    model_config = ConfigDict(frozen=True, populate_by_name=True)

    result: EvaluationResult
    categories: List[CategoryGuess] = Field(default_factory=list)
    nutrients: Optional[NutrientProfile] = None
    dish: Optional[DishSummary] = None
    source: str = Field(..., description="Category source that produced the categories")
    fallback: bool = False
    notice: Optional[str] = None

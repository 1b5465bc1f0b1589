"""
Category source port (interface).

A category source turns an uploaded dish image into category guesses.
Implementations live in the inference package: the local color
heuristic, the remote classifier and the fallback chain combining them.
Downstream scoring never knows which one answered.
"""

from __future__ import annotations

from typing import List, Protocol

from .models import CategoryGuess, DishImage


class CategorySource(Protocol):
    """
    Interface for category providers.

    Raises:
        ClassificationError: The source could not classify the image
        ImageDecodeError: The image bytes could not be decoded
    """

    def name(self) -> str:  # identifier for logging/metrics
        ...

    async def classify(self, image: DishImage) -> List[CategoryGuess]: ...

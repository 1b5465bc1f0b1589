"""Color-ratio → category guesses (the local heuristic classifier)."""

from __future__ import annotations

from typing import List, Tuple

from .models import CategoryGuess, ColorCounts

# A bucket must cover strictly more than this share of the image.
SALIENCE_THRESHOLD = 0.10

DEFAULT_GUESS = CategoryGuess(label="mixed_dish", score=0.5)

# Emission order is fixed: green, red, brown, yellow.
BUCKET_LABELS: Tuple[Tuple[str, str], ...] = (
    ("green", "vegetables"),
    ("red", "meat_or_tomato"),
    ("brown", "bread_or_meat"),
    ("yellow", "egg_or_cheese"),
)


def estimate_categories(counts: ColorCounts) -> List[CategoryGuess]:
    """Turn bucket counts into guesses scored by pixel share.

    Never returns an empty list: with no salient bucket (or no pixels at
    all) the single default ``mixed_dish`` guess is returned.
    """
    total = counts.total_pixels
    if total <= 0:
        return [DEFAULT_GUESS]

    guesses: List[CategoryGuess] = []
    for bucket, label in BUCKET_LABELS:
        ratio = getattr(counts, bucket) / total
        if ratio > SALIENCE_THRESHOLD:
            guesses.append(CategoryGuess(label=label, score=ratio))

    if not guesses:
        return [DEFAULT_GUESS]
    return guesses

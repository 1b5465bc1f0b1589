"""Shared fixtures.

Every test starts with a clean classifier/history environment, empty
metrics and no cached history repository.
"""

from __future__ import annotations

import io
import os
from pathlib import Path
from typing import Callable, Generator, Iterator, Sequence, Tuple

import pytest
from dotenv import load_dotenv
from PIL import Image

from cookscore.infrastructure.persistence.factory import reset_repository
from cookscore.metrics.dish_evaluation import reset_all

env_test_path = Path(__file__).parent.parent / ".env.test"
if env_test_path.exists():
    load_dotenv(env_test_path, override=True)

_ENV_KEYS = (
    "CLASSIFIER_MODE",
    "CLASSIFIER_ENDPOINT_URL",
    "CLASSIFIER_API_TOKEN",
    "CLASSIFIER_TIMEOUT_S",
    "FEEDBACK_LOCALE",
    "HISTORY_BACKEND",
    "HISTORY_MAX_ITEMS",
    "MONGODB_URI",
)


@pytest.fixture(autouse=True)
def _clean_state(monkeypatch: pytest.MonkeyPatch) -> Generator[None, None, None]:
    """Env vars that select adapters/backends are cleared before each test."""
    for key in _ENV_KEYS:
        if key in os.environ:
            monkeypatch.delenv(key)
    reset_all()
    reset_repository()
    yield
    reset_repository()


class FixedRandom:
    """Deterministic stand-in for ``random.Random``.

    ``randrange`` cycles through ``draws`` (modulo the range), ``random``
    always returns ``coin``.
    """

    def __init__(self, draws: Sequence[int] = (0,), coin: float = 0.0) -> None:
        self._draws = list(draws) or [0]
        self._pos = 0
        self.coin = coin

    def randrange(self, stop: int) -> int:
        value = self._draws[self._pos % len(self._draws)]
        self._pos += 1
        return value % stop

    def random(self) -> float:
        return self.coin


@pytest.fixture
def fixed_random() -> Callable[..., FixedRandom]:
    return FixedRandom


def png_bytes(color: Tuple[int, int, int], size: Tuple[int, int] = (10, 10)) -> bytes:
    buf = io.BytesIO()
    Image.new("RGB", size, color).save(buf, format="PNG")
    return buf.getvalue()


@pytest.fixture
def green_png() -> bytes:
    return png_bytes((0, 200, 0))


@pytest.fixture
def make_png() -> Iterator[Callable[..., bytes]]:
    yield png_bytes

"""Dish evaluation instrumentation.

Series (``source`` tag only when known):
* counter   dish_evaluation_requests_total{phase,status,source}
* counter   dish_evaluation_fallback_total{reason,source}
* histogram dish_evaluation_latency_ms{phase,source}
* histogram dish_evaluation_score{source}

``phase`` is ``classify`` (one category source call) or ``evaluate``
(a whole orchestrated evaluation). ``source`` is heuristic, remote or
fallback.
"""

from __future__ import annotations

import time
from contextlib import contextmanager
from typing import Dict, Iterator, Optional

from .core import RegistrySnapshot, registry

REQUESTS = "dish_evaluation_requests_total"
FALLBACKS = "dish_evaluation_fallback_total"
LATENCY_MS = "dish_evaluation_latency_ms"
SCORE = "dish_evaluation_score"


def _tags(source: Optional[str], **base: str) -> Dict[str, str]:
    if source:
        base["source"] = source
    return base


def record_request(phase: str, status: str, *, source: Optional[str] = None) -> None:
    registry.counter(REQUESTS, **_tags(source, phase=phase, status=status)).inc()


def record_fallback(reason: str, *, source: Optional[str] = None) -> None:
    registry.counter(FALLBACKS, **_tags(source, reason=reason)).inc()


def record_latency_ms(ms: float, *, phase: str, source: Optional[str] = None) -> None:
    registry.histogram(LATENCY_MS, **_tags(source, phase=phase)).observe(ms)


def record_score(score: int, *, source: Optional[str] = None) -> None:
    registry.histogram(SCORE, **_tags(source)).observe(float(score))


@contextmanager
def time_evaluation(phase: str, *, source: Optional[str] = None) -> Iterator[None]:
    """Count the block as completed or failed and observe its latency.

    Exceptions are recorded and re-raised unchanged.
    """
    start = time.perf_counter()
    status = "failed"
    try:
        yield
        status = "completed"
    finally:
        record_request(phase, status, source=source)
        record_latency_ms((time.perf_counter() - start) * 1000.0, phase=phase, source=source)


def snapshot() -> RegistrySnapshot:
    return registry.snapshot()


def reset_all() -> None:
    """Drop every series (test utility)."""
    registry.reset()


def counter_value(snap: RegistrySnapshot, name: str, **tags: str) -> int:
    """Sum of the snapshot counters called ``name`` matching ``tags``."""
    return sum(
        c["value"]
        for c in snap["counters"]
        if c["name"] == name and all(c["tags"].get(k) == v for k, v in tags.items())
    )


def fallback_count(**tags: str) -> int:
    """Live fallback total for the given tags (debug logging helper)."""
    return sum(c.value() for c in registry.find_counters(FALLBACKS, **tags))

"""In-process metrics registry.

Named series identified by (name, tags) with two kinds: monotonic
counters and windowed histograms. Nothing is exported over HTTP; the
snapshot exists for tests and debug logging.
"""

from __future__ import annotations

import time
from dataclasses import dataclass, field
from threading import Lock
from typing import Callable, Dict, List, Tuple, TypedDict, TypeVar

SeriesKey = Tuple[str, Tuple[Tuple[str, str], ...]]

DEFAULT_WINDOW = 2000


def series_key(name: str, tags: Dict[str, str]) -> SeriesKey:
    return name, tuple(sorted(tags.items()))


class CounterSnap(TypedDict):
    name: str
    tags: Dict[str, str]
    value: int


class HistogramSnap(TypedDict):
    name: str
    tags: Dict[str, str]
    count: int
    sum: float
    avg: float
    p50: float
    p95: float
    min: float
    max: float


class RegistrySnapshot(TypedDict):
    counters: List[CounterSnap]
    histograms: List[HistogramSnap]
    generatedAt: float


@dataclass
class Counter:
    name: str
    tags: Dict[str, str]
    _value: int = 0
    _lock: Lock = field(default_factory=Lock, repr=False)

    def inc(self, amount: int = 1) -> None:
        if amount < 0:
            raise ValueError("counters only go up")
        with self._lock:
            self._value += amount

    def value(self) -> int:
        with self._lock:
            return self._value

    def snap(self) -> CounterSnap:
        return CounterSnap(name=self.name, tags=dict(self.tags), value=self.value())


@dataclass
class Histogram:
    """Keeps the last ``window`` observations (oldest dropped first)."""

    name: str
    tags: Dict[str, str]
    window: int = DEFAULT_WINDOW
    _values: List[float] = field(default_factory=list)
    _lock: Lock = field(default_factory=Lock, repr=False)

    def observe(self, value: float) -> None:
        with self._lock:
            self._values.append(value)
            overflow = len(self._values) - self.window
            if overflow > 0:
                del self._values[:overflow]

    def snap(self) -> HistogramSnap:
        with self._lock:
            values = sorted(self._values)
        count = len(values)
        if not count:
            return HistogramSnap(
                name=self.name,
                tags=dict(self.tags),
                count=0,
                sum=0.0,
                avg=0.0,
                p50=0.0,
                p95=0.0,
                min=0.0,
                max=0.0,
            )
        total = sum(values)
        return HistogramSnap(
            name=self.name,
            tags=dict(self.tags),
            count=count,
            sum=total,
            avg=total / count,
            p50=values[int(0.50 * (count - 1))],
            p95=values[int(0.95 * (count - 1))],
            min=values[0],
            max=values[-1],
        )


_S = TypeVar("_S", Counter, Histogram)


class MetricsRegistry:
    def __init__(self, histogram_window: int = DEFAULT_WINDOW) -> None:
        self.histogram_window = histogram_window
        self._counters: Dict[SeriesKey, Counter] = {}
        self._histograms: Dict[SeriesKey, Histogram] = {}
        self._lock = Lock()

    def _series(
        self,
        store: Dict[SeriesKey, _S],
        factory: Callable[[], _S],
        key: SeriesKey,
    ) -> _S:
        with self._lock:
            series = store.get(key)
            if series is None:
                series = factory()
                store[key] = series
            return series

    def counter(self, name: str, **tags: str) -> Counter:
        return self._series(
            self._counters,
            lambda: Counter(name=name, tags=tags),
            series_key(name, tags),
        )

    def histogram(self, name: str, **tags: str) -> Histogram:
        return self._series(
            self._histograms,
            lambda: Histogram(name=name, tags=tags, window=self.histogram_window),
            series_key(name, tags),
        )

    def find_counters(self, name: str, **tags: str) -> List[Counter]:
        """Counters called ``name`` whose tags include every given tag."""
        with self._lock:
            candidates = list(self._counters.values())
        return [
            c
            for c in candidates
            if c.name == name and all(c.tags.get(k) == v for k, v in tags.items())
        ]

    def reset(self) -> None:
        with self._lock:
            self._counters.clear()
            self._histograms.clear()

    def snapshot(self) -> RegistrySnapshot:
        # series values are read outside the registry lock
        with self._lock:
            counters = list(self._counters.values())
            histograms = list(self._histograms.values())
        return RegistrySnapshot(
            counters=[c.snap() for c in counters],
            histograms=[h.snap() for h in histograms],
            generatedAt=time.time(),
        )


registry = MetricsRegistry()

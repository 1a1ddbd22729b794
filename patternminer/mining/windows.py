from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime

import numpy as np

from patternminer.mining.features import pattern_strength
from patternminer.mining.models import Normalization, PriceBar


@dataclass(frozen=True, eq=False)
class Window:
    """`len(closes)` consecutive bars starting at `start` (end is exclusive)."""

    start: int
    closes: np.ndarray
    normalized: np.ndarray
    start_ts: datetime
    end_ts: datetime

    @property
    def end(self) -> int:
        return self.start + int(self.closes.size)


def normalize_closes(closes: np.ndarray, method: Normalization = "minmax") -> np.ndarray:
    arr = np.asarray(closes, dtype=float)
    if arr.size == 0:
        return arr
    if method == "relative":
        base = float(arr[0])
        if abs(base) <= 1e-12:
            return np.zeros_like(arr)
        return (arr - base) / base
    lo = float(np.min(arr))
    span = float(np.max(arr)) - lo
    if span <= 1e-12:
        return np.zeros_like(arr)
    return (arr - lo) / span


def extract_windows(
    bars: list[PriceBar],
    window_size: int,
    *,
    noise_filter: float = 0.0,
    normalization: Normalization = "minmax",
) -> list[Window]:
    """Slide a window over the closes; start indices are 0..N-w-1.

    Windows whose pattern strength is below `noise_filter` are dropped here,
    before any other feature is computed.
    """

    w = int(window_size)
    n = len(bars)
    if w <= 0 or n <= w:
        return []

    closes = np.asarray([float(b.close) for b in bars], dtype=float)
    floor = float(noise_filter)
    out: list[Window] = []
    for start in range(n - w):
        seg = closes[start : start + w]
        norm = normalize_closes(seg, normalization)
        if pattern_strength(norm) < floor:
            continue
        out.append(
            Window(
                start=start,
                closes=seg,
                normalized=norm,
                start_ts=bars[start].timestamp,
                end_ts=bars[start + w - 1].timestamp,
            )
        )
    return out

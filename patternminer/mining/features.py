from __future__ import annotations

from concurrent.futures import ThreadPoolExecutor
from dataclasses import dataclass, fields
from typing import TYPE_CHECKING

import numpy as np

if TYPE_CHECKING:
    from patternminer.mining.windows import Window

# Columns fed to the clusterer. directional_changes / pattern_strength are
# descriptive only (pattern_strength already gated the window).
CLUSTER_FEATURES: tuple[str, ...] = ("trend", "volatility", "momentum", "price_range", "skewness", "kurtosis")


def _safe_returns(closes: np.ndarray) -> np.ndarray:
    if len(closes) < 2:
        return np.array([], dtype=float)
    prev = closes[:-1]
    nxt = closes[1:]
    prev = np.where(prev == 0, 1e-9, prev)
    return (nxt - prev) / prev


def pattern_strength(normalized: np.ndarray) -> float:
    norm = np.asarray(normalized, dtype=float)
    if norm.size == 0:
        return 0.0
    return float(np.std(norm) + abs(float(norm[-1]) - float(norm[0])))


def _standardized_moment(rets: np.ndarray, order: int) -> float:
    if rets.size == 0:
        return 0.0
    sd = float(np.std(rets))
    if sd <= 1e-15:
        return 0.0
    z = (rets - float(np.mean(rets))) / sd
    return float(np.mean(z**order))


def skewness(rets: np.ndarray) -> float:
    return _standardized_moment(np.asarray(rets, dtype=float), 3)


def kurtosis(rets: np.ndarray) -> float:
    """Excess kurtosis (population); 0 for constant returns."""
    rets = np.asarray(rets, dtype=float)
    if rets.size == 0 or float(np.std(rets)) <= 1e-15:
        return 0.0
    return _standardized_moment(rets, 4) - 3.0


def directional_changes(rets: np.ndarray) -> int:
    rets = np.asarray(rets, dtype=float)
    if rets.size < 2:
        return 0
    return int(np.count_nonzero(rets[1:] * rets[:-1] < 0))


@dataclass(frozen=True)
class FeatureVector:
    trend: float
    volatility: float
    momentum: float
    price_range: float
    skewness: float
    kurtosis: float
    directional_changes: int
    pattern_strength: float

    def as_row(self, columns: tuple[str, ...] = CLUSTER_FEATURES) -> list[float]:
        return [float(getattr(self, c)) for c in columns]


FEATURE_NAMES: tuple[str, ...] = tuple(f.name for f in fields(FeatureVector))


def compute_features(window: "Window") -> FeatureVector:
    closes = np.asarray(window.closes, dtype=float)
    norm = np.asarray(window.normalized, dtype=float)
    rets = _safe_returns(closes)

    trend = float(norm[-1] - norm[0]) if norm.size else 0.0
    volatility = float(np.std(rets)) if rets.size else 0.0
    momentum = float(np.mean(rets)) if rets.size else 0.0
    base = float(closes[0]) if closes.size else 0.0
    price_range = float((np.max(closes) - np.min(closes)) / base) if base > 0 else 0.0

    return FeatureVector(
        trend=trend,
        volatility=volatility,
        momentum=momentum,
        price_range=price_range,
        skewness=skewness(rets),
        kurtosis=kurtosis(rets),
        directional_changes=directional_changes(rets),
        pattern_strength=pattern_strength(norm),
    )


def compute_feature_vectors(windows: list["Window"], *, workers: int = 1) -> list[FeatureVector]:
    # Each window is independent; map() keeps input order.
    if int(workers) <= 1 or len(windows) < 2:
        return [compute_features(w) for w in windows]
    with ThreadPoolExecutor(max_workers=int(workers)) as pool:
        return list(pool.map(compute_features, windows))


def feature_matrix(vectors: list[FeatureVector], columns: tuple[str, ...] = CLUSTER_FEATURES) -> np.ndarray:
    if not vectors:
        return np.empty((0, len(columns)), dtype=float)
    return np.asarray([v.as_row(columns) for v in vectors], dtype=float)

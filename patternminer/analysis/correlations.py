from __future__ import annotations

import numpy as np

from patternminer.mining.models import Pattern


def pearson(x: list[float], y: list[float]) -> float:
    # 0 for empty / mismatched / constant inputs
    if not x or not y or len(x) != len(y):
        return 0.0
    a = np.asarray(x, dtype=float)
    b = np.asarray(y, dtype=float)
    da = a - a.mean()
    db = b - b.mean()
    denom = float(np.sqrt(np.sum(da * da) * np.sum(db * db)))
    if denom <= 1e-15:
        return 0.0
    return float(np.sum(da * db) / denom)


def pattern_type_correlations(patterns: list[Pattern]) -> dict[str, dict[str, float]]:
    """Correlation of profitability between pattern-type groups (by position)."""

    groups: dict[str, list[float]] = {}
    for p in patterns:
        groups.setdefault(p.type, []).append(float(p.profitability))

    out: dict[str, dict[str, float]] = {}
    for a, xs in groups.items():
        out[a] = {}
        for b, ys in groups.items():
            out[a][b] = 1.0 if a == b else pearson(xs, ys)
    return out

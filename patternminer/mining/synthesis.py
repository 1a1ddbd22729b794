from __future__ import annotations

import numpy as np

from patternminer.mining.clustering import Cluster
from patternminer.mining.features import FeatureVector
from patternminer.mining.models import MiningTuning, Pattern, PatternOccurrence, PatternType
from patternminer.mining.windows import Window

# Bootstrap resamples are drawn in blocks to bound memory on large clusters.
_BOOTSTRAP_BLOCK = 256
_BREAKEVEN_EPS = 1e-9


def classify_pattern(avg_trend: float, avg_momentum: float, threshold: float) -> PatternType:
    if avg_trend > threshold and avg_momentum > 0:
        return "bullish"
    if avg_trend < -threshold and avg_momentum < 0:
        return "bearish"
    return "neutral"


def pattern_confidence(trends: np.ndarray, *, scale: float, floor: float = 0.5) -> float:
    trends = np.asarray(trends, dtype=float)
    var = float(np.var(trends)) if trends.size else 0.0
    raw = 1.0 / (1.0 + var * float(scale))
    return float(np.clip(raw, float(floor), 1.0))


def bootstrap_significance(
    values: np.ndarray,
    *,
    samples: int,
    rng: np.random.Generator,
    floor: float = 0.1,
) -> float:
    """1 - two-sided empirical p-value of the mean, floored.

    p is the share of resampled means whose magnitude reaches the observed one.
    """

    vals = np.asarray(values, dtype=float)
    if vals.size == 0:
        return float(floor)
    observed = abs(float(np.mean(vals)))
    total = int(samples)
    hits = 0
    done = 0
    while done < total:
        block = min(_BOOTSTRAP_BLOCK, total - done)
        idx = rng.integers(0, vals.size, size=(block, vals.size))
        means = vals[idx].mean(axis=1)
        hits += int(np.count_nonzero(np.abs(means) >= observed))
        done += block
    p_value = float(hits) / float(total)
    return float(max(float(floor), 1.0 - p_value))


def estimate_profitability(avg_trend: float, avg_volatility: float, *, tuning: MiningTuning, rng: np.random.Generator) -> float:
    noise = float(rng.normal(0.0, tuning.profit_noise_std)) if tuning.profit_noise_std > 0 else 0.0
    raw = float(avg_trend) * tuning.profit_multiplier - float(avg_volatility) * tuning.volatility_penalty + noise
    return float(np.clip(raw, tuning.profit_floor, tuning.profit_cap))


def average_shape(windows: list[Window]) -> list[float]:
    return [float(x) for x in np.mean(np.stack([w.normalized for w in windows]), axis=0)]


def _occurrence(window: Window, confidence: float) -> PatternOccurrence:
    base = float(window.closes[0])
    ret = float(window.closes[-1]) / base - 1.0 if base > 0 else 0.0
    if ret > _BREAKEVEN_EPS:
        outcome = "profit"
    elif ret < -_BREAKEVEN_EPS:
        outcome = "loss"
    else:
        outcome = "breakeven"
    return PatternOccurrence(
        timestamp=window.start_ts,
        start_index=window.start,
        end_index=window.end,
        outcome=outcome,
        return_percentage=ret,
        confidence=confidence,
    )


def synthesize_pattern(
    pattern_id: str,
    cluster: Cluster,
    windows: list[Window],
    vectors: list[FeatureVector],
    *,
    bootstrap_samples: int,
    tuning: MiningTuning,
    rng: np.random.Generator,
) -> Pattern:
    members = list(cluster.members)
    member_windows = [windows[i] for i in members]
    trends = np.asarray([vectors[i].trend for i in members], dtype=float)
    avg_trend = float(np.mean(trends))
    avg_momentum = float(np.mean([vectors[i].momentum for i in members]))
    avg_vol = float(np.mean([vectors[i].volatility for i in members]))

    confidence = pattern_confidence(trends, scale=tuning.confidence_scale, floor=tuning.confidence_floor)
    significance = bootstrap_significance(
        trends, samples=bootstrap_samples, rng=rng, floor=tuning.significance_floor
    )
    profitability = estimate_profitability(avg_trend, avg_vol, tuning=tuning, rng=rng)
    shape = average_shape(member_windows)

    return Pattern(
        id=pattern_id,
        type=classify_pattern(avg_trend, avg_momentum, tuning.trend_threshold),
        support=cluster.support,
        confidence=confidence,
        significance=significance,
        price_points=shape,
        duration=len(shape),
        frequency=cluster.size,
        profitability=profitability,
        win_rate=confidence * tuning.win_rate_factor,
        avg_return=profitability,
        max_drawdown=avg_vol * tuning.drawdown_factor,
        sharpe_ratio=profitability / (avg_vol + tuning.sharpe_epsilon),
        volatility=avg_vol,
        momentum=avg_momentum,
        first_seen=min(w.start_ts for w in member_windows),
        last_seen=max(w.end_ts for w in member_windows),
        occurrences=[_occurrence(w, confidence) for w in member_windows] if tuning.include_occurrences else [],
    )


def synthesize_patterns(
    clusters: list[Cluster],
    windows: list[Window],
    vectors: list[FeatureVector],
    *,
    bootstrap_samples: int,
    tuning: MiningTuning,
    rng: np.random.Generator,
) -> list[Pattern]:
    # Ids follow first appearance in the series, not the arbitrary KMeans label.
    ordered = sorted(clusters, key=lambda c: windows[c.members[0]].start)
    return [
        synthesize_pattern(
            f"pattern_{seq:03d}",
            cluster,
            windows,
            vectors,
            bootstrap_samples=bootstrap_samples,
            tuning=tuning,
            rng=rng,
        )
        for seq, cluster in enumerate(ordered)
    ]

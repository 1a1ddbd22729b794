from __future__ import annotations

from collections import Counter

import numpy as np

from patternminer.mining.models import MiningTuning, OutOfSampleResults, Pattern, RunStatistics


def _mean(xs: list[float]) -> float:
    return float(np.mean(xs)) if xs else 0.0


def aggregate_statistics(
    patterns: list[Pattern],
    *,
    tuning: MiningTuning | None = None,
    time_frame: str | None = None,
) -> RunStatistics:
    """Reduce a run's patterns to summary statistics.

    crossValidationScore and outOfSampleResults are proxies: the share of
    profitable patterns, and in-sample averages scaled by fixed discounts.
    No held-out evaluation is performed.
    """

    if not patterns:
        return RunStatistics()

    t = tuning or MiningTuning()
    avg_confidence = _mean([p.confidence for p in patterns])
    overall_profitability = _mean([p.profitability for p in patterns])
    avg_win_rate = _mean([p.win_rate for p in patterns])
    avg_sharpe = _mean([p.sharpe_ratio for p in patterns])

    # max/min keep the first pattern on ties
    best = max(patterns, key=lambda p: p.profitability)
    worst = min(patterns, key=lambda p: p.profitability)

    profitable = sum(1 for p in patterns if p.profitability > 0)

    return RunStatistics(
        total_patterns=len(patterns),
        unique_patterns=len({p.type for p in patterns}),
        avg_confidence=avg_confidence,
        avg_support=_mean([p.support for p in patterns]),
        avg_significance=_mean([p.significance for p in patterns]),
        overall_profitability=overall_profitability,
        avg_win_rate=avg_win_rate,
        avg_sharpe_ratio=avg_sharpe,
        best_pattern=best.id,
        worst_pattern=worst.id,
        pattern_frequency=dict(Counter(p.type for p in patterns)),
        time_frame_distribution={str(time_frame): len(patterns)} if time_frame else {},
        cross_validation_score=float(profitable) / float(len(patterns)),
        bootstrap_confidence=_mean([p.confidence * p.significance for p in patterns]),
        out_of_sample_results=OutOfSampleResults(
            win_rate=avg_win_rate * t.oos_win_rate_discount,
            avg_return=overall_profitability * t.oos_return_discount,
            sharpe_ratio=avg_sharpe * t.oos_sharpe_discount,
        ),
    )

from __future__ import annotations

import time
from typing import Any, Iterable, Mapping

import numpy as np
from loguru import logger
from pydantic import TypeAdapter, ValidationError

from patternminer.mining.clustering import cluster_windows
from patternminer.mining.errors import InvalidParametersError, InvalidSeriesError
from patternminer.mining.features import compute_feature_vectors
from patternminer.mining.models import (
    ALGORITHM_VERSION,
    MiningMetadata,
    MiningParams,
    MiningResult,
    Pattern,
    PriceBar,
)
from patternminer.mining.statistics import aggregate_statistics
from patternminer.mining.synthesis import synthesize_patterns
from patternminer.mining.windows import extract_windows

_BARS = TypeAdapter(list[PriceBar])


def _coerce_params(params: MiningParams | Mapping[str, Any]) -> MiningParams:
    if isinstance(params, MiningParams):
        return params
    try:
        return MiningParams.model_validate(dict(params))
    except ValidationError as e:
        raise InvalidParametersError(str(e)) from e


def _coerce_series(series: Iterable[PriceBar | Mapping[str, Any]]) -> list[PriceBar]:
    items = list(series)
    if all(isinstance(b, PriceBar) for b in items):
        bars = items
    else:
        try:
            bars = _BARS.validate_python([b.model_dump() if isinstance(b, PriceBar) else b for b in items])
        except ValidationError as e:
            raise InvalidSeriesError(str(e)) from e
    for i in range(1, len(bars)):
        try:
            ordered = bars[i].timestamp > bars[i - 1].timestamp
        except TypeError as e:
            raise InvalidSeriesError(f"mixed naive/aware timestamps at index {i}") from e
        if not ordered:
            raise InvalidSeriesError(f"timestamps not strictly increasing at index {i}")
    return bars


def mine(
    series: Iterable[PriceBar | Mapping[str, Any]],
    params: MiningParams | Mapping[str, Any],
    seed: int | None = None,
) -> MiningResult:
    """Discover frequent fixed-length patterns in an OHLC series.

    Pure function of (series, params, seed): all randomness (KMeans init,
    silhouette subsampling, bootstrap, profitability noise) comes from one
    generator seeded here. With seed=None the output is not reproducible.

    Short series and degenerate clusterings give an empty result, not an error.
    Raises InvalidParametersError / InvalidSeriesError before any computation.
    """

    t0 = time.perf_counter()
    p = _coerce_params(params)
    bars = _coerce_series(series)
    tuning = p.tuning
    rng = np.random.default_rng(seed)

    windows = extract_windows(
        bars,
        p.window_size,
        noise_filter=p.noise_filter,
        normalization=tuning.normalization,
    )
    logger.info(
        "mine: {n} bars, window={w}, {kept} windows above noise floor {nf}",
        n=len(bars),
        w=p.window_size,
        kept=len(windows),
        nf=p.noise_filter,
    )

    patterns: list[Pattern] = []
    cluster_count = 0
    score: float | None = None
    note: str | None = None

    if len(bars) <= p.window_size:
        note = "insufficient_data"
    elif not windows:
        note = "no_windows"
    else:
        vectors = compute_feature_vectors(windows, workers=tuning.feature_workers)
        clustering = cluster_windows(vectors, min_support=p.min_support, tuning=tuning, rng=rng)
        cluster_count = clustering.k
        score = clustering.score
        note = clustering.note
        patterns = synthesize_patterns(
            clustering.clusters,
            windows,
            vectors,
            bootstrap_samples=p.bootstrap_samples,
            tuning=tuning,
            rng=rng,
        )

    statistics = aggregate_statistics(patterns, tuning=tuning, time_frame=p.time_frame)
    elapsed = time.perf_counter() - t0
    logger.info("mine: {np} patterns in {s:.2f}s (note={note})", np=len(patterns), s=elapsed, note=note)

    return MiningResult(
        patterns=patterns,
        statistics=statistics,
        metadata=MiningMetadata(
            data_points_analyzed=len(bars),
            windows_analyzed=len(windows),
            patterns_found=len(patterns),
            cluster_count=cluster_count,
            silhouette_score=score,
            execution_time_seconds=elapsed,
            algorithm_version=ALGORITHM_VERSION,
            seed=seed,
            note=note,
            parameters=p,
        ),
    )

from __future__ import annotations

from datetime import datetime, timedelta, timezone

import numpy as np
import pytest

from patternminer.mining.features import (
    compute_feature_vectors,
    compute_features,
    directional_changes,
    feature_matrix,
    kurtosis,
    pattern_strength,
    skewness,
)
from patternminer.mining.models import PriceBar
from patternminer.mining.windows import Window, extract_windows, normalize_closes

T0 = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _bars(closes: list[float]) -> list[PriceBar]:
    out = []
    prev = closes[0]
    for i, c in enumerate(closes):
        o = prev
        out.append(PriceBar(timestamp=T0 + timedelta(minutes=i), open=o, high=max(o, c), low=min(o, c), close=c))
        prev = c
    return out


def _window(closes: list[float], start: int = 0) -> Window:
    arr = np.asarray(closes, dtype=float)
    return Window(start=start, closes=arr, normalized=normalize_closes(arr, "minmax"), start_ts=T0, end_ts=T0)


def test_normalize_minmax_and_relative():
    closes = np.array([2.0, 4.0, 3.0])
    assert normalize_closes(closes, "minmax").tolist() == [0.0, 1.0, 0.5]
    assert normalize_closes(closes, "relative").tolist() == [0.0, 1.0, 0.5]
    assert normalize_closes(np.array([5.0, 5.0, 5.0]), "minmax").tolist() == [0.0, 0.0, 0.0]


def test_extract_windows_start_indices_and_short_series():
    closes = [100.0 + (i % 7) for i in range(30)]
    windows = extract_windows(_bars(closes), 10, noise_filter=0.0)
    assert [w.start for w in windows] == list(range(20))
    assert all(w.closes.size == 10 and w.normalized.size == 10 for w in windows)
    assert windows[0].end == 10

    assert extract_windows(_bars(closes[:10]), 10) == []
    assert extract_windows(_bars(closes[:5]), 10) == []


def test_noise_filter_drops_flat_segments():
    # 15 flat bars then a ramp: early windows are entirely flat.
    closes = [100.0] * 15 + [100.0 + i for i in range(1, 16)]
    windows = extract_windows(_bars(closes), 5, noise_filter=0.05)
    assert windows
    assert all(pattern_strength(w.normalized) >= 0.05 for w in windows)
    assert min(w.start for w in windows) >= 11


def test_window_timestamps_cover_first_and_last_bar():
    bars = _bars([100.0, 101.0, 99.0, 102.0, 98.0, 103.0])
    w = extract_windows(bars, 3)[1]
    assert w.start_ts == bars[1].timestamp
    assert w.end_ts == bars[3].timestamp


def test_compute_features_basic_values():
    w = _window([100.0, 110.0, 99.0, 108.9])
    fv = compute_features(w)
    rets = np.array([0.1, -0.1, 0.1])

    assert fv.trend == pytest.approx(w.normalized[-1] - w.normalized[0])
    assert fv.volatility == pytest.approx(float(np.std(rets)))
    assert fv.momentum == pytest.approx(float(np.mean(rets)))
    assert fv.price_range == pytest.approx((110.0 - 99.0) / 100.0)
    assert fv.directional_changes == 2
    assert fv.pattern_strength == pytest.approx(pattern_strength(w.normalized))


def test_moments_are_zero_for_constant_returns():
    w = _window([100.0, 100.0, 100.0, 100.0])
    fv = compute_features(w)
    assert fv.volatility == 0.0
    assert fv.skewness == 0.0
    assert fv.kurtosis == 0.0
    assert fv.directional_changes == 0


def test_skewness_and_excess_kurtosis_population_formulas():
    rets = np.array([0.01, -0.02, 0.03, 0.0, 0.05])
    z = (rets - rets.mean()) / rets.std()
    assert skewness(rets) == pytest.approx(float(np.mean(z**3)))
    assert kurtosis(rets) == pytest.approx(float(np.mean(z**4)) - 3.0)


def test_directional_changes_counts_sign_flips():
    assert directional_changes(np.array([1.0, -0.5, 1.0, -0.5])) == 3
    assert directional_changes(np.array([1.0, 0.0, -1.0])) == 0
    assert directional_changes(np.array([0.2])) == 0


def test_parallel_features_match_serial():
    rng = np.random.default_rng(3)
    closes = list(100.0 * np.cumprod(1.0 + rng.normal(0, 0.01, 200)))
    windows = extract_windows(_bars(closes), 20)
    serial = compute_feature_vectors(windows, workers=1)
    threaded = compute_feature_vectors(windows, workers=4)
    assert serial == threaded
    assert feature_matrix(serial).shape == (len(windows), 6)

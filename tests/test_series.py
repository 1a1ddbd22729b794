from __future__ import annotations

import json

import pytest
from pydantic import ValidationError

from patternminer.mining.models import PriceBar
from patternminer.series.synthetic import flat_series, generate_pair_series, generate_series
from patternminer.series.validation import load_series_json, validate_series


def _raw(ts: str, o: float, h: float, l: float, c: float) -> dict:
    return {"timestamp": ts, "open": o, "high": h, "low": l, "close": c}


def test_generator_is_seeded():
    a = generate_series(300, seed=9)
    b = generate_series(300, seed=9)
    c = generate_series(300, seed=10)
    assert [x.close for x in a] == [x.close for x in b]
    assert [x.close for x in a] != [x.close for x in c]


def test_generator_bars_are_ordered_and_consistent():
    bars = generate_series(500, interval_minutes=5, seed=1)
    assert len(bars) == 500
    assert all(b2.timestamp > b1.timestamp for b1, b2 in zip(bars, bars[1:]))
    assert all(b.low <= min(b.open, b.close) and b.high >= max(b.open, b.close) for b in bars)
    assert validate_series(bars).is_valid


def test_pair_series_uses_pair_base_price():
    bars = generate_pair_series("usdjpy", 10, seed=3)
    assert bars[0].close == pytest.approx(110.0)


def test_generator_zero_length():
    assert generate_series(0, seed=1) == []


def test_flat_series():
    bars = flat_series(5, price=1.25)
    assert {b.close for b in bars} == {1.25}
    assert bars[1].timestamp > bars[0].timestamp


def test_price_bar_rejects_close_outside_range():
    with pytest.raises(ValidationError):
        PriceBar(timestamp="2024-01-01T00:00:00Z", open=1.0, high=1.05, low=0.95, close=1.10)
    with pytest.raises(ValidationError):
        PriceBar(timestamp="2024-01-01T00:00:00Z", open=0.0, high=1.0, low=0.5, close=1.0)


def test_validate_series_reports_issues_on_raw_dicts():
    raw = [
        _raw("2024-01-01T00:00:00Z", 1.00, 1.01, 0.99, 1.00),
        _raw("2024-01-01T00:15:00Z", 1.00, 0.98, 0.99, 1.00),
        _raw("2024-01-01T00:10:00Z", 1.00, 1.01, 0.99, 1.00),
        _raw("2024-01-01T00:30:00Z", 1.20, 1.21, 1.19, 1.20),
        {"timestamp": "2024-01-01T00:45:00Z", "open": 1.2, "high": None, "low": 1.1, "close": 1.2},
    ]
    report = validate_series(raw)
    assert not report.is_valid
    joined = "\n".join(report.issues)
    assert "High < Low at index 1" in joined
    assert "chronological order at index 2" in joined
    assert "Extreme price gap" in joined and "index 3" in joined
    assert "Missing OHLC values at index 4" in joined


def test_validate_series_empty():
    report = validate_series([])
    assert not report.is_valid
    assert report.issues == ["No data provided"]


def test_load_series_json(tmp_path):
    path = tmp_path / "bars.json"
    path.write_text(
        json.dumps(
            [
                _raw("2024-01-01T00:00:00Z", 1.0, 1.1, 0.9, 1.05),
                {**_raw("2024-01-01T00:15:00Z", 1.05, 1.1, 1.0, 1.02), "volume": 1200},
            ]
        ),
        encoding="utf-8",
    )
    bars = load_series_json(path)
    assert len(bars) == 2
    assert bars[1].volume == 1200
    assert bars[0].volume is None
    assert bars[0].timestamp.tzinfo is not None


def test_validate_series_handles_mixed_naive_and_aware_timestamps():
    raw = [
        _raw("2024-01-01T00:00:00", 1.0, 1.1, 0.9, 1.0),
        _raw("2024-01-01T00:15:00Z", 1.0, 1.1, 0.9, 1.0),
        _raw("2024-01-01T00:10:00+00:00", 1.0, 1.1, 0.9, 1.0),
    ]
    report = validate_series(raw)
    assert report.issues == ["Data not in chronological order at index 2"]


def test_naive_price_bar_timestamp_is_utc():
    bar = PriceBar(timestamp="2024-01-01T00:00:00", open=1.0, high=1.0, low=1.0, close=1.0)
    assert bar.timestamp.utcoffset().total_seconds() == 0

from __future__ import annotations

from dataclasses import dataclass, field
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Mapping, Sequence

from pydantic import TypeAdapter

from patternminer.mining.models import PriceBar

_BARS = TypeAdapter(list[PriceBar])


@dataclass(frozen=True)
class SeriesValidation:
    is_valid: bool
    issues: list[str] = field(default_factory=list)


def _get(bar: PriceBar | Mapping[str, Any], key: str) -> Any:
    if isinstance(bar, Mapping):
        return bar.get(key)
    return getattr(bar, key, None)


def _num(x: Any) -> float | None:
    try:
        v = float(x)
    except (TypeError, ValueError):
        return None
    return v if v > 0 else None


def _ts(x: Any) -> datetime | None:
    # Naive values are read as UTC, matching PriceBar.
    ts: datetime | None = None
    if isinstance(x, datetime):
        ts = x
    elif isinstance(x, str) and x.strip():
        s = x.strip()
        if s.endswith("Z"):
            s = s[:-1] + "+00:00"
        try:
            ts = datetime.fromisoformat(s)
        except ValueError:
            return None
    if ts is not None and ts.tzinfo is None:
        ts = ts.replace(tzinfo=timezone.utc)
    return ts


def validate_series(bars: Sequence[PriceBar | Mapping[str, Any]], *, max_gap: float = 0.05) -> SeriesValidation:
    """Data-quality report for a raw or parsed bar series.

    Checks OHLC presence and ranges, chronological order, and open-vs-previous-close
    gaps above `max_gap` (likely data errors).
    """

    if not bars:
        return SeriesValidation(is_valid=False, issues=["No data provided"])

    issues: list[str] = []
    for i, b in enumerate(bars):
        o, h, l, c = (_num(_get(b, k)) for k in ("open", "high", "low", "close"))
        if o is None or h is None or l is None or c is None:
            issues.append(f"Missing OHLC values at index {i}")
            continue
        if h < l:
            issues.append(f"Invalid OHLC: High < Low at index {i}")
        if o > h or o < l:
            issues.append(f"Invalid OHLC: Open outside High-Low range at index {i}")
        if c > h or c < l:
            issues.append(f"Invalid OHLC: Close outside High-Low range at index {i}")

    prev_ts: datetime | None = None
    for i, b in enumerate(bars):
        ts = _ts(_get(b, "timestamp"))
        if ts is None:
            issues.append(f"Missing timestamp at index {i}")
        elif prev_ts is not None and ts <= prev_ts:
            issues.append(f"Data not in chronological order at index {i}")
        prev_ts = ts if ts is not None else prev_ts

    for i in range(1, len(bars)):
        prev_close = _num(_get(bars[i - 1], "close"))
        cur_open = _num(_get(bars[i], "open"))
        if prev_close is None or cur_open is None:
            continue
        gap = abs((cur_open - prev_close) / prev_close)
        if gap > float(max_gap):
            issues.append(f"Extreme price gap ({gap * 100:.2f}%) at index {i}")

    return SeriesValidation(is_valid=not issues, issues=issues)


def load_series_json(path: str | Path) -> list[PriceBar]:
    return _BARS.validate_json(Path(path).read_bytes())

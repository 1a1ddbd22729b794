from __future__ import annotations

from datetime import datetime, timedelta, timezone

import numpy as np

from patternminer.mining.models import PriceBar

BASE_PRICES: dict[str, float] = {
    "EURUSD": 1.2000,
    "GBPUSD": 1.3500,
    "USDJPY": 110.00,
    "USDCHF": 0.9200,
    "AUDUSD": 0.7500,
    "USDCAD": 1.2500,
    "NZDUSD": 0.7000,
    "EURGBP": 0.8900,
    "EURJPY": 132.00,
}

PAIR_VOLATILITY: dict[str, float] = {
    "EURUSD": 0.0008,
    "GBPUSD": 0.0012,
    "USDJPY": 0.0010,
    "USDCHF": 0.0009,
    "AUDUSD": 0.0015,
    "USDCAD": 0.0011,
    "NZDUSD": 0.0016,
    "EURGBP": 0.0007,
}

DEFAULT_START = datetime(2024, 1, 1, tzinfo=timezone.utc)


def _session_multiplier(ts: datetime, boost: float) -> float:
    # London / New York sessions (UTC)
    hour = ts.hour
    return float(boost) if (8 <= hour <= 16) or (13 <= hour <= 21) else 1.0


def generate_series(
    n: int,
    *,
    base_price: float = 1.2,
    volatility: float = 0.0008,
    drift: float = 0.0,
    trend_amplitude: float = 0.0002,
    cycle_amplitude: float = 0.0001,
    injection_rate: float = 0.015,
    injection_strength: tuple[float, float] = (0.0005, 0.0015),
    session_boost: float = 1.5,
    intrabar_noise: float = 0.0001,
    interval_minutes: int = 15,
    start: datetime = DEFAULT_START,
    seed: int | None = None,
) -> list[PriceBar]:
    """Seeded random-walk OHLC series.

    Per-bar return = (noise + drift + slow trend + cycle + occasional injected
    bull/bear move) * session multiplier. Open is the previous close.
    """

    n = max(0, int(n))
    if n == 0:
        return []
    rng = np.random.default_rng(seed)
    step = timedelta(minutes=int(interval_minutes))

    closes = np.empty(n, dtype=float)
    closes[0] = float(base_price)
    for i in range(1, n):
        ts = start + i * step
        change = float(rng.normal(0.0, volatility)) + float(drift)
        change += np.sin(i / 500.0) * trend_amplitude + np.sin(i / 50.0) * cycle_amplitude
        if i > 50 and injection_rate > 0 and float(rng.random()) < float(injection_rate):
            sign = 1.0 if float(rng.random()) < 0.5 else -1.0
            change += sign * float(rng.uniform(*injection_strength))
        change *= _session_multiplier(ts, session_boost)
        closes[i] = closes[i - 1] * (1.0 + change)

    bars: list[PriceBar] = []
    for i in range(n):
        close = float(closes[i])
        open_ = float(closes[i - 1]) if i > 0 else close
        wick = abs(float(rng.normal(0.0, intrabar_noise)))
        bars.append(
            PriceBar(
                timestamp=start + i * step,
                open=open_,
                high=max(open_, close) * (1.0 + wick),
                low=min(open_, close) * (1.0 - wick),
                close=close,
                volume=float(rng.integers(1000, 10000)),
            )
        )
    return bars


def generate_pair_series(symbol: str, n: int, **kwargs) -> list[PriceBar]:
    sym = str(symbol).upper()
    kwargs.setdefault("base_price", BASE_PRICES.get(sym, 1.0))
    kwargs.setdefault("volatility", PAIR_VOLATILITY.get(sym, 0.0010))
    return generate_series(n, **kwargs)


def flat_series(n: int, *, price: float = 1.0, interval_minutes: int = 15, start: datetime = DEFAULT_START) -> list[PriceBar]:
    step = timedelta(minutes=int(interval_minutes))
    return [
        PriceBar(timestamp=start + i * step, open=price, high=price, low=price, close=price, volume=0.0)
        for i in range(max(0, int(n)))
    ]

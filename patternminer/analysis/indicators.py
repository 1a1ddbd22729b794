from __future__ import annotations

from dataclasses import dataclass

import numpy as np


def ema_series(arr: np.ndarray, period: int) -> np.ndarray:
    arr = np.asarray(arr, dtype=float)
    if arr.size == 0:
        return np.asarray([], dtype=float)
    p = max(1, int(period))
    alpha = 2.0 / (float(p) + 1.0)
    out = np.empty(arr.size, dtype=float)
    out[0] = float(arr[0])
    for i in range(1, arr.size):
        out[i] = alpha * float(arr[i]) + (1.0 - alpha) * float(out[i - 1])
    return out


def sma_series(arr: np.ndarray, period: int) -> np.ndarray:
    """Trailing mean; one value per full window (len - period + 1 values)."""
    arr = np.asarray(arr, dtype=float)
    p = max(1, int(period))
    if arr.size < p:
        return np.asarray([], dtype=float)
    csum = np.cumsum(np.insert(arr, 0, 0.0))
    return (csum[p:] - csum[:-p]) / float(p)


def rsi_series(closes: np.ndarray, period: int = 14) -> np.ndarray:
    """Wilder RSI; first value at index `period`, so len - period values."""
    closes = np.asarray(closes, dtype=float)
    p = max(1, int(period))
    if closes.size < p + 1:
        return np.asarray([], dtype=float)
    diffs = np.diff(closes)
    gains = np.where(diffs > 0, diffs, 0.0)
    losses = np.where(diffs < 0, -diffs, 0.0)
    avg_gain = float(np.mean(gains[:p]))
    avg_loss = float(np.mean(losses[:p]))

    out = np.empty(closes.size - p, dtype=float)
    out[0] = 100.0 - (100.0 / (1.0 + avg_gain / (avg_loss + 1e-9)))
    for j, i in enumerate(range(p, diffs.size), start=1):
        avg_gain = (avg_gain * (p - 1) + float(gains[i])) / p
        avg_loss = (avg_loss * (p - 1) + float(losses[i])) / p
        out[j] = 100.0 - (100.0 / (1.0 + avg_gain / (avg_loss + 1e-9)))
    return np.clip(out, 0.0, 100.0)


def macd_series(closes: np.ndarray, fast: int = 12, slow: int = 26, signal: int = 9) -> dict[str, np.ndarray]:
    closes = np.asarray(closes, dtype=float)
    if closes.size == 0:
        empty = np.asarray([], dtype=float)
        return {"macd": empty, "signal": empty, "histogram": empty}
    macd_line = ema_series(closes, int(fast)) - ema_series(closes, int(slow))
    sig_line = ema_series(macd_line, int(signal))
    return {"macd": macd_line, "signal": sig_line, "histogram": macd_line - sig_line}


def bollinger_series(closes: np.ndarray, period: int = 20, k: float = 2.0) -> dict[str, np.ndarray]:
    closes = np.asarray(closes, dtype=float)
    p = max(1, int(period))
    if closes.size < p:
        empty = np.asarray([], dtype=float)
        return {"upper": empty, "middle": empty, "lower": empty}
    windows = np.lib.stride_tricks.sliding_window_view(closes, p)
    mid = windows.mean(axis=1)
    std = windows.std(axis=1)
    return {"upper": mid + float(k) * std, "middle": mid, "lower": mid - float(k) * std}


@dataclass(frozen=True)
class TechnicalIndicators:
    rsi: list[float]
    macd: dict[str, list[float]]
    bollinger: dict[str, list[float]]
    sma20: list[float]
    ema20: list[float]


def _tolist(d: dict[str, np.ndarray]) -> dict[str, list[float]]:
    return {k: [float(x) for x in v] for k, v in d.items()}


def compute_technical_indicators(
    closes: list[float],
    *,
    rsi_period: int = 14,
    macd_fast: int = 12,
    macd_slow: int = 26,
    boll_period: int = 20,
) -> TechnicalIndicators:
    c = np.asarray(closes, dtype=float)
    return TechnicalIndicators(
        rsi=[float(x) for x in rsi_series(c, rsi_period)],
        macd=_tolist(macd_series(c, macd_fast, macd_slow)),
        bollinger=_tolist(bollinger_series(c, boll_period)),
        sma20=[float(x) for x in sma_series(c, 20)],
        ema20=[float(x) for x in ema_series(c, 20)],
    )

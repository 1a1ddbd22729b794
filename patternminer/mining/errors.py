from __future__ import annotations


class MiningError(RuntimeError):
    pass


class InvalidParametersError(MiningError, ValueError):
    """Raised before any computation when MiningParams are out of range."""


class InvalidSeriesError(MiningError, ValueError):
    """Raised when the price series breaks the bar ordering / OHLC invariants."""

from __future__ import annotations

from datetime import datetime, timezone
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator
from pydantic.alias_generators import to_camel

ALGORITHM_VERSION = "1.0.0"

PatternType = Literal["bullish", "bearish", "neutral"]
Normalization = Literal["minmax", "relative"]


class _WireModel(BaseModel):
    """Immutable model serialized with camelCase keys on the wire."""

    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)


class PriceBar(_WireModel):
    timestamp: datetime
    open: float = Field(..., gt=0)
    high: float = Field(..., gt=0)
    low: float = Field(..., gt=0)
    close: float = Field(..., gt=0)
    volume: float | None = None

    @field_validator("timestamp")
    @classmethod
    def _assume_utc(cls, v: datetime) -> datetime:
        # Naive timestamps are read as UTC so mixed inputs stay comparable.
        return v if v.tzinfo is not None else v.replace(tzinfo=timezone.utc)

    @model_validator(mode="after")
    def _check_ohlc(self) -> "PriceBar":
        if self.low > min(self.open, self.close) or self.high < max(self.open, self.close):
            raise ValueError(
                f"OHLC out of range: low={self.low} open={self.open} close={self.close} high={self.high}"
            )
        return self


class MiningTuning(_WireModel):
    """Heuristic constants of the mining pipeline.

    None of these are sacred: the performance estimates in particular are
    point heuristics, not a trade simulation.
    """

    normalization: Normalization = "minmax"
    # Clusters smaller than this are never reported, whatever their support.
    min_cluster_size: int = Field(5, ge=1)
    min_windows_for_clustering: int = Field(10, ge=2)
    min_clusters: int = Field(3, ge=2)
    max_clusters: int = Field(15, ge=2)
    # Candidate k upper bound is |windows| / windows_per_cluster (capped by max_clusters).
    windows_per_cluster: int = Field(20, ge=1)
    kmeans_n_init: int = Field(10, ge=1)
    # None computes the exact silhouette (O(n^2) memory).
    silhouette_sample_size: int | None = Field(2000, ge=10)

    # Pattern classification / confidence / significance
    trend_threshold: float = Field(0.01, ge=0)
    confidence_scale: float = Field(1000.0, ge=0)
    confidence_floor: float = Field(0.5, ge=0, le=1)
    significance_floor: float = Field(0.1, gt=0, le=1)

    # Performance heuristics
    profit_multiplier: float = 50.0
    profit_noise_std: float = Field(0.02, ge=0)
    volatility_penalty: float = Field(0.0, ge=0)
    profit_floor: float = -0.10
    profit_cap: float = 0.15
    win_rate_factor: float = Field(0.8, ge=0, le=1)
    drawdown_factor: float = Field(2.0, ge=0)
    sharpe_epsilon: float = Field(0.001, gt=0)

    # Out-of-sample degradation applied to in-sample averages
    oos_win_rate_discount: float = Field(0.85, ge=0, le=1)
    oos_return_discount: float = Field(0.80, ge=0, le=1)
    oos_sharpe_discount: float = Field(0.75, ge=0, le=1)

    # 1 = serial feature computation; >1 uses a thread pool.
    feature_workers: int = Field(1, ge=1, le=64)
    include_occurrences: bool = True

    @model_validator(mode="after")
    def _check_ranges(self) -> "MiningTuning":
        if self.min_clusters > self.max_clusters:
            raise ValueError("min_clusters must be <= max_clusters")
        if self.profit_floor > self.profit_cap:
            raise ValueError("profit_floor must be <= profit_cap")
        return self


class MiningParams(_WireModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True, extra="ignore")

    window_size: int = Field(..., ge=3, le=1000, description="Pattern length in bars")
    min_support: float = Field(..., gt=0, le=1)
    # Post-filter threshold for callers; not enforced during clustering.
    min_confidence: float = Field(..., gt=0, le=1)
    noise_filter: float = Field(..., ge=0, description="Minimum pattern strength")
    bootstrap_samples: int = Field(..., ge=1, le=100_000)
    # Informational only.
    significance_level: float = Field(..., gt=0, lt=1)
    cross_validation_folds: int = Field(..., ge=1)
    time_frame: str | None = Field(None, description="e.g. 1m, 15m, 1h")
    tuning: MiningTuning = Field(default_factory=MiningTuning)


class PatternOccurrence(_WireModel):
    timestamp: datetime
    start_index: int
    end_index: int
    outcome: Literal["profit", "loss", "breakeven"]
    return_percentage: float
    confidence: float


class Pattern(_WireModel):
    id: str
    type: PatternType
    support: float = Field(..., gt=0, le=1)
    confidence: float = Field(..., ge=0, le=1)
    significance: float = Field(..., gt=0, le=1)
    price_points: list[float]
    duration: int
    frequency: int
    profitability: float
    win_rate: float
    avg_return: float
    max_drawdown: float
    sharpe_ratio: float
    volatility: float
    momentum: float
    first_seen: datetime
    last_seen: datetime
    occurrences: list[PatternOccurrence] = Field(default_factory=list)


class OutOfSampleResults(_WireModel):
    win_rate: float = 0.0
    avg_return: float = 0.0
    sharpe_ratio: float = 0.0


class RunStatistics(_WireModel):
    total_patterns: int = 0
    unique_patterns: int = 0
    avg_confidence: float = 0.0
    avg_support: float = 0.0
    avg_significance: float = 0.0
    overall_profitability: float = 0.0
    avg_win_rate: float = 0.0
    avg_sharpe_ratio: float = 0.0
    best_pattern: str = ""
    worst_pattern: str = ""
    pattern_frequency: dict[str, int] = Field(default_factory=dict)
    time_frame_distribution: dict[str, int] = Field(default_factory=dict)
    cross_validation_score: float = 0.0
    bootstrap_confidence: float = 0.0
    out_of_sample_results: OutOfSampleResults = Field(default_factory=OutOfSampleResults)


class MiningMetadata(_WireModel):
    data_points_analyzed: int
    windows_analyzed: int
    patterns_found: int
    cluster_count: int = 0
    silhouette_score: float | None = None
    execution_time_seconds: float
    algorithm_version: str = ALGORITHM_VERSION
    seed: int | None = None
    # insufficient_data | no_windows | degenerate_clustering
    note: str | None = None
    parameters: MiningParams | None = None


class MiningResult(_WireModel):
    patterns: list[Pattern]
    statistics: RunStatistics
    metadata: MiningMetadata


def dump_result(result: MiningResult, *, indent: int | None = None) -> str:
    return result.model_dump_json(by_alias=True, indent=indent)


def load_result(text: str | bytes) -> MiningResult:
    return MiningResult.model_validate_json(text)

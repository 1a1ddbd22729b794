from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any

from patternminer.analysis.correlations import pattern_type_correlations
from patternminer.analysis.filters import PatternFilter, apply_pattern_filters
from patternminer.analysis.indicators import TechnicalIndicators, compute_technical_indicators
from patternminer.analysis.insights import PatternInsights, generate_insights
from patternminer.core.settings import settings
from patternminer.mining.models import MiningTuning, Pattern, PriceBar, RunStatistics
from patternminer.mining.statistics import aggregate_statistics
from patternminer.utils.perf import perf_span


@dataclass(frozen=True)
class PatternAnalysis:
    patterns: list[Pattern]
    statistics: RunStatistics
    correlations: dict[str, dict[str, float]]
    insights: PatternInsights
    technical_indicators: TechnicalIndicators | None = None
    elapsed_ms: float = 0.0

    def to_dict(self) -> dict[str, Any]:
        return {
            "patterns": [p.model_dump(mode="json", by_alias=True) for p in self.patterns],
            "statistics": self.statistics.model_dump(mode="json", by_alias=True),
            "correlations": self.correlations,
            "insights": asdict(self.insights),
            "technicalIndicators": asdict(self.technical_indicators) if self.technical_indicators else None,
            "elapsedMs": self.elapsed_ms,
        }


def analyze_patterns(
    patterns: list[Pattern],
    *,
    filters: PatternFilter | None = None,
    bars: list[PriceBar] | None = None,
    tuning: MiningTuning | None = None,
    time_frame: str | None = None,
) -> PatternAnalysis:
    """Filter mined patterns and recompute statistics, correlations and insights.

    Technical indicators are attached when the source bars are supplied.
    """

    with perf_span("analysis.analyze_patterns", n=len(patterns), bars=len(bars) if bars else None) as span:
        kept = apply_pattern_filters(patterns, filters) if filters is not None else list(patterns)
        stats = aggregate_statistics(kept, tuning=tuning, time_frame=time_frame)

        indicators = None
        if bars:
            indicators = compute_technical_indicators(
                [float(b.close) for b in bars],
                rsi_period=int(settings.ANALYSIS_RSI_PERIOD),
                macd_fast=int(settings.ANALYSIS_MACD_FAST),
                macd_slow=int(settings.ANALYSIS_MACD_SLOW),
                boll_period=int(settings.ANALYSIS_BOLL_PERIOD),
            )

        correlations = pattern_type_correlations(kept)
        insights = generate_insights(kept, stats)

    return PatternAnalysis(
        patterns=kept,
        statistics=stats,
        correlations=correlations,
        insights=insights,
        technical_indicators=indicators,
        elapsed_ms=span.elapsed_ms,
    )

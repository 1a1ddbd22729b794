from __future__ import annotations

from typing import Literal

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from patternminer.mining.models import Pattern

SortField = Literal["confidence", "support", "profitability", "frequency", "significance"]


class PatternFilter(BaseModel):
    model_config = ConfigDict(alias_generator=to_camel, populate_by_name=True, frozen=True)

    pattern_type: Literal["all", "bullish", "bearish", "neutral"] = "all"
    min_confidence: float = Field(0.5, ge=0, le=1)
    min_support: float = Field(0.01, ge=0, le=1)
    # -1 disables the profitability filter.
    min_profitability: float = -1.0
    sort_by: SortField = "confidence"
    sort_order: Literal["asc", "desc"] = "desc"

    min_sharpe_ratio: float | None = None
    max_drawdown: float | None = None
    min_frequency: int | None = None
    exclude_types: list[str] = Field(default_factory=list)


def _sort_key(field: SortField):
    return lambda p: float(getattr(p, field))


def apply_pattern_filters(patterns: list[Pattern], filt: PatternFilter | None = None) -> list[Pattern]:
    f = filt or PatternFilter()
    out = list(patterns)

    if f.pattern_type != "all":
        out = [p for p in out if p.type == f.pattern_type]
    out = [p for p in out if p.confidence >= f.min_confidence and p.support >= f.min_support]
    if f.min_profitability > -1:
        out = [p for p in out if p.profitability >= f.min_profitability]
    if f.min_sharpe_ratio is not None:
        out = [p for p in out if p.sharpe_ratio >= f.min_sharpe_ratio]
    if f.max_drawdown is not None:
        out = [p for p in out if p.max_drawdown <= f.max_drawdown]
    if f.min_frequency is not None:
        out = [p for p in out if p.frequency >= f.min_frequency]
    if f.exclude_types:
        excluded = set(f.exclude_types)
        out = [p for p in out if p.type not in excluded]

    # sorted() is stable, so ties keep mining order.
    return sorted(out, key=_sort_key(f.sort_by), reverse=f.sort_order == "desc")

from __future__ import annotations

from dataclasses import dataclass, field

from patternminer.mining.models import Pattern, RunStatistics


@dataclass
class PatternInsights:
    key_findings: list[str] = field(default_factory=list)
    recommendations: list[str] = field(default_factory=list)
    risk_warnings: list[str] = field(default_factory=list)
    opportunities: list[str] = field(default_factory=list)


def generate_insights(patterns: list[Pattern], stats: RunStatistics) -> PatternInsights:
    out = PatternInsights()

    if stats.total_patterns > 0:
        out.key_findings.append(
            f"Discovered {stats.total_patterns} patterns with {stats.unique_patterns} unique types"
        )
        out.key_findings.append(f"Average pattern confidence: {stats.avg_confidence * 100:.1f}%")
        out.key_findings.append(f"Overall profitability: {stats.overall_profitability * 100:.2f}%")

    if stats.avg_win_rate > 0.6:
        out.recommendations.append("High win rate patterns detected - consider increasing position sizing")
    elif stats.avg_win_rate < 0.4:
        out.recommendations.append("Low win rate patterns - focus on risk management and filtering")

    if stats.avg_sharpe_ratio > 1.0:
        out.recommendations.append("Strong risk-adjusted returns in-sample - validate forward before sizing up")
    elif stats.avg_sharpe_ratio < 0.5:
        out.recommendations.append("Poor risk-adjusted returns - refine pattern selection criteria")

    if stats.cross_validation_score < 0.5:
        out.risk_warnings.append("Low cross-validation score - patterns may not generalize well")
    if stats.out_of_sample_results.sharpe_ratio < 0.3:
        out.risk_warnings.append("Poor out-of-sample performance - high overfitting risk")

    if stats.pattern_frequency:
        top_type = max(stats.pattern_frequency.items(), key=lambda kv: kv[1])[0]
        out.opportunities.append(f"Focus on {top_type} patterns - highest frequency detected")
    if stats.avg_confidence > 0.8:
        out.opportunities.append("High confidence patterns available")

    if patterns:
        strong = [p for p in patterns if p.profitability > 0.05 and p.confidence > 0.8]
        if strong:
            out.opportunities.append(
                f"{len(strong)} high-performance patterns identified (>5% profit, >80% confidence)"
            )
        consistent = [p for p in patterns if p.support > 0.1 and p.sharpe_ratio > 1.0]
        if consistent:
            out.key_findings.append(
                f"{len(consistent)} patterns show both high frequency and good risk-adjusted returns"
            )
        risky = [p for p in patterns if p.max_drawdown > 0.1]
        if len(risky) > len(patterns) * 0.3:
            out.risk_warnings.append("High proportion of patterns show significant drawdown risk (>10%)")

    return out

from __future__ import annotations

import argparse
import json
from pathlib import Path

from loguru import logger

from patternminer.analysis.filters import PatternFilter
from patternminer.analysis.service import analyze_patterns
from patternminer.core.settings import settings
from patternminer.mining.engine import mine
from patternminer.mining.errors import MiningError
from patternminer.mining.models import MiningParams, MiningTuning, dump_result
from patternminer.mining.statistics import aggregate_statistics
from patternminer.series.synthetic import generate_pair_series
from patternminer.series.validation import load_series_json, validate_series
from patternminer.utils.logger import configure_logging


def _build_params(args: argparse.Namespace) -> MiningParams:
    return MiningParams(
        window_size=args.window_size,
        min_support=args.min_support,
        min_confidence=args.min_confidence,
        noise_filter=args.noise_filter,
        bootstrap_samples=args.bootstrap_samples,
        significance_level=args.significance_level,
        cross_validation_folds=args.cv_folds,
        time_frame=args.time_frame,
        tuning=MiningTuning(normalization=args.normalization, min_cluster_size=args.min_cluster_size),
    )


def main(argv: list[str] | None = None) -> int:
    ap = argparse.ArgumentParser(description="Mine frequent intraday price patterns from an OHLC series.")
    src = ap.add_mutually_exclusive_group()
    src.add_argument("--input", help="JSON array of bars {timestamp, open, high, low, close, volume?}")
    src.add_argument("--synthetic", type=int, default=None, help="generate N synthetic bars instead")
    ap.add_argument("--symbol", default=settings.SYNTHETIC_SYMBOL)
    ap.add_argument("--interval-minutes", type=int, default=settings.SYNTHETIC_INTERVAL_MINUTES)
    ap.add_argument("--window-size", type=int, default=settings.MINER_DEFAULT_WINDOW_SIZE)
    ap.add_argument("--min-support", type=float, default=settings.MINER_DEFAULT_MIN_SUPPORT)
    ap.add_argument("--min-confidence", type=float, default=settings.MINER_DEFAULT_MIN_CONFIDENCE)
    ap.add_argument("--noise-filter", type=float, default=settings.MINER_DEFAULT_NOISE_FILTER)
    ap.add_argument("--bootstrap-samples", type=int, default=settings.MINER_DEFAULT_BOOTSTRAP_SAMPLES)
    ap.add_argument("--significance-level", type=float, default=settings.MINER_DEFAULT_SIGNIFICANCE_LEVEL)
    ap.add_argument("--cv-folds", type=int, default=settings.MINER_DEFAULT_CV_FOLDS)
    ap.add_argument("--time-frame", default=settings.MINER_DEFAULT_TIME_FRAME)
    ap.add_argument("--normalization", choices=["minmax", "relative"], default="minmax")
    ap.add_argument("--min-cluster-size", type=int, default=5)
    ap.add_argument("--seed", type=int, default=settings.MINER_DEFAULT_SEED)
    ap.add_argument("--filter", action="store_true", help="post-filter patterns by --min-confidence")
    ap.add_argument("--analysis", action="store_true", help="also emit correlations / insights / indicators")
    ap.add_argument("--out", default=None, help="write JSON here instead of stdout")

    args = ap.parse_args(argv)
    configure_logging(settings.LOG_LEVEL, capture_warnings=True)

    try:
        if args.input:
            # Bad OHLC in the file surfaces as a pydantic ValidationError (a ValueError).
            bars = load_series_json(args.input)
            report = validate_series(bars)
            for issue in report.issues[:20]:
                logger.warning("series: {issue}", issue=issue)
        else:
            n = int(args.synthetic or settings.SYNTHETIC_DATA_POINTS)
            bars = generate_pair_series(args.symbol, n, interval_minutes=args.interval_minutes, seed=args.seed)

        params = _build_params(args)
        result = mine(bars, params, seed=args.seed)
    except (MiningError, ValueError) as e:
        raise SystemExit(f"Rejected: {e}")

    if args.filter:
        kept = [p for p in result.patterns if p.confidence >= params.min_confidence]
        logger.info("post-filter: {k}/{n} patterns with confidence >= {c}", k=len(kept), n=len(result.patterns), c=params.min_confidence)
        stats = aggregate_statistics(kept, tuning=params.tuning, time_frame=params.time_frame)
        metadata = result.metadata.model_copy(update={"patterns_found": len(kept)})
        result = result.model_copy(update={"patterns": kept, "statistics": stats, "metadata": metadata})

    if args.analysis:
        analysis = analyze_patterns(
            result.patterns,
            filters=PatternFilter(min_confidence=0.0, min_support=0.0),
            bars=bars,
            tuning=params.tuning,
            time_frame=params.time_frame,
        )
        payload = json.loads(dump_result(result))
        payload["analysis"] = analysis.to_dict()
        text = json.dumps(payload, indent=2)
    else:
        text = dump_result(result, indent=2)

    if args.out:
        Path(args.out).write_text(text, encoding="utf-8")
        logger.info("wrote {path}", path=args.out)
    else:
        print(text)
    return 0


if __name__ == "__main__":
    raise SystemExit(main())

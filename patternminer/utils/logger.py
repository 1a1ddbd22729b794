from __future__ import annotations

import sys
import warnings
from typing import Any, TextIO

from loguru import logger

from patternminer.core.settings import settings

_CLI_FORMAT = "<green>{time:HH:mm:ss}</green> | <level>{level: <7}</level> | {name}:{line} - {message}"
_default_showwarning = warnings.showwarning


def _log_warning(message: Any, category: type[Warning], filename: str, lineno: int, file: Any = None, line: Any = None) -> None:
    logger.opt(depth=2).warning("{cat}: {msg} ({file}:{lineno})", cat=category.__name__, msg=message, file=filename, lineno=lineno)


def configure_logging(
    level: str | None = None,
    *,
    json: bool | None = None,
    sink: TextIO | None = None,
    capture_warnings: bool = False,
) -> None:
    """Replace loguru's default sink with one stderr sink.

    Level and JSON mode fall back to LOG_LEVEL / LOG_JSON. With
    capture_warnings, Python warnings (numpy, scikit-learn) go through the
    same sink; otherwise the stock warnings handler is (re)installed.
    """

    serialize = bool(settings.LOG_JSON) if json is None else bool(json)
    logger.remove()
    logger.add(
        sink or sys.stderr,
        level=(level or settings.LOG_LEVEL).upper(),
        format=_CLI_FORMAT,
        backtrace=False,
        diagnose=False,
        serialize=serialize,
    )
    warnings.showwarning = _log_warning if capture_warnings else _default_showwarning

from __future__ import annotations

import io
import json
import warnings

from loguru import logger

from patternminer.utils.logger import _log_warning, configure_logging


def test_configure_logging_filters_by_level():
    buf = io.StringIO()
    configure_logging("WARNING", sink=buf)
    try:
        logger.info("quiet")
        logger.warning("loud")
    finally:
        logger.remove()
    out = buf.getvalue()
    assert "loud" in out
    assert "quiet" not in out


def test_configure_logging_json_mode():
    buf = io.StringIO()
    configure_logging("INFO", json=True, sink=buf)
    try:
        logger.info("structured")
    finally:
        logger.remove()
    record = json.loads(buf.getvalue().splitlines()[0])
    assert record["record"]["message"] == "structured"


def test_python_warnings_are_routed_to_loguru():
    buf = io.StringIO()
    original = warnings.showwarning
    configure_logging("DEBUG", sink=buf, capture_warnings=True)
    try:
        with warnings.catch_warnings():
            warnings.simplefilter("always")
            warnings.warn("numerics went odd", RuntimeWarning)
    finally:
        logger.remove()
        warnings.showwarning = original
    assert "RuntimeWarning: numerics went odd" in buf.getvalue()


def test_warning_capture_is_opt_in_and_reversible():
    original = warnings.showwarning
    try:
        configure_logging("INFO", sink=io.StringIO())
        assert warnings.showwarning is not _log_warning

        configure_logging("INFO", sink=io.StringIO(), capture_warnings=True)
        assert warnings.showwarning is _log_warning

        configure_logging("INFO", sink=io.StringIO())
        assert warnings.showwarning is not _log_warning
    finally:
        logger.remove()
        warnings.showwarning = original

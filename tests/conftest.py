import os
import sys

import pytest

# Ensure repository root is on sys.path so `import patternminer` works when running pytest.
REPO_ROOT = os.path.abspath(os.path.join(os.path.dirname(__file__), ".."))
if REPO_ROOT not in sys.path:
    sys.path.insert(0, REPO_ROOT)


@pytest.fixture(autouse=True)
def _isolate_settings(monkeypatch):
    """Keep tests independent of a developer .env.

    Only the CLI / analysis layer reads settings; pin the values they use so
    perf logging and indicator periods are the documented defaults.
    """

    from patternminer.core.settings import settings as app_settings

    monkeypatch.setattr(app_settings, "APP_ENV", "test", raising=False)
    monkeypatch.setattr(app_settings, "PERF_LOG_ENABLED", False, raising=False)
    monkeypatch.setattr(app_settings, "PERF_LOG_INNER_ALWAYS", False, raising=False)
    monkeypatch.setattr(app_settings, "ANALYSIS_RSI_PERIOD", 14, raising=False)
    monkeypatch.setattr(app_settings, "ANALYSIS_MACD_FAST", 12, raising=False)
    monkeypatch.setattr(app_settings, "ANALYSIS_MACD_SLOW", 26, raising=False)
    monkeypatch.setattr(app_settings, "ANALYSIS_BOLL_PERIOD", 20, raising=False)
    yield

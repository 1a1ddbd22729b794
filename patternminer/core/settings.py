from __future__ import annotations

from pydantic_settings import BaseSettings, SettingsConfigDict


class Settings(BaseSettings):
    model_config = SettingsConfigDict(env_file=".env", env_file_encoding="utf-8", extra="ignore")

    APP_ENV: str = "dev"
    LOG_LEVEL: str = "INFO"
    LOG_JSON: bool = False

    # Performance logging (console)
    PERF_LOG_ENABLED: bool = True
    # Log slow spans at WARNING when >= this threshold.
    PERF_LOG_SLOW_MS: int = 250
    # If true, logs all spans (can be noisy). If false, logs only slow spans.
    PERF_LOG_INNER_ALWAYS: bool = False

    # Mining defaults used by the CLI / analysis layer.
    # The mining engine itself never reads these: callers pass MiningParams explicitly.
    MINER_DEFAULT_WINDOW_SIZE: int = 20
    MINER_DEFAULT_MIN_SUPPORT: float = 0.05
    MINER_DEFAULT_MIN_CONFIDENCE: float = 0.7
    MINER_DEFAULT_NOISE_FILTER: float = 0.1
    MINER_DEFAULT_BOOTSTRAP_SAMPLES: int = 1000
    MINER_DEFAULT_SIGNIFICANCE_LEVEL: float = 0.05
    MINER_DEFAULT_CV_FOLDS: int = 5
    MINER_DEFAULT_TIME_FRAME: str = "1h"
    # Set to empty in .env to run unseeded (non-reproducible).
    MINER_DEFAULT_SEED: int | None = 42

    # Synthetic series generator (demo / offline runs)
    SYNTHETIC_SYMBOL: str = "EURUSD"
    SYNTHETIC_DATA_POINTS: int = 10000
    SYNTHETIC_INTERVAL_MINUTES: int = 15

    # Post-mining analysis
    ANALYSIS_RSI_PERIOD: int = 14
    ANALYSIS_MACD_FAST: int = 12
    ANALYSIS_MACD_SLOW: int = 26
    ANALYSIS_BOLL_PERIOD: int = 20


settings = Settings()

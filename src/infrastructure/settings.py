"""Application Settings and Configuration.

This module provides application-wide settings loaded from environment
variables with sensible defaults.

Data Quality Impact:
    - The phone country code drives the phone normalization rules
    - Settings are validated before use (invalid numbers fail fast at startup)
"""

import os

# Application metadata
APP_NAME = "Clinical-Normalizer"
APP_VERSION = "1.0.0"

# Default chunk size for CSV ingestion
DEFAULT_CHUNK_SIZE = 10000

# Thread pool defaults for per-record normalization
DEFAULT_MAX_WORKERS = 4
DEFAULT_PARALLEL_THRESHOLD = 50000

DEFAULT_COUNTRY_CODE = "260"


def _env_bool(name: str, default: bool) -> bool:
    return os.getenv(name, "true" if default else "false").strip().lower() in ("1", "true", "yes")


def _env_int(name: str, default: int, minimum: int = 0) -> int:
    raw = os.getenv(name, str(default))
    try:
        value = int(raw)
    except ValueError:
        raise ValueError(f"Environment variable {name} must be an integer. Got: {raw!r}")
    if value < minimum:
        raise ValueError(f"Environment variable {name} must be >= {minimum}. Got: {value}")
    return value


class Settings:
    """Application settings loaded from the environment.

    Environment variables (prefix ``CN_``):
        CN_APP_NAME: Display name
        CN_LOG_LEVEL: Logging level (default: INFO)
        CN_LOG_JSON: Emit JSON log lines (default: false)
        CN_CHUNK_SIZE: CSV read chunk size (default: 10000)
        CN_MAX_WORKERS: Normalization thread pool size (default: 4)
        CN_PARALLEL_THRESHOLD: Minimum batch size for the thread pool (default: 50000)
        CN_PHONE_COUNTRY_CODE: Dialling code used by the phone rules (default: 260)
        CN_REPORT_DIR: Default directory for quality reports (default: reports)
    """

    def __init__(self):
        """Initialize settings from environment."""
        self.app_name = os.getenv("CN_APP_NAME", APP_NAME)
        self.app_version = APP_VERSION

        # Logging
        self.log_level = os.getenv("CN_LOG_LEVEL", "INFO")
        self.log_json = _env_bool("CN_LOG_JSON", False)

        # Ingestion
        self.chunk_size = _env_int("CN_CHUNK_SIZE", DEFAULT_CHUNK_SIZE, minimum=1)

        # Normalization
        self.max_workers = _env_int("CN_MAX_WORKERS", DEFAULT_MAX_WORKERS, minimum=1)
        self.parallel_threshold = _env_int("CN_PARALLEL_THRESHOLD", DEFAULT_PARALLEL_THRESHOLD)
        self.phone_country_code = os.getenv("CN_PHONE_COUNTRY_CODE", DEFAULT_COUNTRY_CODE)

        # Reporting
        self.report_dir = os.getenv("CN_REPORT_DIR", "reports")


# Global settings instance
settings = Settings()

"""Configuration helpers for the Study Scheduler runtime."""

from __future__ import annotations

import os
from dataclasses import dataclass


DEFAULT_MAX_ATTEMPTS = 3
DEFAULT_PROGRESS_WINDOW_DAYS = 30


@dataclass(frozen=True)
class AppSettings:
    """Strongly typed application settings loaded from environment variables."""

    app_name: str
    app_env: str
    log_level: str
    review_max_attempts: int
    progress_window_days: int

    @classmethod
    def from_env(cls) -> AppSettings:
        """Construct settings directly from environment variables."""
        app_name = os.getenv("APP_NAME", "Study Scheduler")
        app_env = os.getenv("APP_ENV", "development")
        log_level = os.getenv("LOG_LEVEL", "INFO")

        try:
            review_max_attempts = int(os.getenv("REVIEW_MAX_ATTEMPTS", str(DEFAULT_MAX_ATTEMPTS)))
        except ValueError as exc:
            raise RuntimeError("REVIEW_MAX_ATTEMPTS must be an integer.") from exc

        if review_max_attempts < 1:
            raise RuntimeError("REVIEW_MAX_ATTEMPTS must be a positive integer.")

        try:
            progress_window_days = int(
                os.getenv("PROGRESS_WINDOW_DAYS", str(DEFAULT_PROGRESS_WINDOW_DAYS))
            )
        except ValueError as exc:
            raise RuntimeError("PROGRESS_WINDOW_DAYS must be an integer.") from exc
        if progress_window_days < 1 or progress_window_days > 365:
            raise RuntimeError("PROGRESS_WINDOW_DAYS must be between 1 and 365.")

        return cls(
            app_name=app_name,
            app_env=app_env,
            log_level=log_level,
            review_max_attempts=review_max_attempts,
            progress_window_days=progress_window_days,
        )

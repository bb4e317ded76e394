"""Bootstrap logic for the study scheduler services."""

from __future__ import annotations

import logging

from src.app.settings import AppSettings
from src.db import get_session_factory, run_migrations_if_needed
from src.study.review_workflow import ReviewWorkflow


LOGGER = logging.getLogger(__name__)


def _configure_logging(log_level: str) -> None:
    """Set up project-wide logging configuration."""
    logging.basicConfig(
        format="%(asctime)s %(levelname)s %(name)s %(message)s",
        level=log_level,
    )


def bootstrap(settings: AppSettings) -> ReviewWorkflow:
    """Prepare the database and return a review workflow bound to it."""
    _configure_logging(settings.log_level)

    try:
        run_migrations_if_needed()
    except Exception:
        LOGGER.exception("Database migrations failed. Aborting startup.")
        raise

    workflow = ReviewWorkflow(
        get_session_factory(),
        max_attempts=settings.review_max_attempts,
        progress_window_days=settings.progress_window_days,
    )
    LOGGER.info("%s is ready in %s mode.", settings.app_name, settings.app_env)
    return workflow

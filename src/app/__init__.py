"""Application bootstrap helpers for the Study Scheduler project."""

from .runtime import bootstrap
from .settings import AppSettings

__all__ = ["bootstrap", "AppSettings"]

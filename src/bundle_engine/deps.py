"""Dependency injection singletons for Bundle-Engine."""

from bundle_engine.common.config import get_settings
from bundle_engine.progress.service import ProgressService

_progress: ProgressService | None = None


def get_progress_service() -> ProgressService:
    global _progress
    if _progress is None:
        _progress = ProgressService(get_settings())
    return _progress


def reset_singletons() -> None:
    """Reset all singletons (for testing)."""
    global _progress
    _progress = None

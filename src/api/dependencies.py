"""FastAPI Dependencies.

Process-wide service singletons injected into route handlers. Tests
swap them through ``app.dependency_overrides``.
"""

import logging
import threading
from typing import Optional

from src.imports.manager import ImportLifecycleManager
from src.live_intake.config import IntakeConfig
from src.live_intake.pipeline import LiveIntakePipeline

logger = logging.getLogger(__name__)

# ── Singleton instances (shared per process) ──────────────────────────

_manager: Optional[ImportLifecycleManager] = None
_pipeline: Optional[LiveIntakePipeline] = None
_lock = threading.Lock()


def get_manager() -> ImportLifecycleManager:
    """Return (or create) the global ImportLifecycleManager singleton."""
    global _manager
    with _lock:
        if _manager is None:
            _manager = ImportLifecycleManager()
        return _manager


def get_pipeline() -> LiveIntakePipeline:
    """Return (or create) the global LiveIntakePipeline singleton.

    The pipeline starts idle; ``start_pipeline`` installs its timers.
    """
    global _pipeline
    manager = get_manager()
    with _lock:
        if _pipeline is None:
            _pipeline = LiveIntakePipeline(manager, config=IntakeConfig.from_settings())
        return _pipeline


def start_pipeline() -> LiveIntakePipeline:
    pipeline = get_pipeline()
    pipeline.start()
    return pipeline


def shutdown_pipeline() -> None:
    """Stop the pipeline if one was created and forget both singletons."""
    global _manager, _pipeline
    with _lock:
        pipeline, _pipeline, _manager = _pipeline, None, None
    if pipeline is not None:
        pipeline.shutdown()

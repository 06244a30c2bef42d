"""
Model loader
------------

Loads the analyzer's sub-models once per session, strictly in order
(detector → landmarks → expressions → age/gender), off the event loop.

- Success flips ModelReadiness exactly once; it never reverts.
- Failure at any stage is final for the session (no retry).
- After teardown() nothing is mutated, even if a stage is still running.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
import asyncio
import logging
from typing import Callable, List, Optional

# -----------------------------------------------------------------------------
# Local
# -----------------------------------------------------------------------------
from webcam_analyzer.processing.errors import LoadError
from webcam_analyzer.processing.models.data_models import LOAD_ORDER, FaceAnalyzer
from webcam_analyzer.processing.status import (
    STATUS_LOAD_FAILED,
    STATUS_LOADING,
    STATUS_MODELS_LOADED,
    StatusBoard,
)

logger = logging.getLogger(__name__)

# -----------------------------------------------------------------------------
# Readiness flag
# -----------------------------------------------------------------------------


class ModelReadiness:
    """One-time settable flag. Listeners are told once, when it becomes ready."""

    def __init__(self) -> None:
        self._ready = False
        self._listeners: List[Callable[[], None]] = []

    @property
    def is_ready(self) -> bool:
        return self._ready

    def mark_ready(self) -> None:
        if self._ready:
            return
        self._ready = True
        for listener in list(self._listeners):
            listener()

    def subscribe(self, listener: Callable[[], None]) -> None:
        self._listeners.append(listener)


# -----------------------------------------------------------------------------
# Loader
# -----------------------------------------------------------------------------


class ModelLoader:
    """
    Runs analyzer.load_stage() for every stage in LOAD_ORDER.

    The result is remembered: calling load() again returns the first outcome
    without touching the analyzer.
    """

    def __init__(
        self,
        analyzer: FaceAnalyzer,
        readiness: ModelReadiness,
        status: StatusBoard,
    ) -> None:
        self.analyzer = analyzer
        self.readiness = readiness
        self.status = status
        self.last_error: Optional[LoadError] = None
        self._finished = False
        self._torn_down = False
        self._lock = asyncio.Lock()

    async def load(self) -> bool:
        """Load every stage. Returns True when the analyzer is ready."""
        async with self._lock:
            if self._finished or self._torn_down:
                return self.readiness.is_ready

            self.status.set(STATUS_LOADING)
            for stage in LOAD_ORDER:
                if self._torn_down:
                    logger.info("Model loading abandoned before stage '%s'", stage.value)
                    return False
                try:
                    logger.info("Loading model stage '%s'", stage.value)
                    await asyncio.to_thread(self.analyzer.load_stage, stage)
                except Exception as exc:  # noqa: BLE001
                    if self._torn_down:
                        logger.info("Stage '%s' failed after teardown: %s", stage.value, exc)
                        return False
                    self._fail(LoadError(stage.value, str(exc) or type(exc).__name__))
                    return False

            if self._torn_down:
                logger.info("Model loading finished after teardown; result discarded")
                return False

            self._finished = True
            self.readiness.mark_ready()
            self.status.set(STATUS_MODELS_LOADED)
            logger.info("All model stages loaded")
            return True

    def _fail(self, error: LoadError) -> None:
        self._finished = True
        self.last_error = error
        logger.error("Model stage '%s' failed: %s", error.stage, error.reason)
        self.status.set(STATUS_LOAD_FAILED.format(reason=error))

    def teardown(self) -> None:
        """Detach from the session. An in-flight stage may finish; its result is dropped."""
        self._torn_down = True

"""
Detection Loop
--------------

Periodic inference over the live camera frame.

Active only while the session says so (models ready AND camera active).
Per tick, in order:
1. read the latest frame; no frame → skip the tick
2. issue one analyzer call, unless the previous call is still in flight
3. drop the result if the loop was deactivated while the call was pending
4. summarize the first face into LatestResult (None when no face)
5. hand the raw detections to the overlay renderer (empty clears it)

A failing analyzer call counts as "no face" for that tick; the loop goes on.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
import asyncio
import logging
from typing import Callable, List, Optional, Set

# -----------------------------------------------------------------------------
# Local
# -----------------------------------------------------------------------------
from webcam_analyzer.processing.data_input.live_source import LiveFrameSource
from webcam_analyzer.processing.drawing.overlay_renderer import OverlayRenderer
from webcam_analyzer.processing.models.data_models import FaceAnalyzer, FaceDetection
from webcam_analyzer.processing.pipeline.data_models import (
    CancellationToken,
    LatestResult,
    TickState,
)
from webcam_analyzer.processing.pipeline.stages import summarize_detections

logger = logging.getLogger(__name__)

DEFAULT_INTERVAL_SEC = 0.3

FrameSourceProvider = Callable[[], Optional[LiveFrameSource]]


class DetectionLoop:
    """
    Owns LatestResult and the periodic scheduling task.

    activate()/deactivate() are driven by AnalyzerSession. tick_once() runs a
    single tick and is what the scheduling task launches every interval.
    """

    def __init__(
        self,
        analyzer: FaceAnalyzer,
        renderer: OverlayRenderer,
        frame_source: FrameSourceProvider,
        interval_sec: float = DEFAULT_INTERVAL_SEC,
    ) -> None:
        self.analyzer = analyzer
        self.renderer = renderer
        self.frame_source = frame_source
        self.interval_sec = interval_sec

        self._latest: Optional[LatestResult] = None
        self._token: Optional[CancellationToken] = None
        self._task: Optional[asyncio.Task] = None
        self._ticks: Set[asyncio.Task] = set()
        self._inflight: Optional[asyncio.Task] = None
        self._tick_state = TickState.IDLE

        # ----- Diagnostics -----
        self.ticks_completed = 0
        self.ticks_skipped = 0
        self.ticks_discarded = 0
        self.ticks_failed = 0

    # -------------------------------------------------------------------------
    # Read-only state
    # -------------------------------------------------------------------------

    @property
    def latest_result(self) -> Optional[LatestResult]:
        return self._latest

    @property
    def tick_state(self) -> TickState:
        return self._tick_state

    @property
    def is_active(self) -> bool:
        return self._token is not None and not self._token.cancelled

    @property
    def has_inflight_call(self) -> bool:
        return self._inflight is not None

    # -------------------------------------------------------------------------
    # Activation
    # -------------------------------------------------------------------------

    def activate(self) -> None:
        """Start ticking every interval. Must be called from the event loop."""
        if self.is_active:
            return
        token = CancellationToken()
        self._token = token
        self._task = asyncio.get_running_loop().create_task(
            self._run(token), name="detection-loop"
        )
        logger.info("Detection loop activated (interval=%.3fs)", self.interval_sec)

    def deactivate(self) -> None:
        """Stop scheduling ticks and discard any result still in flight."""
        token = self._token
        if token is None:
            return
        token.cancel()
        self._token = None
        task = self._task
        self._task = None
        if task is not None and not task.done():
            task.cancel()
        logger.info(
            "Detection loop deactivated (completed=%d skipped=%d discarded=%d failed=%d)",
            self.ticks_completed,
            self.ticks_skipped,
            self.ticks_discarded,
            self.ticks_failed,
        )

    async def _run(self, token: CancellationToken) -> None:
        """
        Fire a tick every interval_sec on fixed deadlines.

        Ticks are launched, not awaited, so a slow analyzer call does not stretch
        the period; ticks landing while it is pending are skipped by tick_once().
        """
        loop = asyncio.get_running_loop()
        next_at = loop.time()
        try:
            while not token.cancelled:
                self._launch_tick(token)
                next_at += self.interval_sec
                delay = next_at - loop.time()
                if delay < 0:
                    # Behind schedule: carry on from now instead of replaying missed ticks
                    next_at = loop.time()
                    delay = 0
                await asyncio.sleep(delay)
        except asyncio.CancelledError:
            logger.debug("Detection loop task cancelled")

    def _launch_tick(self, token: CancellationToken) -> None:
        tick = asyncio.create_task(self.tick_once(token))
        self._ticks.add(tick)
        tick.add_done_callback(self._on_tick_done)

    def _on_tick_done(self, tick: asyncio.Task) -> None:
        self._ticks.discard(tick)
        if not tick.cancelled() and tick.exception() is not None:
            logger.error("Detection tick crashed: %s", tick.exception(), exc_info=tick.exception())

    # -------------------------------------------------------------------------
    # In-flight tracking
    # -------------------------------------------------------------------------

    def _on_inflight_done(self, inflight: asyncio.Task) -> None:
        if self._inflight is inflight:
            self._inflight = None
            self._tick_state = TickState.SETTLED
        if not inflight.cancelled() and inflight.exception() is not None:
            # Retrieved here so an abandoned call never logs "exception was never retrieved"
            logger.debug("Inference call finished with error: %s", inflight.exception())

    # -------------------------------------------------------------------------
    # One tick
    # -------------------------------------------------------------------------

    async def tick_once(self, token: Optional[CancellationToken] = None) -> bool:
        """
        Run one tick. Returns True when a result was applied.

        Without an active token nothing is issued.
        """
        token = token or self._token
        if token is None or token.cancelled:
            return False

        source = self.frame_source()
        packet = source.read_frame() if source is not None else None
        if packet is None:
            self.ticks_skipped += 1
            logger.debug("Tick skipped: no frame available")
            return False

        if self._inflight is not None:
            self.ticks_skipped += 1
            logger.debug("Tick skipped: previous inference still pending")
            return False

        inflight = asyncio.create_task(asyncio.to_thread(self.analyzer.analyze, packet.frame))
        self._inflight = inflight
        self._tick_state = TickState.PENDING
        inflight.add_done_callback(self._on_inflight_done)

        detections: List[FaceDetection]
        try:
            # Shielded: cancelling the loop must not hide a call that is still running
            detections = list(await asyncio.shield(inflight) or [])
        except asyncio.CancelledError:
            raise
        except Exception as exc:  # noqa: BLE001
            self.ticks_failed += 1
            logger.warning("Detection failed on frame %d: %s", packet.frame_index, exc)
            detections = []

        if token.cancelled:
            self.ticks_discarded += 1
            logger.debug("Discarding result of frame %d: loop deactivated", packet.frame_index)
            return False

        self._latest = summarize_detections(detections)
        self.renderer.render(detections, packet.dimensions)
        self.ticks_completed += 1
        return True

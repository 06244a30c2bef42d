"""
Analyzer session
----------------

The single context object for one user session. Owns:
- status board and model readiness
- model loader, capture controller, detection loop
- overlay surface/renderer and snapshot exporter

The detection loop is never toggled directly: the session re-evaluates
"ready AND capture active" whenever readiness or capture state changes and
activates or deactivates the loop to match.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
import logging
from typing import Any, Dict, Optional

# -----------------------------------------------------------------------------
# Local
# -----------------------------------------------------------------------------
from webcam_analyzer.processing.data_input.capture_controller import CaptureController, CaptureState
from webcam_analyzer.processing.data_input.live_source import LiveFrameSource
from webcam_analyzer.processing.drawing.overlay_renderer import OverlayRenderer
from webcam_analyzer.processing.drawing.overlay_surface import OverlaySurface
from webcam_analyzer.processing.models.data_models import FaceAnalyzer
from webcam_analyzer.processing.models.model_loader import ModelLoader, ModelReadiness
from webcam_analyzer.processing.pipeline.data_models import LatestResult
from webcam_analyzer.processing.pipeline.detection_loop import DEFAULT_INTERVAL_SEC, DetectionLoop
from webcam_analyzer.processing.processing_output.file_offer import DownloadOffer, FileOffer
from webcam_analyzer.processing.processing_output.snapshot_exporter import SnapshotExporter
from webcam_analyzer.processing.status import StatusBoard

logger = logging.getLogger(__name__)


class AnalyzerSession:
    def __init__(
        self,
        analyzer: FaceAnalyzer,
        capture: CaptureController,
        status: StatusBoard,
        interval_sec: float = DEFAULT_INTERVAL_SEC,
        file_offer: Optional[FileOffer] = None,
        snapshot_prefix: str = "snapshot",
    ) -> None:
        self.status = status
        self.readiness = ModelReadiness()
        self.loader = ModelLoader(analyzer, self.readiness, status)
        self.capture = capture
        self.surface = OverlaySurface()
        self.renderer = OverlayRenderer(self.surface)
        self.detection_loop = DetectionLoop(
            analyzer,
            self.renderer,
            self._frame_source,
            interval_sec=interval_sec,
        )
        self.file_offer = file_offer or DownloadOffer()
        self.exporter = SnapshotExporter(
            self._frame_source,
            self.surface,
            self.file_offer,
            filename_prefix=snapshot_prefix,
        )
        self._closed = False

        self.readiness.subscribe(self._on_readiness_changed)
        self.capture.subscribe(self._on_capture_changed)

    # -------------------------------------------------------------------------
    # Activation condition
    # -------------------------------------------------------------------------

    def _frame_source(self) -> Optional[LiveFrameSource]:
        return self.capture.frame_source

    @property
    def should_detect(self) -> bool:
        return not self._closed and self.readiness.is_ready and self.capture.is_active

    def _reconcile(self) -> None:
        if self.should_detect:
            self.detection_loop.activate()
        else:
            self.detection_loop.deactivate()

    def _on_readiness_changed(self) -> None:
        self._reconcile()

    def _on_capture_changed(self, state: CaptureState) -> None:
        self._reconcile()

    # -------------------------------------------------------------------------
    # Operations
    # -------------------------------------------------------------------------

    @property
    def is_closed(self) -> bool:
        return self._closed

    async def load_models(self) -> bool:
        return await self.loader.load()

    async def start_capture(self) -> bool:
        if self._closed:
            return False
        return await self.capture.start()

    def stop_capture(self) -> None:
        self.capture.stop()

    def snapshot(self) -> Optional[bytes]:
        return self.exporter.capture()

    def preview(self, jpeg_quality: int = 85) -> Optional[bytes]:
        return self.exporter.compose_preview(jpeg_quality)

    @property
    def latest_result(self) -> Optional[LatestResult]:
        return self.detection_loop.latest_result

    def describe(self) -> Dict[str, Any]:
        """Flat status view for the API."""
        load_error = self.loader.last_error
        capture_error = self.capture.last_error
        return {
            "status": self.status.message,
            "models_ready": self.readiness.is_ready,
            "capture_state": self.capture.state.value,
            "detecting": self.detection_loop.is_active,
            "tick_state": self.detection_loop.tick_state.value,
            "ticks_completed": self.detection_loop.ticks_completed,
            "load_error": str(load_error) if load_error else None,
            "capture_error": capture_error.reason if capture_error else None,
        }

    def close(self) -> None:
        """Tear the session down: loader detached, loop stopped, camera released."""
        if self._closed:
            return
        self._closed = True
        self.loader.teardown()
        self.detection_loop.deactivate()
        self.capture.stop()
        logger.info("Analyzer session closed")

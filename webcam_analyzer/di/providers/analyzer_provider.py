from typing import TYPE_CHECKING

from ...core.config import get_settings
from ...processing.data_input.capture_controller import CaptureController
from ...processing.models.providers.deepface_analyzer import DeepFaceAnalyzer
from ...processing.processing_output.file_offer import DownloadOffer
from ...processing.session import AnalyzerSession
from ...processing.status import StatusBoard

if TYPE_CHECKING:
    from ..base_container import BaseContainer


class AnalyzerProvider:
    """Analyzer provider - registers the session and its collaborators."""

    @staticmethod
    def register(container: "BaseContainer") -> None:
        """
        Register the analyzer session.
        One session per process (single local user), so everything is a singleton.
        """
        try:
            container.get(AnalyzerSession)
            return
        except ValueError:
            pass

        settings = get_settings()
        status = StatusBoard()
        analyzer = DeepFaceAnalyzer(detector_backend=settings.detector_backend)
        capture = CaptureController(
            status,
            device_index=settings.camera_index,
            frame_width=settings.camera_width,
            frame_height=settings.camera_height,
            read_timeout_sec=settings.camera_read_timeout_sec,
        )
        download_offer = DownloadOffer()
        session = AnalyzerSession(
            analyzer,
            capture,
            status,
            interval_sec=settings.detection_interval_sec,
            file_offer=download_offer,
            snapshot_prefix=settings.snapshot_prefix,
        )

        container.register_singleton(StatusBoard, status)
        container.register_singleton(DeepFaceAnalyzer, analyzer)
        container.register_singleton(CaptureController, capture)
        container.register_singleton(DownloadOffer, download_offer)
        container.register_singleton(AnalyzerSession, session)

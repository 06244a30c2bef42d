"""
Shared pytest fixtures for webcam analyzer tests.
"""
import pytest

from webcam_analyzer.processing.data_input.capture_controller import CaptureController
from webcam_analyzer.processing.processing_output.file_offer import DownloadOffer
from webcam_analyzer.processing.session import AnalyzerSession
from webcam_analyzer.processing.status import StatusBoard
from tests.fakes import FakeAnalyzer, FakeCaptureFactory


@pytest.fixture
def status_board():
    return StatusBoard()


@pytest.fixture
def fake_analyzer():
    analyzer = FakeAnalyzer()
    yield analyzer
    analyzer.release()


@pytest.fixture
def capture_factory():
    return FakeCaptureFactory()


@pytest.fixture
def capture_controller(status_board, capture_factory):
    controller = CaptureController(status_board, device_index=0, capture_factory=capture_factory)
    yield controller
    controller.stop()


@pytest.fixture
def download_offer():
    return DownloadOffer()


@pytest.fixture
def session(fake_analyzer, capture_controller, status_board, download_offer):
    analyzer_session = AnalyzerSession(
        fake_analyzer,
        capture_controller,
        status_board,
        interval_sec=0.01,
        file_offer=download_offer,
    )
    yield analyzer_session
    analyzer_session.close()

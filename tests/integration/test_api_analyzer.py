"""
Integration tests for analyzer API endpoints.
Uses TestClient with a container serving a session built on fakes (no models,
no webcam). Runs the full app lifespan, including background model loading.
Note: slower than unit tests. Use: pytest tests/unit/ for fast unit-only runs.
"""
import time
from unittest.mock import MagicMock, patch

import pytest

pytestmark = pytest.mark.integration
from fastapi.testclient import TestClient

from webcam_analyzer.processing.models.data_models import LoadStage
from webcam_analyzer.processing.processing_output.file_offer import DownloadOffer
from webcam_analyzer.processing.session import AnalyzerSession
from tests.fakes import FakeAnalyzer, FakeCaptureFactory, make_face

BASE = "/api/v1/analyzer"


@pytest.fixture
def mock_container(session, download_offer):
    container = MagicMock()
    container.get.side_effect = lambda cls: {
        AnalyzerSession: session,
        DownloadOffer: download_offer,
    }.get(cls, None)
    return container


@pytest.fixture
def client(mock_container, fake_analyzer):
    """Create test client with mocked container."""
    from webcam_analyzer.main import app

    with patch("webcam_analyzer.main.get_container", return_value=mock_container), patch(
        "webcam_analyzer.api.v1.analyzer_controller.get_container", return_value=mock_container
    ):
        with TestClient(app) as c:
            yield c
            fake_analyzer.release()


def _wait_until(client, predicate, path="/status", timeout=2.0):
    deadline = time.monotonic() + timeout
    while True:
        data = client.get(BASE + path).json()
        if predicate(data):
            return data
        if time.monotonic() > deadline:
            raise AssertionError(f"condition not reached, last response: {data}")
        time.sleep(0.01)


class TestAnalyzerAPI:
    """Tests for /api/v1/analyzer endpoints"""

    def test_models_load_on_startup(self, client):
        data = _wait_until(client, lambda d: d["models_ready"])
        assert data["status"] == "Models loaded"
        assert data["capture_state"] == "idle"
        assert data["detecting"] is False

    def test_start_detect_and_stop(self, client, fake_analyzer):
        fake_analyzer.default_result = [
            make_face(age=24.4, gender="male", expressions={"sad": 0.2, "happy": 0.7})
        ]
        _wait_until(client, lambda d: d["models_ready"])

        response = client.post(BASE + "/start")
        assert response.status_code == 200
        assert response.json() == {"capture_state": "active", "status": "Running"}

        result = _wait_until(client, lambda d: d["face_detected"], path="/result")
        assert result == {"face_detected": True, "age": "24", "gender": "male", "emotion": "happy"}

        response = client.post(BASE + "/stop")
        assert response.status_code == 200
        assert response.json() == {"capture_state": "idle", "status": "Stopped"}
        # Last result stays visible after stop
        assert client.get(BASE + "/result").json()["face_detected"] is True

    def test_stop_twice(self, client):
        assert client.post(BASE + "/stop").status_code == 200
        response = client.post(BASE + "/stop")
        assert response.status_code == 200
        assert response.json()["capture_state"] == "idle"

    def test_result_without_face(self, client):
        response = client.get(BASE + "/result")
        assert response.status_code == 200
        assert response.json() == {"face_detected": False, "age": None, "gender": None, "emotion": None}

    def test_frame_and_snapshot_require_camera(self, client, download_offer):
        assert client.get(BASE + "/frame.jpg").status_code == 409
        assert client.post(BASE + "/snapshot").status_code == 409
        assert download_offer.take() is None

    def test_frame_preview(self, client):
        _wait_until(client, lambda d: d["models_ready"])
        client.post(BASE + "/start")

        response = client.get(BASE + "/frame.jpg")
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/jpeg"
        assert response.content[:2] == b"\xff\xd8"

    def test_snapshot_download(self, client):
        _wait_until(client, lambda d: d["models_ready"])
        client.post(BASE + "/start")

        response = client.post(BASE + "/snapshot")
        assert response.status_code == 200
        assert response.headers["content-type"] == "image/png"
        disposition = response.headers["content-disposition"]
        assert disposition.startswith('attachment; filename="snapshot_')
        assert disposition.endswith('.png"')
        assert response.content[:8] == b"\x89PNG\r\n\x1a\n"


class TestStartBeforeReady:
    """Start is refused while models are not loaded"""

    @pytest.fixture
    def fake_analyzer(self):
        analyzer = FakeAnalyzer(fail_stage=LoadStage.DETECTOR)
        yield analyzer
        analyzer.release()

    def test_start_rejected_when_models_failed(self, client, capture_factory):
        data = _wait_until(client, lambda d: d["load_error"] is not None)
        assert data["status"].startswith("Model load failed: ")

        response = client.post(BASE + "/start")
        assert response.status_code == 409
        assert capture_factory.created == []


class TestCameraError:
    """Camera failures map to 503 and leave the session retryable"""

    @pytest.fixture
    def capture_factory(self):
        return FakeCaptureFactory(opened=False)

    def test_start_camera_error(self, client, capture_factory):
        _wait_until(client, lambda d: d["models_ready"])

        response = client.post(BASE + "/start")
        assert response.status_code == 503
        assert "Camera error" in response.json()["detail"]

        status = client.get(BASE + "/status").json()
        assert status["capture_state"] == "idle"
        assert status["status"].startswith("Camera error: ")
        assert status["capture_error"] is not None

        capture_factory.opened = True
        assert client.post(BASE + "/start").status_code == 200

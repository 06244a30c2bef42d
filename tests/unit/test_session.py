"""
Unit tests for AnalyzerSession: loop activation follows readiness and camera
state, stop/teardown discard late results.
"""
import asyncio

import pytest
import pytest_asyncio

from webcam_analyzer.processing.data_input.capture_controller import CaptureState
from webcam_analyzer.processing.models.data_models import LoadStage
from webcam_analyzer.processing.pipeline.data_models import LatestResult
from webcam_analyzer.processing.session import AnalyzerSession
from tests.fakes import make_face


@pytest_asyncio.fixture
async def session(fake_analyzer, capture_controller, status_board, download_offer):
    """Session torn down inside the event loop that ran its detection task."""
    analyzer_session = AnalyzerSession(
        fake_analyzer,
        capture_controller,
        status_board,
        interval_sec=0.01,
        file_offer=download_offer,
    )
    yield analyzer_session
    analyzer_session.close()
    fake_analyzer.release()
    await asyncio.sleep(0.02)


async def _wait_for(predicate, timeout: float = 2.0) -> None:
    deadline = asyncio.get_running_loop().time() + timeout
    while not predicate():
        if asyncio.get_running_loop().time() > deadline:
            raise AssertionError("condition not reached in time")
        await asyncio.sleep(0.01)


class TestSessionScenario:
    """Load, start, detect, stop"""

    @pytest.mark.asyncio
    async def test_end_to_end(self, session, fake_analyzer):
        fake_analyzer.default_result = [
            make_face(age=24.4, gender="male", expressions={"sad": 0.2, "happy": 0.7})
        ]

        assert await session.load_models() is True
        assert await session.start_capture() is True
        await _wait_for(lambda: session.latest_result is not None)

        assert session.latest_result == LatestResult(age="24", gender="male", emotion="happy")

        session.stop_capture()
        assert not session.detection_loop.is_active
        await asyncio.sleep(0.05)
        calls = fake_analyzer.calls
        await asyncio.sleep(0.1)

        assert fake_analyzer.calls == calls
        assert session.latest_result == LatestResult(age="24", gender="male", emotion="happy")
        assert session.status.message == "Stopped"


class TestActivationCondition:
    """Loop runs only while models are ready AND the camera is active"""

    @pytest.mark.asyncio
    async def test_camera_without_models_never_detects(self, session, fake_analyzer):
        await session.start_capture()
        await asyncio.sleep(0.1)
        assert not session.detection_loop.is_active
        assert fake_analyzer.calls == 0

    @pytest.mark.asyncio
    async def test_models_without_camera_never_detect(self, session, fake_analyzer):
        await session.load_models()
        await asyncio.sleep(0.1)
        assert not session.detection_loop.is_active
        assert fake_analyzer.calls == 0

    @pytest.mark.asyncio
    async def test_loop_starts_when_models_finish_after_camera(self, session, fake_analyzer):
        await session.start_capture()
        assert not session.should_detect

        await session.load_models()
        assert session.should_detect
        await _wait_for(lambda: fake_analyzer.calls > 0)

    @pytest.mark.asyncio
    async def test_failed_load_keeps_loop_off(self, session, fake_analyzer):
        fake_analyzer.fail_stage = LoadStage.DETECTOR
        assert await session.load_models() is False
        await session.start_capture()
        await asyncio.sleep(0.1)

        assert fake_analyzer.calls == 0
        assert session.describe()["load_error"] == "detector: cannot load detector"

    @pytest.mark.asyncio
    async def test_restart_resumes_detection(self, session, fake_analyzer):
        await session.load_models()
        await session.start_capture()
        session.stop_capture()
        await session.start_capture()

        assert session.detection_loop.is_active
        calls = fake_analyzer.calls
        await _wait_for(lambda: fake_analyzer.calls > calls)


    @pytest.mark.asyncio
    async def test_lost_camera_stops_detection(self, session, fake_analyzer, capture_factory):
        await session.load_models()
        await session.start_capture()
        await _wait_for(lambda: fake_analyzer.calls > 0)

        capture_factory.created[0].deliver_frames = False
        await _wait_for(lambda: session.capture.state is CaptureState.IDLE)

        assert not session.detection_loop.is_active
        assert session.capture.frame_source is None
        assert session.status.message == "Camera error: camera stopped delivering frames"
        assert session.describe()["capture_error"] == "camera stopped delivering frames"
        await asyncio.sleep(0.05)
        calls = fake_analyzer.calls
        await asyncio.sleep(0.1)
        assert fake_analyzer.calls == calls

        # The user can start again once the device is back
        capture_factory.deliver_frames = True
        assert await session.start_capture() is True
        assert session.detection_loop.is_active

class TestLateResults:
    """Results that resolve after stop or teardown are dropped"""

    @pytest.mark.asyncio
    async def test_stop_discards_inflight_result(self, session, fake_analyzer):
        fake_analyzer.hold()
        fake_analyzer.default_result = [make_face()]
        await session.load_models()
        await session.start_capture()
        await _wait_for(lambda: session.detection_loop.has_inflight_call)

        session.stop_capture()
        fake_analyzer.release()
        await _wait_for(lambda: not session.detection_loop.has_inflight_call)
        await asyncio.sleep(0.02)

        assert session.latest_result is None
        assert session.capture.state is CaptureState.IDLE

    @pytest.mark.asyncio
    async def test_close_releases_everything(self, session, fake_analyzer, capture_factory):
        await session.load_models()
        await session.start_capture()
        session.close()

        assert session.is_closed
        assert not session.detection_loop.is_active
        assert capture_factory.created[0].released
        assert await session.start_capture() is False
        assert session.capture.state is CaptureState.IDLE


class TestSessionOutputs:
    """Snapshot, preview and status view"""

    @pytest.mark.asyncio
    async def test_snapshot_without_camera(self, session, download_offer):
        assert session.snapshot() is None
        assert download_offer.take() is None
        assert session.preview() is None

    @pytest.mark.asyncio
    async def test_snapshot_with_camera(self, session, download_offer):
        await session.start_capture()
        data = session.snapshot()
        offered = download_offer.take()
        assert data is not None
        assert offered.filename.startswith("snapshot_")
        assert offered.filename.endswith(".png")

    @pytest.mark.asyncio
    async def test_describe_initial_state(self, session):
        assert session.describe() == {
            "status": "Waiting",
            "models_ready": False,
            "capture_state": "idle",
            "detecting": False,
            "tick_state": "idle",
            "ticks_completed": 0,
            "load_error": None,
            "capture_error": None,
        }

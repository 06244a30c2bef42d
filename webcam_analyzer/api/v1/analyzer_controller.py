"""
Analyzer API: session status, camera start/stop, latest face result, live
annotated frame and snapshot download.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
import logging

# -----------------------------------------------------------------------------
# Third-party
# -----------------------------------------------------------------------------
from fastapi import APIRouter, HTTPException, status
from fastapi.responses import Response

# -----------------------------------------------------------------------------
# Application
# -----------------------------------------------------------------------------
from ...application.dto.analyzer_dto import (
    AnalyzerStatusResponse,
    CaptureActionResponse,
    LatestResultResponse,
)
from ...core.config import get_settings
from ...di.container import get_container
from ...processing.errors import CaptureError
from ...processing.processing_output.file_offer import DownloadOffer
from ...processing.session import AnalyzerSession

# -----------------------------------------------------------------------------
# Logging and router
# -----------------------------------------------------------------------------
logger = logging.getLogger(__name__)

router = APIRouter(tags=["analyzer"])


def _session() -> AnalyzerSession:
    return get_container().get(AnalyzerSession)


def _capture_response(session: AnalyzerSession) -> CaptureActionResponse:
    return CaptureActionResponse(
        capture_state=session.capture.state.value,
        status=session.status.message,
    )


@router.get("/status", response_model=AnalyzerStatusResponse)
async def get_status() -> AnalyzerStatusResponse:
    """
    Get the session status (status text, readiness, capture state, loop state).
    """
    return AnalyzerStatusResponse(**_session().describe())


@router.post("/start", response_model=CaptureActionResponse)
async def start_capture() -> CaptureActionResponse:
    """
    Start the camera. Detection begins automatically once models are ready.

    Raises:
        HTTPException 409: Models not loaded yet
        HTTPException 503: Camera could not be opened
    """
    session = _session()
    if not session.readiness.is_ready:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail=f"Models not ready: {session.status.message}",
        )

    try:
        await session.start_capture()
    except CaptureError as exception:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail=f"Camera error: {exception.reason}",
        )
    return _capture_response(session)


@router.post("/stop", response_model=CaptureActionResponse)
async def stop_capture() -> CaptureActionResponse:
    """Stop the camera and the detection loop. Safe to call when already stopped."""
    session = _session()
    session.stop_capture()
    return _capture_response(session)


@router.get("/result", response_model=LatestResultResponse)
async def get_latest_result() -> LatestResultResponse:
    """Get the summary of the first face in the most recent completed tick."""
    result = _session().latest_result
    if result is None:
        return LatestResultResponse(face_detected=False)
    return LatestResultResponse(face_detected=True, **result.to_dict())


@router.get("/frame.jpg")
async def get_annotated_frame() -> Response:
    """
    Get the current camera frame with the detection overlay drawn on it.

    Raises:
        HTTPException 409: Camera not running
    """
    preview = _session().preview(get_settings().preview_jpeg_quality)
    if preview is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Camera is not running",
        )
    return Response(
        content=preview,
        media_type="image/jpeg",
        headers={"Cache-Control": "no-store"},
    )


@router.post("/snapshot")
async def take_snapshot() -> Response:
    """
    Download the current frame plus overlay as a PNG file.

    Raises:
        HTTPException 409: Camera not running
    """
    session = _session()
    if session.snapshot() is None:
        raise HTTPException(
            status_code=status.HTTP_409_CONFLICT,
            detail="Camera is not running",
        )

    offered = get_container().get(DownloadOffer).take()
    if offered is None:
        logger.error("Snapshot was captured but no file was offered")
        raise HTTPException(
            status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
            detail="Snapshot could not be prepared",
        )
    return Response(
        content=offered.data,
        media_type=offered.media_type,
        headers={"Content-Disposition": f'attachment; filename="{offered.filename}"'},
    )

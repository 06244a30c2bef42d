"""
Capture controller
------------------

Owns the camera for the session.

State machine (no other transitions):
    IDLE --start--> STARTING --success--> ACTIVE
    STARTING --failure--> IDLE
    ACTIVE --stop--> IDLE
    ACTIVE --camera lost--> IDLE

start() while STARTING/ACTIVE is a no-op; stop() while IDLE is a no-op.
stop() releases the device before it returns, so start() can re-acquire it
right away.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
import asyncio
import logging
from enum import Enum
from typing import Any, Callable, List, Optional, Tuple

# -----------------------------------------------------------------------------
# Third-party
# -----------------------------------------------------------------------------
import cv2
import numpy as np

# -----------------------------------------------------------------------------
# Local
# -----------------------------------------------------------------------------
from webcam_analyzer.processing.errors import CaptureError
from webcam_analyzer.processing.status import (
    STATUS_CAMERA_ERROR,
    STATUS_CAMERA_STARTING,
    STATUS_RUNNING,
    STATUS_STOPPED,
    StatusBoard,
)

from .camera_reader import CameraReader
from .live_source import LiveFrameSource

logger = logging.getLogger(__name__)

VideoCaptureFactory = Callable[[int], Any]

CAMERA_LOST_REASON = "camera stopped delivering frames"


class CaptureState(str, Enum):
    IDLE = "idle"
    STARTING = "starting"
    ACTIVE = "active"


class CaptureController:
    """
    Acquires and releases the front-facing camera.

    capture_factory defaults to cv2.VideoCapture; tests pass a fake.
    """

    def __init__(
        self,
        status: StatusBoard,
        device_index: int = 0,
        capture_factory: Optional[VideoCaptureFactory] = None,
        frame_width: int = 0,
        frame_height: int = 0,
        read_timeout_sec: float = 2.0,
    ) -> None:
        self.status = status
        self.device_index = device_index
        self.capture_factory: VideoCaptureFactory = capture_factory or cv2.VideoCapture
        self.frame_width = frame_width
        self.frame_height = frame_height
        self.read_timeout_sec = read_timeout_sec
        self._state = CaptureState.IDLE
        self._reader: Optional[CameraReader] = None
        self._source: Optional[LiveFrameSource] = None
        # Bumped by stop(); a start() that resumes under a newer attempt is stale.
        self._attempt = 0
        self._listeners: List[Callable[[CaptureState], None]] = []
        self._loop: Optional[asyncio.AbstractEventLoop] = None
        self.last_error: Optional[CaptureError] = None

    # -------------------------------------------------------------------------
    # State
    # -------------------------------------------------------------------------

    @property
    def state(self) -> CaptureState:
        return self._state

    @property
    def is_active(self) -> bool:
        return self._state is CaptureState.ACTIVE

    @property
    def frame_source(self) -> Optional[LiveFrameSource]:
        """The live source while ACTIVE, otherwise None."""
        return self._source if self._state is CaptureState.ACTIVE else None

    def subscribe(self, listener: Callable[[CaptureState], None]) -> None:
        self._listeners.append(listener)

    def _set_state(self, state: CaptureState) -> None:
        if state is self._state:
            return
        logger.info("Capture state %s -> %s", self._state.value, state.value)
        self._state = state
        for listener in list(self._listeners):
            listener(state)

    # -------------------------------------------------------------------------
    # Device access (runs in a worker thread)
    # -------------------------------------------------------------------------

    def _open_device(self) -> Tuple[Any, np.ndarray]:
        try:
            capture = self.capture_factory(self.device_index)
        except Exception as exc:  # noqa: BLE001
            raise CaptureError(f"could not open camera {self.device_index}: {exc}", self.device_index)

        if capture is None or not capture.isOpened():
            if capture is not None:
                capture.release()
            raise CaptureError(
                f"camera {self.device_index} not found or permission denied",
                self.device_index,
            )

        if self.frame_width > 0:
            capture.set(cv2.CAP_PROP_FRAME_WIDTH, self.frame_width)
        if self.frame_height > 0:
            capture.set(cv2.CAP_PROP_FRAME_HEIGHT, self.frame_height)

        ok, frame = capture.read()
        if not ok or frame is None:
            capture.release()
            raise CaptureError(f"camera {self.device_index} delivered no frames", self.device_index)
        return capture, frame

    # -------------------------------------------------------------------------
    # Public API
    # -------------------------------------------------------------------------

    async def start(self) -> bool:
        """
        Open the camera and start publishing frames.

        Returns True when the camera is active. Raises CaptureError when the
        device cannot be opened; state is back to IDLE in that case.
        """
        if self._state is not CaptureState.IDLE:
            logger.debug("start() ignored, capture is %s", self._state.value)
            return self.is_active

        self._attempt += 1
        attempt = self._attempt
        self._loop = asyncio.get_running_loop()
        self._set_state(CaptureState.STARTING)
        self.status.set(STATUS_CAMERA_STARTING)

        try:
            capture, first_frame = await asyncio.to_thread(self._open_device)
        except CaptureError as exc:
            if attempt != self._attempt:
                logger.info("Camera open failed after stop(): %s", exc.reason)
                return False
            self.last_error = exc
            logger.warning("Camera error: %s", exc.reason)
            self._set_state(CaptureState.IDLE)
            self.status.set(STATUS_CAMERA_ERROR.format(reason=exc.reason))
            raise

        if attempt != self._attempt or self._state is not CaptureState.STARTING:
            # stop() arrived while the device was opening
            logger.info("Camera opened after stop(); releasing it")
            capture.release()
            return False

        reader = CameraReader(
            capture,
            source_id=f"camera:{self.device_index}",
            first_frame=first_frame,
            join_timeout=self.read_timeout_sec,
            on_lost=lambda: self._notify_camera_lost(reader),
        )
        reader.start()
        self._reader = reader
        self._source = LiveFrameSource(reader)
        self.last_error = None
        self._set_state(CaptureState.ACTIVE)
        self.status.set(STATUS_RUNNING)
        return True

    def stop(self) -> None:
        """Release all camera resources and go IDLE. Idempotent."""
        if self._state is CaptureState.IDLE:
            return

        self._attempt += 1
        reader = self._reader
        self._reader = None
        self._source = None
        if reader is not None:
            reader.stop()
        self._set_state(CaptureState.IDLE)
        self.status.set(STATUS_STOPPED)

    # -------------------------------------------------------------------------
    # Camera loss
    # -------------------------------------------------------------------------

    def _notify_camera_lost(self, reader: CameraReader) -> None:
        """Called from the reader thread; hands over to the event loop."""
        loop = self._loop
        if loop is None or loop.is_closed():
            return
        try:
            loop.call_soon_threadsafe(self._on_camera_lost, reader)
        except RuntimeError:
            logger.debug("Event loop closed before camera loss could be reported")

    def _on_camera_lost(self, reader: CameraReader) -> None:
        if reader is not self._reader or self._state is not CaptureState.ACTIVE:
            return

        self._attempt += 1
        self._reader = None
        self._source = None
        reader.stop()
        self.last_error = CaptureError(CAMERA_LOST_REASON, self.device_index)
        logger.warning("Camera error: %s", CAMERA_LOST_REASON)
        self._set_state(CaptureState.IDLE)
        self.status.set(STATUS_CAMERA_ERROR.format(reason=CAMERA_LOST_REASON))

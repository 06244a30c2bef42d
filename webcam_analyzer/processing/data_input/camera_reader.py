"""
Camera reader (device → latest frame)
-------------------------------------

Keeps the most recent frame of an opened camera available to the rest of the
session.

HOW IT WORKS:
-------------
1. CaptureController opens the device and hands the capture to a CameraReader
2. The reader thread calls capture.read() in a loop at the camera's own pace
3. Each frame overwrites the previous one (latest-frame-only, no buffering)
4. LiveFrameSource copies the latest frame out on demand
5. After MAX_FAILED_READS failed reads in a row the camera is lost: no frame
   is handed out any more and on_lost is called from the reader thread
6. stop() ends the loop, joins the thread and releases the device

Only the reader thread touches the capture while it runs.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
import logging
import threading
import time
from typing import Any, Callable, Optional, Tuple

# -----------------------------------------------------------------------------
# Third-party
# -----------------------------------------------------------------------------
import numpy as np

logger = logging.getLogger(__name__)

# Consecutive failed reads before the reader reports the camera as lost.
MAX_FAILED_READS = 30


def now_monotonic() -> float:
    """Current monotonic time (for frame timestamps)."""
    return time.monotonic()


class CameraReader:
    """
    Thread that reads frames from an opened capture and publishes the latest one.

    Flow: read → store (frame, index, timestamp) under a lock → repeat until stopped.
    """

    def __init__(
        self,
        capture: Any,
        source_id: str,
        first_frame: Optional[np.ndarray] = None,
        join_timeout: float = 2.0,
        on_lost: Optional[Callable[[], None]] = None,
    ) -> None:
        self.capture = capture
        self.source_id = source_id
        self.join_timeout = join_timeout
        self.on_lost = on_lost
        self._lock = threading.Lock()
        self._stop_event = threading.Event()
        self._thread: Optional[threading.Thread] = None
        self._frame: Optional[np.ndarray] = first_frame
        self._frame_index = 1 if first_frame is not None else 0
        self._timestamp = now_monotonic()
        self._failed_reads = 0
        self._lost = False
        self._released = False

    def start(self) -> None:
        if self._thread is not None:
            return
        self._thread = threading.Thread(
            target=self._run,
            name=f"camera-reader-{self.source_id}",
            daemon=True,
        )
        self._thread.start()

    def _run(self) -> None:
        """Main loop: read frames until stopped. Marks the camera lost after repeated failures."""
        while not self._stop_event.is_set():
            try:
                ok, frame = self.capture.read()
            except Exception as exc:  # noqa: BLE001
                logger.warning("[reader %s] read error: %s", self.source_id, exc)
                ok, frame = False, None

            if self._stop_event.is_set():
                break

            if not ok or frame is None:
                self._failed_reads += 1
                if self._failed_reads >= MAX_FAILED_READS and not self._lost:
                    self._lost = True
                    logger.warning("[reader %s] camera stopped delivering frames", self.source_id)
                    if self.on_lost is not None:
                        self.on_lost()
                time.sleep(0.01)
                continue

            self._failed_reads = 0
            self._lost = False
            with self._lock:
                self._frame = frame
                self._frame_index += 1
                self._timestamp = now_monotonic()

    def latest(self) -> Optional[Tuple[np.ndarray, int, float]]:
        """Copy of (frame, frame_index, timestamp), or None when no frame yet, lost or stopped."""
        if self._stop_event.is_set() or self._lost:
            return None
        with self._lock:
            if self._frame is None:
                return None
            return self._frame.copy(), self._frame_index, self._timestamp

    @property
    def is_lost(self) -> bool:
        return self._lost

    def stop(self) -> None:
        """Stop the loop, wait for the thread and release the device before returning."""
        self._stop_event.set()
        thread = self._thread
        if thread is not None and thread is not threading.current_thread():
            thread.join(self.join_timeout)
            if thread.is_alive():
                logger.warning("[reader %s] thread did not exit within %.1fs", self.source_id, self.join_timeout)
        if not self._released:
            self._released = True
            try:
                self.capture.release()
            except Exception:  # noqa: BLE001
                logger.exception("[reader %s] error releasing camera", self.source_id)
        with self._lock:
            self._frame = None
        logger.info("[reader %s] camera released", self.source_id)

"""
Live frame source
-----------------

Read-only view over the CameraReader owned by CaptureController. The
detection loop and the snapshot exporter read frames through it; they never
see the capture device itself.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from typing import Optional

# -----------------------------------------------------------------------------
# Local
# -----------------------------------------------------------------------------
from .camera_reader import CameraReader
from .data_models import FramePacket


class LiveFrameSource:
    """Hands out copies of the latest camera frame as FramePackets."""

    def __init__(self, reader: CameraReader) -> None:
        self._reader = reader

    def read_frame(self) -> Optional[FramePacket]:
        """Latest frame, or None if the camera has no frame (or was stopped)."""
        latest = self._reader.latest()
        if latest is None:
            return None
        frame, frame_index, timestamp = latest
        try:
            return FramePacket(
                frame=frame,
                frame_index=frame_index,
                timestamp=timestamp,
                source_id=self._reader.source_id,
            )
        except ValueError:
            return None

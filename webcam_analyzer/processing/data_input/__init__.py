"""
Data input (camera)
-------------------

- CaptureController: start/stop lifecycle of the camera stream.
- CameraReader: background thread keeping the latest frame.
- LiveFrameSource: read-only access to that frame.
- FramePacket: frame + metadata handed to the pipeline.
"""

from .camera_reader import CameraReader
from .capture_controller import CaptureController, CaptureState
from .data_models import FrameDimensions, FramePacket
from .live_source import LiveFrameSource

__all__ = [
    "CameraReader",
    "CaptureController",
    "CaptureState",
    "FrameDimensions",
    "FramePacket",
    "LiveFrameSource",
]

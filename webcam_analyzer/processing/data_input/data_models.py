"""
Frame data contracts
--------------------

Defines the packet passed from the live camera source to the detection loop,
the overlay renderer and the snapshot exporter.
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from dataclasses import dataclass
from typing import NamedTuple, Optional

# -----------------------------------------------------------------------------
# Third-party
# -----------------------------------------------------------------------------
import numpy as np

# -----------------------------------------------------------------------------
# Data contracts
# -----------------------------------------------------------------------------


class FrameDimensions(NamedTuple):
    width: int
    height: int


@dataclass
class FramePacket:
    """
    One frame plus metadata, handed out by LiveFrameSource.

    The frame is a private copy; consumers may draw on it freely.
    """

    frame: np.ndarray          # BGR image (H, W, 3)
    frame_index: int           # Sequential index from the camera reader
    timestamp: float           # Monotonic time (seconds)
    source_id: Optional[str] = None   # e.g. "camera:0"

    def __post_init__(self) -> None:
        """Validate shape and type of frame."""
        if self.frame is None:
            raise ValueError("Frame cannot be None")
        if not isinstance(self.frame, np.ndarray):
            raise ValueError("Frame must be a numpy array")
        if len(self.frame.shape) != 3 or self.frame.shape[2] != 3:
            raise ValueError("Frame must be a 3-channel BGR image (H, W, 3)")

    @property
    def dimensions(self) -> FrameDimensions:
        return FrameDimensions(width=int(self.frame.shape[1]), height=int(self.frame.shape[0]))

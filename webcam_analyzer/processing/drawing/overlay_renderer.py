"""
Overlay renderer
----------------

Draws detection boxes (with score labels) and facial keypoints onto the
overlay surface. Called once per tick, even for an empty result, so stale
annotations never outlive the face they belonged to.
"""

from __future__ import annotations

from typing import Sequence

from webcam_analyzer.processing.data_input.data_models import FrameDimensions
from webcam_analyzer.processing.models.data_models import FaceDetection

from .overlay_surface import OverlaySurface

BOX_COLOR = (0, 255, 0)        # BGR green
LANDMARK_COLOR = (0, 255, 255)  # BGR yellow


class OverlayRenderer:
    def __init__(self, surface: OverlaySurface) -> None:
        self.surface = surface

    def render(self, detections: Sequence[FaceDetection], frame_dimensions: FrameDimensions) -> None:
        """
        Match the surface to the frame, clear it, then draw every detection.

        Args:
            detections: Faces from the latest tick (may be empty)
            frame_dimensions: (width, height) of the frame the detections refer to
        """
        self.surface.resize(frame_dimensions.width, frame_dimensions.height)
        self.surface.clear()
        for detection in detections:
            label = f"{detection.score:.2f}" if detection.score > 0 else None
            self.surface.draw_box(detection.box, BOX_COLOR, label=label)
            if detection.landmarks:
                self.surface.draw_points(detection.landmarks, LANDMARK_COLOR)

"""
Snapshot exporter
-----------------

Composites the live frame with the current overlay at the frame's native
resolution and offers the result as a PNG download. Nothing is written to
disk. The same composite, JPEG encoded, backs the live preview endpoint.
"""

from __future__ import annotations

import logging
import time
from typing import Callable, Optional

import cv2
import numpy as np

from webcam_analyzer.processing.data_input.data_models import FramePacket
from webcam_analyzer.processing.data_input.live_source import LiveFrameSource
from webcam_analyzer.processing.drawing.overlay_surface import OverlaySurface

from .file_offer import FileOffer

logger = logging.getLogger(__name__)

FrameSourceProvider = Callable[[], Optional[LiveFrameSource]]


def composite(frame: np.ndarray, overlay: np.ndarray) -> np.ndarray:
    """
    Draw the BGRA overlay over the BGR frame.

    The overlay is stretched to the frame size when the two differ.
    """
    out = frame.copy()
    if overlay.size == 0:
        return out
    height, width = out.shape[:2]
    if overlay.shape[0] != height or overlay.shape[1] != width:
        overlay = cv2.resize(overlay, (width, height), interpolation=cv2.INTER_NEAREST)
    alpha = overlay[:, :, 3:4].astype(np.float32) / 255.0
    if not alpha.any():
        return out
    blended = out.astype(np.float32) * (1.0 - alpha) + overlay[:, :, :3].astype(np.float32) * alpha
    return np.clip(blended, 0, 255).astype(np.uint8)


class SnapshotExporter:
    def __init__(
        self,
        frame_source: FrameSourceProvider,
        surface: OverlaySurface,
        file_offer: FileOffer,
        filename_prefix: str = "snapshot",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self.frame_source = frame_source
        self.surface = surface
        self.file_offer = file_offer
        self.filename_prefix = filename_prefix
        self.clock = clock

    def _current_packet(self) -> Optional[FramePacket]:
        source = self.frame_source()
        if source is None:
            return None
        return source.read_frame()

    def compose(self) -> Optional[np.ndarray]:
        """Frame + overlay as a BGR image, or None without a live frame."""
        packet = self._current_packet()
        if packet is None:
            return None
        return composite(packet.frame, self.surface.pixels())

    def filename(self) -> str:
        return f"{self.filename_prefix}_{int(self.clock() * 1000)}.png"

    def capture(self) -> Optional[bytes]:
        """
        Offer the composite as a PNG file.

        Returns the PNG bytes, or None (and offers nothing) when no frame is
        available.
        """
        image = self.compose()
        if image is None:
            logger.info("Snapshot skipped: no active frame source")
            return None
        ok, encoded = cv2.imencode(".png", image)
        if not ok:
            logger.warning("Snapshot skipped: PNG encoding failed")
            return None
        data = encoded.tobytes()
        filename = self.filename()
        self.file_offer.offer(data, filename, "image/png")
        logger.info("Snapshot offered as %s (%d bytes)", filename, len(data))
        return data

    def compose_preview(self, jpeg_quality: int = 85) -> Optional[bytes]:
        """Composite as JPEG for the live view. None without a live frame."""
        image = self.compose()
        if image is None:
            return None
        ok, encoded = cv2.imencode(".jpg", image, [cv2.IMWRITE_JPEG_QUALITY, int(jpeg_quality)])
        return encoded.tobytes() if ok else None

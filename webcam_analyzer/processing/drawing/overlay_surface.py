"""
Overlay surface
---------------

Transparent BGRA layer the size of the live frame. OverlayRenderer is the only
writer; SnapshotExporter reads it through pixels().
"""

from __future__ import annotations

from typing import Iterable, Optional, Tuple

import cv2
import numpy as np

Color = Tuple[int, int, int]


def _bgra(color: Color) -> Tuple[int, int, int, int]:
    return int(color[0]), int(color[1]), int(color[2]), 255


class OverlaySurface:
    """Resizable 2D drawing layer with an alpha channel (alpha 0 = transparent)."""

    def __init__(self, width: int = 0, height: int = 0) -> None:
        self._pixels = np.zeros((max(0, height), max(0, width), 4), dtype=np.uint8)

    @property
    def width(self) -> int:
        return int(self._pixels.shape[1])

    @property
    def height(self) -> int:
        return int(self._pixels.shape[0])

    @property
    def is_empty(self) -> bool:
        return self.width == 0 or self.height == 0

    def resize(self, width: int, height: int) -> None:
        """Set the pixel size. Resizing discards the current contents."""
        width, height = max(0, int(width)), max(0, int(height))
        if (width, height) == (self.width, self.height):
            return
        self._pixels = np.zeros((height, width, 4), dtype=np.uint8)

    def clear(self) -> None:
        self._pixels[:] = 0

    def draw_box(
        self,
        box: Tuple[float, float, float, float],
        color: Color,
        thickness: int = 2,
        label: Optional[str] = None,
    ) -> None:
        """Draw an (x, y, w, h) rectangle with an optional label tag above it."""
        x, y, w, h = (int(round(v)) for v in box)
        if w <= 0 or h <= 0 or self.is_empty:
            return
        rgba = _bgra(color)
        cv2.rectangle(self._pixels, (x, y), (x + w, y + h), rgba, thickness)
        if label:
            font = cv2.FONT_HERSHEY_SIMPLEX
            font_scale = 0.5
            font_thickness = 1
            (tw, th), _ = cv2.getTextSize(label, font, font_scale, font_thickness)
            top = max(0, y - th - 4)
            cv2.rectangle(self._pixels, (x, top), (x + tw, top + th + 4), rgba, -1)
            cv2.putText(
                self._pixels, label, (x, top + th + 1),
                font, font_scale, (0, 0, 0, 255), font_thickness, cv2.LINE_AA
            )

    def draw_points(self, points: Iterable[Tuple[float, float]], color: Color, radius: int = 3) -> None:
        if self.is_empty:
            return
        rgba = _bgra(color)
        for px, py in points:
            cv2.circle(self._pixels, (int(round(px)), int(round(py))), radius, rgba, -1, cv2.LINE_AA)

    def pixels(self) -> np.ndarray:
        """Copy of the BGRA contents (H, W, 4)."""
        return self._pixels.copy()

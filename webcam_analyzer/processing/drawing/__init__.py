from .overlay_renderer import OverlayRenderer
from .overlay_surface import OverlaySurface

__all__ = ["OverlayRenderer", "OverlaySurface"]

from .data_models import CancellationToken, LatestResult, TickState
from .detection_loop import DetectionLoop
from .stages import dominant_expression, round_age, summarize_detections

__all__ = [
    "CancellationToken",
    "DetectionLoop",
    "LatestResult",
    "TickState",
    "dominant_expression",
    "round_age",
    "summarize_detections",
]

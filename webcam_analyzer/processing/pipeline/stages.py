"""
Pipeline Stages
---------------

Pure helpers used by the detection loop to turn analyzer output into the
result shown to the user.
"""

import math
from typing import Dict, Optional, Sequence

from webcam_analyzer.processing.models.data_models import FaceDetection
from webcam_analyzer.processing.pipeline.data_models import LatestResult


def round_age(age: float) -> str:
    """Nearest whole number as text, halves rounded away from zero (29.6 -> "30", 24.5 -> "25")."""
    rounded = int(math.floor(abs(age) + 0.5))
    return str(-rounded if age < 0 and rounded else rounded)


def dominant_expression(expressions: Dict[str, float]) -> Optional[str]:
    """
    Label with the strictly highest score.

    Ties keep the label seen first in the mapping's iteration order.
    """
    best_label: Optional[str] = None
    best_score = -math.inf
    for label, score in expressions.items():
        if score > best_score:
            best_label = label
            best_score = score
    return best_label


def summarize_detections(detections: Sequence[FaceDetection]) -> Optional[LatestResult]:
    """
    Build the LatestResult from the first detected face, or None when there is none.

    The first face in detector order is used, not the most confident or the
    largest one.
    """
    if not detections:
        return None
    face = detections[0]
    return LatestResult(
        age=round_age(face.age),
        gender=face.gender,
        emotion=dominant_expression(face.expressions) or "",
    )

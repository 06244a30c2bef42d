"""
Model contracts (protocols)
---------------------------

Defines what the face analysis capability looks like and what it returns.
ModelLoader drives load_stage() in order; DetectionLoop calls analyze(frame).
"""

# -----------------------------------------------------------------------------
# Standard library
# -----------------------------------------------------------------------------
from dataclasses import dataclass, field
from enum import Enum
from typing import Dict, List, Protocol, Tuple

# -----------------------------------------------------------------------------
# Third-party
# -----------------------------------------------------------------------------
import numpy as np

# -----------------------------------------------------------------------------
# Load stages
# -----------------------------------------------------------------------------


class LoadStage(str, Enum):
    """Sub-models of the analyzer. Loaded strictly in declaration order."""

    DETECTOR = "detector"
    LANDMARKS = "landmarks"
    EXPRESSIONS = "expressions"
    AGE_GENDER = "age_gender"


LOAD_ORDER: Tuple[LoadStage, ...] = (
    LoadStage.DETECTOR,
    LoadStage.LANDMARKS,
    LoadStage.EXPRESSIONS,
    LoadStage.AGE_GENDER,
)

# -----------------------------------------------------------------------------
# Detection result
# -----------------------------------------------------------------------------


@dataclass
class FaceDetection:
    """
    One face as reported by the analyzer.

    box is (x, y, w, h) in frame pixels. expressions maps label -> score; only
    the relative order of scores matters.
    """

    box: Tuple[float, float, float, float]
    score: float = 0.0
    landmarks: List[Tuple[float, float]] = field(default_factory=list)
    expressions: Dict[str, float] = field(default_factory=dict)
    age: float = 0.0
    gender: str = ""


# -----------------------------------------------------------------------------
# Protocols
# -----------------------------------------------------------------------------


class FaceAnalyzer(Protocol):
    """Detection + landmarks + expressions + age/gender over a BGR frame."""

    def load_stage(self, stage: LoadStage) -> None:
        """Initialize one sub-model. Raises on failure."""
        ...

    def analyze(self, frame: np.ndarray) -> List[FaceDetection]:
        """Return all faces in detector order (empty list when none)."""
        ...

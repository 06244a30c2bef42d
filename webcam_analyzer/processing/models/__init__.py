"""
Models (load and run inference)
------------------------------

- ModelLoader: load the analyzer's sub-models in order, flip ModelReadiness once.
- FaceAnalyzer: the detection capability contract; DeepFaceAnalyzer implements it.
"""

# -----------------------------------------------------------------------------
# Public API
# -----------------------------------------------------------------------------
from .data_models import LOAD_ORDER, FaceAnalyzer, FaceDetection, LoadStage
from .model_loader import ModelLoader, ModelReadiness

__all__ = [
    "FaceAnalyzer",
    "FaceDetection",
    "LOAD_ORDER",
    "LoadStage",
    "ModelLoader",
    "ModelReadiness",
]

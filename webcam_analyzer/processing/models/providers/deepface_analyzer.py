"""
DeepFace analyzer provider
--------------------------

Face analysis backed by DeepFace: one detector backend for boxes and facial
keypoints, plus the Emotion, Age and Gender attribute models.
"""

import logging
from typing import Any, Dict, List, Optional, Tuple

import numpy as np

from webcam_analyzer.processing.models.data_models import FaceAnalyzer, FaceDetection, LoadStage

logger = logging.getLogger(__name__)

# Detector backends that report facial keypoints alongside the box.
LANDMARK_BACKENDS = frozenset(
    {"retinaface", "mtcnn", "fastmtcnn", "yunet", "mediapipe", "centerface"}
)

# Keypoint names DeepFace may put in a facial area, in drawing order.
KEYPOINT_KEYS = ("left_eye", "right_eye", "nose", "mouth_left", "mouth_right")

ANALYZE_ACTIONS = ("emotion", "age", "gender")


def _get_deepface():
    try:
        from deepface import DeepFace
        return DeepFace
    except ImportError:
        return None


def _keypoints_from_region(region: Dict[str, Any]) -> List[Tuple[float, float]]:
    points: List[Tuple[float, float]] = []
    for key in KEYPOINT_KEYS:
        point = region.get(key)
        if point is None or len(point) < 2:
            continue
        points.append((float(point[0]), float(point[1])))
    return points


def _is_placeholder(result: Dict[str, Any], frame_shape: Tuple[int, ...]) -> bool:
    """
    With enforce_detection=False DeepFace returns the whole frame as a single
    "face" with zero confidence when nothing was found.
    """
    region = result.get("region") or {}
    height, width = int(frame_shape[0]), int(frame_shape[1])
    covers_frame = (
        int(region.get("x", 0)) == 0
        and int(region.get("y", 0)) == 0
        and int(region.get("w", 0)) == width
        and int(region.get("h", 0)) == height
    )
    return covers_frame and float(result.get("face_confidence") or 0.0) == 0.0


def to_face_detection(result: Dict[str, Any]) -> FaceDetection:
    """Map one DeepFace.analyze() entry to a FaceDetection."""
    region = result.get("region") or {}
    box = (
        float(region.get("x", 0)),
        float(region.get("y", 0)),
        float(region.get("w", 0)),
        float(region.get("h", 0)),
    )
    emotions = result.get("emotion") or {}
    return FaceDetection(
        box=box,
        score=float(result.get("face_confidence") or 0.0),
        landmarks=_keypoints_from_region(region),
        expressions={str(label): float(value) for label, value in emotions.items()},
        age=float(result.get("age") or 0.0),
        gender=str(result.get("dominant_gender") or ""),
    )


class DeepFaceAnalyzer(FaceAnalyzer):
    """
    FaceAnalyzer implementation on top of DeepFace.

    Model weights are fetched by DeepFace on first build (DEEPFACE_HOME) and
    cached in-process, so analyze() reuses what load_stage() built.
    """

    def __init__(self, detector_backend: str = "retinaface", align: bool = True):
        self.detector_backend = detector_backend.strip().lower()
        self.align = align
        self._loaded: Dict[LoadStage, bool] = {}

    def _deepface(self):
        deepface = _get_deepface()
        if deepface is None:
            raise RuntimeError("DeepFace not available; install deepface.")
        return deepface

    def load_stage(self, stage: LoadStage) -> None:
        deepface = self._deepface()
        if stage is LoadStage.DETECTOR:
            logger.info("Building face detector '%s'", self.detector_backend)
            deepface.build_model(model_name=self.detector_backend, task="face_detector")
        elif stage is LoadStage.LANDMARKS:
            if not self._loaded.get(LoadStage.DETECTOR):
                raise RuntimeError("detector must be loaded before landmarks")
            if self.detector_backend not in LANDMARK_BACKENDS:
                raise RuntimeError(
                    f"detector '{self.detector_backend}' does not report facial landmarks"
                )
        elif stage is LoadStage.EXPRESSIONS:
            logger.info("Building expression model")
            deepface.build_model(model_name="Emotion", task="facial_attribute")
        elif stage is LoadStage.AGE_GENDER:
            logger.info("Building age and gender models")
            deepface.build_model(model_name="Age", task="facial_attribute")
            deepface.build_model(model_name="Gender", task="facial_attribute")
        self._loaded[stage] = True

    def analyze(self, frame: np.ndarray) -> List[FaceDetection]:
        deepface = self._deepface()
        results: Optional[Any] = deepface.analyze(
            img_path=frame,
            actions=list(ANALYZE_ACTIONS),
            detector_backend=self.detector_backend,
            enforce_detection=False,
            align=self.align,
            silent=True,
        )
        if isinstance(results, dict):
            results = [results]
        detections: List[FaceDetection] = []
        for result in results or []:
            if not isinstance(result, dict) or _is_placeholder(result, frame.shape):
                continue
            detections.append(to_face_detection(result))
        return detections

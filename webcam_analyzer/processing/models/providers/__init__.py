"""
Model providers
---------------

- DeepFaceAnalyzer: detection, keypoints, emotion, age and gender via DeepFace.
"""

from .deepface_analyzer import DeepFaceAnalyzer

__all__ = ["DeepFaceAnalyzer"]

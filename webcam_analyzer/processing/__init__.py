"""
Processing core
---------------

Camera capture, model loading, the periodic detection loop, overlay drawing
and snapshot export, tied together by AnalyzerSession.
"""

from .errors import AnalyzerError, CaptureError, LoadError
from .session import AnalyzerSession
from .status import StatusBoard

__all__ = [
    "AnalyzerError",
    "AnalyzerSession",
    "CaptureError",
    "LoadError",
    "StatusBoard",
]

from .analyzer_dto import (
    AnalyzerStatusResponse,
    CaptureActionResponse,
    LatestResultResponse,
)

__all__ = [
    "AnalyzerStatusResponse",
    "CaptureActionResponse",
    "LatestResultResponse",
]

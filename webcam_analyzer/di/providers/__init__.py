from .analyzer_provider import AnalyzerProvider


__all__ = [
    "AnalyzerProvider",
]

"""
Processing errors
-----------------

LoadError is fatal for the session (models never become ready).
CaptureError is recoverable: the user may call start() again.
Per-tick detection failures are not exceptions of their own; the loop logs
and absorbs whatever the analyzer raises.
"""

from typing import Optional


class AnalyzerError(Exception):
    """Base class for errors surfaced by the analyzer session."""


class LoadError(AnalyzerError):
    """A model stage failed to initialize."""

    def __init__(self, stage: str, reason: str):
        super().__init__(f"{stage}: {reason}")
        self.stage = stage
        self.reason = reason


class CaptureError(AnalyzerError):
    """The camera could not be opened (permission denied, no device, no frames)."""

    def __init__(self, reason: str, device: Optional[int] = None):
        super().__init__(reason)
        self.reason = reason
        self.device = device

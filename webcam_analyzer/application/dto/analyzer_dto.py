from typing import Optional
from pydantic import BaseModel


class LatestResultResponse(BaseModel):
    """DTO for the latest face summary (face_detected is False and the fields are None when no face was detected)"""
    face_detected: bool
    age: Optional[str] = None
    gender: Optional[str] = None
    emotion: Optional[str] = None


class AnalyzerStatusResponse(BaseModel):
    """DTO for session status"""
    status: str
    models_ready: bool
    capture_state: str
    detecting: bool
    tick_state: str
    ticks_completed: int
    load_error: Optional[str] = None
    capture_error: Optional[str] = None


class CaptureActionResponse(BaseModel):
    """DTO for start/stop responses"""
    capture_state: str
    status: str

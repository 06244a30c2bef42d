# Standard library imports
import os
from typing import Final, List, Optional


def _env_bool(name: str, default: str) -> bool:
    return os.getenv(name, default).strip().lower() in ("1", "true", "yes", "on")


class Settings:
    """
    Application settings loaded from environment variables.

    This class centralizes all configuration settings for the application.
    All settings are loaded from environment variables with sensible defaults.
    """

    def __init__(self) -> None:
        # Camera Configuration
        # Index of the front-facing ("user") camera as seen by OpenCV
        self.camera_index: Final[int] = int(os.getenv("CAMERA_INDEX", "0"))
        # 0 keeps the device default resolution
        self.camera_width: Final[int] = int(os.getenv("CAMERA_WIDTH", "0"))
        self.camera_height: Final[int] = int(os.getenv("CAMERA_HEIGHT", "0"))
        self.camera_read_timeout_sec: Final[float] = float(
            os.getenv("CAMERA_READ_TIMEOUT_SEC", "2.0")
        )

        # Detection Configuration
        self.detection_interval_ms: Final[int] = int(os.getenv("DETECTION_INTERVAL_MS", "300"))
        self.detector_backend: Final[str] = os.getenv("DETECTOR_BACKEND", "retinaface")
        self.autoload_models: Final[bool] = _env_bool("AUTOLOAD_MODELS", "true")

        # Output Configuration
        self.snapshot_prefix: Final[str] = os.getenv("SNAPSHOT_PREFIX", "snapshot")
        self.preview_jpeg_quality: Final[int] = int(os.getenv("PREVIEW_JPEG_QUALITY", "85"))

        # Server Configuration
        self.log_level: Final[str] = os.getenv("LOG_LEVEL", "INFO").upper()
        self.cors_origins: Final[List[str]] = [
            origin.strip()
            for origin in os.getenv(
                "CORS_ORIGINS",
                "http://localhost:5173,http://localhost:3000",
            ).split(",")
            if origin.strip()
        ]

    @property
    def detection_interval_sec(self) -> float:
        return max(1, self.detection_interval_ms) / 1000.0


# Global settings instance (singleton pattern)
_settings: Optional[Settings] = None


def get_settings() -> Settings:
    """
    Get application settings (singleton pattern)

    Returns:
        Settings instance with all configuration values
    """
    global _settings
    if _settings is None:
        _settings = Settings()
    return _settings

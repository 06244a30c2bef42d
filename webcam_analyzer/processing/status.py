"""
Status board
------------

Holds the one-line human readable status shown to the user. Written by the
model loader and the capture controller only.
"""

import logging
from typing import Callable, List

logger = logging.getLogger(__name__)

STATUS_WAITING = "Waiting"
STATUS_LOADING = "Loading models…"
STATUS_MODELS_LOADED = "Models loaded"
STATUS_LOAD_FAILED = "Model load failed: {reason}"
STATUS_CAMERA_STARTING = "Starting camera…"
STATUS_RUNNING = "Running"
STATUS_STOPPED = "Stopped"
STATUS_CAMERA_ERROR = "Camera error: {reason}"


class StatusBoard:
    def __init__(self, initial: str = STATUS_WAITING) -> None:
        self._message = initial
        self._listeners: List[Callable[[str], None]] = []

    @property
    def message(self) -> str:
        return self._message

    def set(self, message: str) -> None:
        if message == self._message:
            return
        self._message = message
        logger.info("Status: %s", message)
        for listener in list(self._listeners):
            listener(message)

    def subscribe(self, listener: Callable[[str], None]) -> None:
        self._listeners.append(listener)

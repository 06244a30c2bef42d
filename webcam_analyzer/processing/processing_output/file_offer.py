"""
File offer
----------

Hands a finished in-memory file to the user. The HTTP layer uses
DownloadOffer and turns the offered file into a download response.
"""

from dataclasses import dataclass
from typing import List, Optional, Protocol


class FileOffer(Protocol):
    def offer(self, data: bytes, filename: str, media_type: str) -> None:
        """Make data available to the user under filename."""
        ...


@dataclass
class OfferedFile:
    data: bytes
    filename: str
    media_type: str


class DownloadOffer(FileOffer):
    """Keeps offered files in memory until the caller takes them."""

    def __init__(self) -> None:
        self._pending: List[OfferedFile] = []

    def offer(self, data: bytes, filename: str, media_type: str) -> None:
        self._pending.append(OfferedFile(data=data, filename=filename, media_type=media_type))

    def take(self) -> Optional[OfferedFile]:
        """Remove and return the most recently offered file."""
        if not self._pending:
            return None
        offered = self._pending.pop()
        self._pending.clear()
        return offered

from .file_offer import DownloadOffer, FileOffer, OfferedFile
from .snapshot_exporter import SnapshotExporter, composite

__all__ = [
    "DownloadOffer",
    "FileOffer",
    "OfferedFile",
    "SnapshotExporter",
    "composite",
]

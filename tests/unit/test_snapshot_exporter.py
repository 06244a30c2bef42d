"""
Unit tests for SnapshotExporter and the frame/overlay composite.
"""
import cv2
import numpy as np

from webcam_analyzer.processing.drawing.overlay_surface import OverlaySurface
from webcam_analyzer.processing.processing_output.file_offer import DownloadOffer
from webcam_analyzer.processing.processing_output.snapshot_exporter import SnapshotExporter, composite
from tests.fakes import StaticFrameSource, make_frame


class TestComposite:
    """Tests for composite"""

    def test_transparent_overlay_keeps_frame(self):
        frame = make_frame(90)
        overlay = np.zeros((48, 64, 4), dtype=np.uint8)
        assert np.array_equal(composite(frame, overlay), frame)

    def test_opaque_pixel_replaces_frame_pixel(self):
        frame = make_frame(90)
        overlay = np.zeros((48, 64, 4), dtype=np.uint8)
        overlay[3, 4] = (0, 0, 255, 255)
        out = composite(frame, overlay)
        assert tuple(out[3, 4]) == (0, 0, 255)
        assert tuple(out[0, 0]) == (90, 90, 90)

    def test_overlay_is_stretched_to_frame(self):
        frame = make_frame(0)
        overlay = np.full((24, 32, 4), 255, dtype=np.uint8)
        out = composite(frame, overlay)
        assert out.shape == frame.shape
        assert out.min() == 255

    def test_frame_is_not_modified(self):
        frame = make_frame(10)
        overlay = np.full((48, 64, 4), 255, dtype=np.uint8)
        composite(frame, overlay)
        assert frame.max() == 10


class TestSnapshotExporter:
    """Tests for SnapshotExporter.capture"""

    def test_no_source_offers_nothing(self):
        offer = DownloadOffer()
        exporter = SnapshotExporter(lambda: None, OverlaySurface(), offer)
        assert exporter.capture() is None
        assert offer.take() is None

    def test_no_frame_offers_nothing(self):
        offer = DownloadOffer()
        source = StaticFrameSource()
        source.frame = None
        exporter = SnapshotExporter(lambda: source, OverlaySurface(), offer)
        assert exporter.capture() is None
        assert offer.take() is None

    def test_filename_uses_epoch_millis(self):
        exporter = SnapshotExporter(lambda: None, OverlaySurface(), DownloadOffer(), clock=lambda: 1700000000.123)
        assert exporter.filename() == "snapshot_1700000000123.png"

    def test_capture_offers_png_of_frame_plus_overlay(self):
        offer = DownloadOffer()
        source = StaticFrameSource(make_frame(50))
        surface = OverlaySurface(64, 48)
        surface.draw_box((10, 10, 20, 20), (0, 255, 0))
        exporter = SnapshotExporter(lambda: source, surface, offer, filename_prefix="face", clock=lambda: 12.5)

        data = exporter.capture()
        offered = offer.take()

        assert data is not None
        assert offered.data == data
        assert offered.filename == "face_12500.png"
        assert offered.media_type == "image/png"

        decoded = cv2.imdecode(np.frombuffer(data, dtype=np.uint8), cv2.IMREAD_COLOR)
        assert decoded.shape == (48, 64, 3)
        assert tuple(decoded[10, 10]) == (0, 255, 0)
        assert tuple(decoded[40, 60]) == (50, 50, 50)

    def test_overlay_unchanged_by_capture(self):
        source = StaticFrameSource()
        surface = OverlaySurface(64, 48)
        surface.draw_box((10, 10, 20, 20), (0, 255, 0))
        before = surface.pixels()
        SnapshotExporter(lambda: source, surface, DownloadOffer()).capture()
        assert np.array_equal(surface.pixels(), before)

    def test_preview_is_jpeg(self):
        source = StaticFrameSource()
        exporter = SnapshotExporter(lambda: source, OverlaySurface(), DownloadOffer())
        preview = exporter.compose_preview(80)
        assert preview[:2] == b"\xff\xd8"


class TestDownloadOffer:
    """Tests for DownloadOffer"""

    def test_take_returns_latest_and_clears(self):
        offer = DownloadOffer()
        offer.offer(b"a", "a.png", "image/png")
        offer.offer(b"b", "b.png", "image/png")
        assert offer.take().filename == "b.png"
        assert offer.take() is None

"""
Unit tests for resizable units.

Covers construction rules for single images and frame sequences, joint
resizing and encoding, and loading units from disk.
"""

import io
import shutil
import tempfile
import unittest
from pathlib import Path

from PIL import Image

from lazy_shrink.core.modules.analysis.media_utils import decode_media
from lazy_shrink.core.modules.errors import CodecError, ProbeError
from lazy_shrink.core.modules.processing.resizable_unit import (
    FrameSequence, SingleImage, load_unit, unit_from_bytes,
)


def _frames(count, size=(60, 40)):
    return [Image.new("RGBA", size, (i * 50 % 256, 100, 200, 255)) for i in range(count)]


class TestSingleImage(unittest.TestCase):
    """Still-image unit."""

    def test_from_image_converts_to_rgba(self):
        unit = SingleImage.from_image(Image.new("RGB", (30, 20), (1, 2, 3)))
        self.assertEqual(unit.kind, "image")
        self.assertEqual(unit.frames[0].mode, "RGBA")
        self.assertEqual(unit.size, (30, 20))
        self.assertEqual(unit.frame_count, 1)

    def test_rejects_multiple_frames(self):
        with self.assertRaises(ValueError):
            SingleImage(_frames(2))

    def test_resize_returns_new_single_image(self):
        unit = SingleImage(_frames(1))
        resized = unit.resize(0.5)

        self.assertIsInstance(resized, SingleImage)
        self.assertEqual(resized.size, (30, 20))
        self.assertEqual(unit.size, (60, 40))

    def test_encode_png(self):
        data = SingleImage(_frames(1)).encode("png")
        self.assertTrue(data.startswith(b"\x89PNG"))

    def test_raw_byte_length(self):
        self.assertEqual(SingleImage(_frames(1)).raw_byte_length(), 60 * 40 * 4)


class TestFrameSequence(unittest.TestCase):
    """Animated unit."""

    def test_rejects_empty(self):
        with self.assertRaises(ValueError):
            FrameSequence([])

    def test_rejects_mixed_sizes(self):
        frames = _frames(2) + [Image.new("RGBA", (10, 10))]
        with self.assertRaises(ValueError):
            FrameSequence(frames)

    def test_resize_keeps_timing_and_count(self):
        unit = FrameSequence(_frames(3), delay_ms=70, loop=2)
        resized = unit.resize(0.25)

        self.assertIsInstance(resized, FrameSequence)
        self.assertEqual(resized.frame_count, 3)
        self.assertEqual(resized.size, (15, 10))
        self.assertEqual((resized.delay_ms, resized.loop), (70, 2))

    def test_joint_gif_encoding(self):
        unit = FrameSequence(_frames(3), delay_ms=70)
        decoded = decode_media(unit.encode("gif"), "gif")

        self.assertEqual(len(decoded.frames), 3)
        self.assertEqual(decoded.delay_ms, 70)

    def test_sequence_cannot_encode_as_jpeg(self):
        with self.assertRaises(CodecError):
            FrameSequence(_frames(2)).encode("jpg")

    def test_raw_byte_length_sums_frames(self):
        self.assertEqual(FrameSequence(_frames(3)).raw_byte_length(), 3 * 60 * 40 * 4)

    def test_repr(self):
        self.assertEqual(repr(FrameSequence(_frames(2))), "FrameSequence(60x40, frames=2)")


class TestLoading(unittest.TestCase):
    """Units built from encoded data."""

    def setUp(self):
        self.test_dir = Path(tempfile.mkdtemp())

    def tearDown(self):
        if self.test_dir.exists():
            shutil.rmtree(self.test_dir)

    def test_still_png_loads_as_single_image(self):
        path = self.test_dir / "still.png"
        Image.new("RGB", (16, 8), (9, 9, 9)).save(path)

        unit = load_unit(path)
        self.assertIsInstance(unit, SingleImage)
        self.assertEqual(unit.size, (16, 8))

    def test_animated_gif_loads_as_sequence(self):
        buffer = io.BytesIO()
        frames = [Image.new("RGB", (16, 16), color) for color in ((255, 0, 0), (0, 255, 0))]
        frames[0].save(buffer, format="GIF", save_all=True, append_images=frames[1:], duration=50, loop=0)

        unit = unit_from_bytes(buffer.getvalue())
        self.assertIsInstance(unit, FrameSequence)
        self.assertEqual(unit.frame_count, 2)
        self.assertEqual(unit.delay_ms, 50)

    def test_missing_file(self):
        with self.assertRaises(ProbeError):
            load_unit(self.test_dir / "nope.png")

    def test_garbage_bytes(self):
        with self.assertRaises(CodecError):
            unit_from_bytes(b"definitely not an image")


if __name__ == '__main__':
    unittest.main()

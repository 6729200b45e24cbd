"""Tests for the preview module.

This module tests the preview/export and preview/display functionality:
- Plain PPM output format
- PNG export through Pillow
- Suffix-based dispatch
- Matplotlib preview with a non-interactive backend
"""

import io

import numpy as np
import pytest
from PIL import Image as PILImage

from raytracer.preview.export import save_image, save_png, save_ppm, write_ppm


def gradient_image():
    image = np.zeros((2, 3, 3), dtype=np.uint8)
    image[0, 0] = (255, 0, 0)
    image[0, 1] = (0, 255, 0)
    image[0, 2] = (0, 0, 255)
    image[1, :] = (10, 20, 30)
    return image


class TestWritePpm:
    """Test plain PPM output."""

    def test_header_and_body(self):
        """Test the P3 header followed by one line per pixel, top row first."""
        stream = io.StringIO()

        write_ppm(gradient_image(), stream)

        assert stream.getvalue() == (
            "P3\n3 2\n255\n"
            "255 0 0\n0 255 0\n0 0 255\n"
            "10 20 30\n10 20 30\n10 20 30\n"
        )

    def test_line_count(self):
        """Test that a W x H image has three header lines plus W * H pixel lines."""
        stream = io.StringIO()

        write_ppm(np.zeros((4, 5, 3), dtype=np.uint8), stream)

        assert len(stream.getvalue().splitlines()) == 3 + 20

    def test_rejects_wrong_shape(self):
        """Test that a grayscale image is rejected."""
        with pytest.raises(ValueError, match="shape"):
            write_ppm(np.zeros((4, 5), dtype=np.uint8), io.StringIO())

    def test_rejects_wrong_dtype(self):
        """Test that a float image is rejected."""
        with pytest.raises(ValueError, match="dtype"):
            write_ppm(np.zeros((4, 5, 3), dtype=np.float32), io.StringIO())

    def test_save_ppm(self, tmp_path):
        """Test writing a PPM file to disk."""
        filepath = tmp_path / "image.ppm"

        save_ppm(gradient_image(), filepath)

        assert filepath.read_text().startswith("P3\n3 2\n255\n")


class TestSavePng:
    """Test PNG export functionality."""

    def test_save_png_roundtrip(self, tmp_path):
        """Test that saved PNG pixels match the buffer."""
        filepath = tmp_path / "image.png"

        save_png(gradient_image(), filepath)

        with PILImage.open(filepath) as loaded:
            assert loaded.size == (3, 2)
            assert loaded.mode == "RGB"
            np.testing.assert_array_equal(np.array(loaded), gradient_image())


class TestSaveImage:
    """Test suffix-based dispatch."""

    def test_ppm_suffix_writes_text(self, tmp_path):
        """Test that .ppm files are written as plain text."""
        path = save_image(gradient_image(), tmp_path / "out" / "render.ppm")

        assert path.exists()
        assert path.read_text().startswith("P3\n")

    def test_png_suffix_uses_pillow(self, tmp_path):
        """Test that .png files are real PNG images."""
        path = save_image(gradient_image(), tmp_path / "render.png")

        with PILImage.open(path) as loaded:
            assert loaded.format == "PNG"

    def test_creates_parent_directories(self, tmp_path):
        """Test that missing directories are created."""
        path = save_image(gradient_image(), tmp_path / "a" / "b" / "render.ppm")

        assert path.parent.is_dir()


class TestShowPreview:
    """Test the Matplotlib preview without opening a window."""

    def test_show_preview_draws_image(self, monkeypatch):
        """Test that the preview draws the buffer and calls show."""
        import matplotlib.pyplot as plt

        from raytracer.preview.display import show_preview

        shown = []
        monkeypatch.setattr(plt, "show", lambda block=True: shown.append(block))

        show_preview(gradient_image(), block=False)

        fig = plt.gcf()
        ax = fig.axes[0]
        assert shown == [False]
        assert ax.get_title() == "Render Preview - 3x2"
        np.testing.assert_array_equal(ax.images[0].get_array(), gradient_image())
        plt.close(fig)

    def test_show_preview_custom_title(self, monkeypatch):
        """Test that a custom title is used."""
        import matplotlib.pyplot as plt

        from raytracer.preview.display import show_preview

        monkeypatch.setattr(plt, "show", lambda block=True: None)

        show_preview(gradient_image(), title="Random spheres")

        assert plt.gcf().axes[0].get_title() == "Random spheres"
        plt.close("all")

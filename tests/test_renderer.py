"""Tests for the band-parallel renderer.

Tests cover:
- Render settings validation
- Band partitioning of image rows
- Gamma correction and 8-bit quantization
- Output buffer shape, determinism and progress reporting
- Exact sky rows replayed from the band random stream
- Error propagation out of the render loop
"""

import numpy as np
import pytest

from raytracer.camera.thin_lens import setup_camera
from raytracer.core.integrator import sky_color
from raytracer.core.renderer import RenderSettings, band_ranges, render, render_band, to_rgb8
from raytracer.core.sampling import RandomSource
from raytracer.geometry.hittable import Hittable
from raytracer.scene.intersection import Scene
from raytracer.scene.presets import two_spheres_camera, two_spheres_scene


class Plane(Hittable):
    """An intersectable object the band kernel cannot trace."""

    def check_hit(self, ray, t_min, t_max):
        return None


def small_render(width=8, height=6, samples=2, threads=3, seed=5, scene=None):
    settings = RenderSettings(width=width, height=height, samples=samples, threads=threads, seed=seed)
    camera = setup_camera(two_spheres_camera(settings.aspect_ratio))
    return render(scene if scene is not None else two_spheres_scene(), camera, settings)


class TestRenderSettings:
    """Tests for RenderSettings."""

    def test_defaults(self):
        """Test the default sampling and threading parameters."""
        settings = RenderSettings(width=2000, height=1000)

        assert settings.samples == 50
        assert settings.threads == 6
        assert settings.max_depth == 50
        assert settings.seed is None
        assert settings.aspect_ratio == pytest.approx(2.0)

    @pytest.mark.parametrize("field", ["width", "height", "samples", "threads"])
    def test_rejects_non_positive(self, field):
        """Test that zero sizes, samples or threads are rejected."""
        params = dict(width=4, height=4, samples=1, threads=1)
        params[field] = 0

        with pytest.raises(ValueError, match=field):
            RenderSettings(**params)


class TestBandRanges:
    """Tests for splitting rows into bands."""

    def test_even_split(self):
        """Test rows that divide evenly among threads."""
        assert band_ranges(6, 3) == [(0, 2), (2, 4), (4, 6)]

    def test_last_band_shorter(self):
        """Test that a remainder goes to a shorter final band."""
        assert band_ranges(1000, 6) == [
            (0, 167),
            (167, 334),
            (334, 501),
            (501, 668),
            (668, 835),
            (835, 1000),
        ]

    def test_more_threads_than_rows(self):
        """Test that surplus threads get no band."""
        assert band_ranges(3, 8) == [(0, 1), (1, 2), (2, 3)]

    @pytest.mark.parametrize("height, threads", [(1, 1), (7, 2), (100, 6), (13, 13), (10, 4)])
    def test_every_row_covered_once(self, height, threads):
        """Test that bands are contiguous, disjoint and cover every row."""
        bands = band_ranges(height, threads)
        rows = [row for start, end in bands for row in range(start, end)]

        assert rows == list(range(height))
        assert len(bands) <= threads
        assert all(end > start for start, end in bands)


class TestToRgb8:
    """Tests for gamma correction and quantization."""

    def test_black_and_white(self):
        """Test that 0 and 1 map to 0 and 255."""
        result = to_rgb8(np.array([0.0, 1.0]))

        assert result.tolist() == [0, 255]
        assert result.dtype == np.uint8

    def test_gamma_two(self):
        """Test that 0.25 encodes to sqrt(0.25) * 255 = 127.5, rounded up."""
        assert to_rgb8(np.array([0.25])).tolist() == [128]

    def test_rounds_to_nearest(self):
        """Test rounding instead of truncation."""
        # sqrt(0.5) * 255 = 180.31
        assert to_rgb8(np.array([0.5])).tolist() == [180]
        # sqrt(0.9) * 255 = 241.91
        assert to_rgb8(np.array([0.9])).tolist() == [242]

    def test_clamps_out_of_range(self):
        """Test that values outside [0, 1] are clamped."""
        assert to_rgb8(np.array([-0.5, 4.0])).tolist() == [0, 255]

    def test_preserves_shape(self):
        """Test that image shape is preserved."""
        assert to_rgb8(np.zeros((3, 4, 3))).shape == (3, 4, 3)


class TestRenderBand:
    """Tests for rendering a single band."""

    def test_writes_into_view(self):
        """Test that a band fills only its own slice of the buffer."""
        settings = RenderSettings(width=4, height=4, samples=1, threads=2, seed=1)
        camera = setup_camera(two_spheres_camera(settings.aspect_ratio))
        image = np.zeros((4, 4, 3), dtype=np.uint8)

        render_band(two_spheres_scene(), camera, settings, 0, image[0:2], RandomSource.from_seed(1))

        assert image[0:2].any()
        assert not image[2:4].any()


class TestRender:
    """Tests for the full threaded render."""

    def test_output_shape_and_dtype(self):
        """Test that the buffer is height x width x 3 bytes."""
        image = small_render(width=8, height=6)

        assert image.shape == (6, 8, 3)
        assert image.dtype == np.uint8

    def test_seeded_render_is_reproducible(self):
        """Test that the same seed and thread count give identical images."""
        first = small_render(seed=11, threads=3)
        second = small_render(seed=11, threads=3)

        np.testing.assert_array_equal(first, second)

    def test_empty_scene_is_pure_sky(self):
        """Test that an empty scene renders a vertical sky gradient."""
        image = small_render(width=4, height=8, samples=4, scene=Scene())

        # Blue channel of the sky is always 1
        assert (image[:, :, 2] == 255).all()
        # Whiter toward the bottom of the image
        assert image[0, 0, 0] < image[-1, 0, 0]

    def test_two_spheres_top_row_is_sky(self):
        """Test that rays above both spheres see only the sky."""
        image = small_render(width=20, height=10, samples=3)

        top = image[0]
        assert (top[:, 2] == 255).all()
        assert (top[:, 0] < 255).all()

    def test_top_row_matches_replayed_sky(self):
        """Test the top row pixel for pixel against sky colors of the same jittered rays."""
        width, height = 20, 10
        settings = RenderSettings(width=width, height=height, samples=1, threads=1, seed=7)
        camera = setup_camera(two_spheres_camera(settings.aspect_ratio))

        image = render(two_spheres_scene(), camera, settings)

        # One band: the top row is drawn first, horizontal then vertical offset per pixel
        source = RandomSource.spawn(7, 1)[0]
        expected = []
        for x in range(width):
            s = (x + source.uniform()) / width
            t = (height - 1 + source.uniform()) / height
            expected.append(sky_color(camera.get_ray(s, t)).to_tuple())

        np.testing.assert_array_equal(image[0], to_rgb8(np.array(expected)))

    def test_two_spheres_center_sees_red_sphere(self):
        """Test that the image center is tinted by the red sphere."""
        image = small_render(width=20, height=10, samples=8)

        r, g, b = image[5, 10].tolist()
        assert r > g
        assert r > b

    def test_single_thread_matches_shape(self):
        """Test rendering with a single band."""
        image = small_render(width=5, height=3, threads=1)

        assert image.shape == (3, 5, 3)

    def test_progress_callback(self):
        """Test that the callback reports completed rows after each launch."""
        settings = RenderSettings(width=4, height=4, samples=1, threads=3, seed=2)
        camera = setup_camera(two_spheres_camera(settings.aspect_ratio))
        calls = []

        render(two_spheres_scene(), camera, settings, callback=lambda done, total: calls.append((done, total)))

        # ceil(4 / 3) = 2 rows per band, so 2 bands traced in 2 launches
        assert calls == [(2, 4), (4, 4)]

    def test_progress_counts_uneven_bands(self):
        """Test that a shorter last band stops contributing rows once done."""
        settings = RenderSettings(width=2, height=5, samples=1, threads=2, seed=2)
        camera = setup_camera(two_spheres_camera(settings.aspect_ratio))
        calls = []

        render(two_spheres_scene(), camera, settings, callback=lambda done, total: calls.append((done, total)))

        # Bands of 3 and 2 rows
        assert calls == [(2, 5), (4, 5), (5, 5)]

    def test_unsupported_object_is_rejected(self):
        """Test that a scene the kernel cannot trace fails before rendering."""
        with pytest.raises(TypeError, match="Plane"):
            small_render(scene=Scene([Plane()]))

    def test_callback_exception_aborts_render(self):
        """Test that an error raised by the callback stops the remaining launches."""
        settings = RenderSettings(width=4, height=6, samples=1, threads=2, seed=3)
        camera = setup_camera(two_spheres_camera(settings.aspect_ratio))
        calls = []

        def callback(done, total):
            calls.append(done)
            raise RuntimeError("stop")

        with pytest.raises(RuntimeError, match="stop"):
            render(two_spheres_scene(), camera, settings, callback=callback)

        assert calls == [2]

    @pytest.mark.parametrize("threads", [1, 2, 4, 10])
    def test_any_thread_count_is_reproducible(self, threads):
        """Test that each thread count gives a full, repeatable image."""
        first = small_render(width=6, height=10, threads=threads, seed=4)
        second = small_render(width=6, height=10, threads=threads, seed=4)

        assert first.shape == (10, 6, 3)
        np.testing.assert_array_equal(first, second)

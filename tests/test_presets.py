"""Tests for the ready-made scenes and cameras."""

import pytest

from raytracer.core.sampling import RandomSource
from raytracer.core.vector import Vector3
from raytracer.materials.dielectric import Dielectric
from raytracer.materials.lambertian import Lambertian
from raytracer.materials.metal import Metal
from raytracer.scene.presets import (
    SMALL_SPHERE_RADIUS,
    random_spheres_camera,
    random_spheres_scene,
    two_spheres_camera,
    two_spheres_scene,
)


class TestRandomSpheresScene:
    """Tests for the random spheres scene."""

    @pytest.fixture
    def scene(self):
        return random_spheres_scene(RandomSource.from_seed(3))

    def test_fixed_spheres_come_first(self, scene):
        """Test the ground and the three large spheres."""
        ground, glass, matte, metal = list(scene)[:4]

        assert ground.center == Vector3(0.0, -1000.0, 0.0)
        assert ground.radius == 1000.0
        assert isinstance(glass.material, Dielectric)
        assert glass.material.refraction_index == 1.5
        assert isinstance(matte.material, Lambertian)
        assert matte.material.albedo == Vector3(0.4, 0.2, 0.1)
        assert isinstance(metal.material, Metal)
        assert metal.material.fuzz == 0.0

    def test_small_sphere_count(self, scene):
        """Test that up to 400 small spheres are placed on the grid."""
        small = list(scene)[4:]

        assert 390 <= len(small) <= 400
        assert all(s.radius == SMALL_SPHERE_RADIUS for s in small)

    def test_small_spheres_keep_clear_of_metal_sphere(self, scene):
        """Test that no small sphere sits within 0.9 of (4, 0.2, 0)."""
        for sphere in list(scene)[4:]:
            assert (sphere.center - Vector3(4.0, 0.2, 0.0)).length() > 0.9
            assert sphere.center.y == SMALL_SPHERE_RADIUS

    def test_material_mix(self, scene):
        """Test that the small spheres are mostly diffuse with some metal."""
        small = list(scene)[4:]
        diffuse = sum(isinstance(s.material, Lambertian) for s in small)
        metal = sum(isinstance(s.material, Metal) for s in small)

        assert 0.7 < diffuse / len(small) < 0.9
        assert metal > 0

    def test_same_seed_same_scene(self):
        """Test that the scene is reproducible from a seed."""
        a = random_spheres_scene(RandomSource.from_seed(9), grid=3)
        b = random_spheres_scene(RandomSource.from_seed(9), grid=3)

        assert [s.center for s in a] == [s.center for s in b]

    def test_grid_size(self):
        """Test that a smaller grid places fewer spheres."""
        scene = random_spheres_scene(RandomSource.from_seed(1), grid=2)

        assert len(scene) <= 4 + 16


class TestPresetCameras:
    """Tests for the preset camera configurations."""

    def test_random_spheres_camera(self):
        """Test the position, field of view and focus of the random scene camera."""
        config = random_spheres_camera(aspect_ratio=2.0)

        assert config.look_from == Vector3(11.0, 1.8, 3.5)
        assert config.look_at == Vector3(-1.0, 0.5, 0.0)
        assert config.vfov == 20.0
        assert config.aperture == pytest.approx(0.1)
        assert config.focus_distance == pytest.approx((config.look_from - config.look_at).length())

    def test_two_spheres(self):
        """Test the two spheres scene and its pinhole camera."""
        scene = two_spheres_scene()
        config = two_spheres_camera(aspect_ratio=2.0)

        assert [s.radius for s in scene] == [0.5, 100.0]
        assert config.aperture == 0.0
        assert config.vfov == 90.0

"""Unit tests for the pinhole camera module.

Tests cover:
- Camera configuration and validation
- Image-plane mapping for center and corner pixels
- Ray origin and direction
- Jittered sampling for anti-aliasing
"""

import math

import numpy as np
import pytest
import taichi as ti


def _ray_through(px, py, width, height):
    """Generate a primary ray in a kernel and return (origin, direction)."""
    from tinytracer.camera.pinhole import get_ray

    origin = ti.Vector.field(3, dtype=ti.f32, shape=())
    direction = ti.Vector.field(3, dtype=ti.f32, shape=())

    @ti.kernel
    def test_kernel(px: ti.f32, py: ti.f32, width: ti.i32, height: ti.i32):
        ray = get_ray(px, py, width, height)
        origin[None] = ray.origin
        direction[None] = ray.direction

    test_kernel(px, py, width, height)
    return origin[None].to_numpy(), direction[None].to_numpy()


class TestCameraConfig:
    """Tests for PinholeCamera configuration."""

    def test_defaults(self):
        """Test the default camera position and FOV."""
        from tinytracer.camera.pinhole import PinholeCamera

        camera = PinholeCamera()
        assert camera.position == (0.0, 0.0, 0.0)
        assert camera.vfov == 60.0

    def test_fov_scale(self):
        """Test that fov_scale is tan(vfov / 2)."""
        from tinytracer.camera.pinhole import PinholeCamera

        assert PinholeCamera(vfov=90.0).fov_scale == pytest.approx(1.0)
        assert PinholeCamera(vfov=60.0).fov_scale == pytest.approx(math.tan(math.radians(30.0)))

    @pytest.mark.parametrize("vfov", [0.0, -10.0, 180.0, 200.0])
    def test_invalid_fov(self, vfov):
        """Test that a FOV outside (0, 180) is rejected."""
        from tinytracer.camera.pinhole import PinholeCamera

        with pytest.raises(ValueError, match="field of view"):
            PinholeCamera(vfov=vfov)

    def test_invalid_position(self):
        """Test that the position must have three components."""
        from tinytracer.camera.pinhole import PinholeCamera

        with pytest.raises(ValueError, match="3 components"):
            PinholeCamera(position=(0.0, 0.0))

    def test_setup_camera(self):
        """Test that setup_camera uploads origin and fov_scale."""
        from tinytracer.camera.pinhole import PinholeCamera, get_camera_info, setup_camera

        setup_camera(PinholeCamera(position=(1.0, -2.0, 0.5), vfov=90.0))
        info = get_camera_info()
        assert info["origin"] == pytest.approx((1.0, -2.0, 0.5))
        assert info["fov_scale"] == pytest.approx(1.0, abs=1e-6)


class TestRayGeneration:
    """Tests for primary ray generation."""

    def test_center_ray_direction(self):
        """Test that the image center looks straight down -Z."""
        # Pixel coordinate (1.5, 0.5) maps to the center of a 4x2 image
        _, direction = _ray_through(1.5, 0.5, 4, 2)
        np.testing.assert_allclose(direction, [0.0, 0.0, -1.0], atol=1e-6)

    def test_ray_direction_normalized(self):
        """Test that primary ray directions have unit length."""
        for px, py in [(0.0, 0.0), (63.0, 47.0), (10.0, 20.0)]:
            _, direction = _ray_through(px, py, 64, 48)
            assert math.sqrt(float((direction**2).sum())) == pytest.approx(1.0, abs=1e-5)

    def test_top_row_looks_up(self):
        """Test that row 0 is the top of the image (+Y)."""
        _, top = _ray_through(1.5, 0.0, 4, 4)
        _, bottom = _ray_through(1.5, 3.0, 4, 4)
        assert top[1] > 0.0
        assert bottom[1] < 0.0

    def test_left_column_looks_left(self):
        """Test that column 0 is the left of the image (-X)."""
        _, left = _ray_through(0.0, 1.5, 4, 4)
        _, right = _ray_through(3.0, 1.5, 4, 4)
        assert left[0] < 0.0
        assert right[0] > 0.0

    def test_corner_rays_symmetric(self):
        """Test that opposite corners mirror each other."""
        _, top_left = _ray_through(0.0, 0.0, 8, 6)
        _, bottom_right = _ray_through(7.0, 5.0, 8, 6)
        assert top_left[0] == pytest.approx(-bottom_right[0], abs=1e-6)
        assert top_left[1] == pytest.approx(-bottom_right[1], abs=1e-6)
        assert top_left[2] == pytest.approx(bottom_right[2], abs=1e-6)

    def test_fov_90_image_plane_edge(self):
        """Test the image-plane mapping at the top edge with a 90 degree FOV."""
        from tinytracer.camera.pinhole import PinholeCamera, pixel_to_image_plane, setup_camera

        setup_camera(PinholeCamera(vfov=90.0))
        result = ti.Vector.field(2, dtype=ti.f32, shape=())

        @ti.kernel
        def test_kernel():
            # px + 0.5 = 0 puts the sample on the left edge, py + 0.5 = 0 on the top edge
            result[None] = pixel_to_image_plane(-0.5, -0.5, 20, 10)

        test_kernel()
        uv = result[None]
        assert uv[0] == pytest.approx(-2.0, abs=1e-5)  # aspect 2 * fov_scale 1
        assert uv[1] == pytest.approx(1.0, abs=1e-5)

    def test_ray_origin_is_camera_origin(self):
        """Test that rays start at the camera position."""
        from tinytracer.camera.pinhole import PinholeCamera, setup_camera

        setup_camera(PinholeCamera(position=(1.0, 2.0, 3.0)))
        origin, direction = _ray_through(1.5, 0.5, 4, 2)
        np.testing.assert_allclose(origin, [1.0, 2.0, 3.0], atol=1e-6)
        # Direction does not depend on the camera position
        np.testing.assert_allclose(direction, [0.0, 0.0, -1.0], atol=1e-6)


class TestJitteredRays:
    """Tests for jittered primary rays."""

    def test_jittered_rays_vary(self):
        """Test that successive jittered rays through one pixel differ."""
        from tinytracer.camera.pinhole import get_ray_jittered
        from tinytracer.core.sampling import seed_stream

        directions = ti.Vector.field(3, dtype=ti.f32, shape=2)

        @ti.kernel
        def test_kernel():
            state = seed_stream(0, 0)
            state, ray_a = get_ray_jittered(state, 5, 5, 16, 16)
            state, ray_b = get_ray_jittered(state, 5, 5, 16, 16)
            directions[0] = ray_a.direction
            directions[1] = ray_b.direction

        test_kernel()
        d = directions.to_numpy()
        assert not (d[0] == d[1]).all()

    def test_jittered_rays_in_pixel_bounds(self):
        """Test that jittered rays stay within half a pixel of the pixel center."""
        from tinytracer.camera.pinhole import PinholeCamera, get_ray_jittered, setup_camera
        from tinytracer.core.sampling import seed_stream

        setup_camera(PinholeCamera(vfov=90.0))
        n = 256
        width, height = 16, 16
        px, py = 5, 9
        uv = ti.Vector.field(2, dtype=ti.f32, shape=n)

        @ti.kernel
        def test_kernel():
            for i in range(n):
                state = seed_stream(3, i)
                state, ray = get_ray_jittered(state, px, py, width, height)
                # Project back onto the z = -1 image plane
                d = ray.direction / -ray.direction.z
                uv[i] = ti.math.vec2(d.x, d.y)

        test_kernel()
        values = uv.to_numpy()
        pixel_size = 2.0 / width

        center_u = 2.0 * (px + 0.5) / width - 1.0
        center_v = 1.0 - 2.0 * (py + 0.5) / height
        assert abs(values[:, 0] - center_u).max() <= 0.5 * pixel_size + 1e-5
        assert abs(values[:, 1] - center_v).max() <= 0.5 * pixel_size + 1e-5

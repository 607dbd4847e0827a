"""Unit tests for the path tracing integrator.

Tests cover:
- Bounce budget (depth 0 is black)
- Rays escaping to the sky
- Single-bounce attenuation for diffuse and metallic spheres
- Render target setup and validation
- Tone mapping and RGBA8 packing of an empty scene
- Default camera when none has been set up
"""

import math
import os
import subprocess
import sys
import textwrap
from pathlib import Path

import numpy as np
import pytest


@pytest.fixture
def grey():
    from tinytracer.materials.material import Material

    return Material(albedo=(0.5, 0.5, 0.5))


class TestTraceRay:
    """Tests for tracing single rays."""

    def test_depth_zero_is_black(self):
        """Test that a path with no bounce budget carries no light."""
        from tinytracer.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=0)
        assert color == (0.0, 0.0, 0.0)

    def test_miss_returns_sky(self):
        """Test that a ray escaping the empty scene returns the sky color."""
        from tinytracer.core.integrator import trace_ray

        color = trace_ray((0.0, 0.0, 0.0), (0.3, 0.5, -1.0))
        assert color == pytest.approx((0.5, 0.8, 0.9), abs=1e-6)

    def test_diffuse_single_bounce(self, grey):
        """Test that one diffuse bounce scales the sky by 0.25 * albedo."""
        from tinytracer.core.integrator import trace_ray
        from tinytracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -2.0), 0.5, grey)

        for seed in range(4):
            color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), seed=seed)
            assert color == pytest.approx((0.0625, 0.1, 0.1125), abs=1e-6)

    def test_metal_single_bounce(self):
        """Test that a mirror reflects straight back to the sky."""
        from tinytracer.core.integrator import trace_ray
        from tinytracer.materials.material import Material
        from tinytracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -2.0), 0.5, Material(albedo=(1.0, 0.5, 0.0), metallic=1.0))

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0))
        assert color == pytest.approx((0.125, 0.1, 0.0), abs=1e-6)

    def test_budget_exhausted_is_black(self, grey):
        """Test that a path still bouncing when the budget runs out is black."""
        from tinytracer.core.integrator import trace_ray
        from tinytracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -2.0), 0.5, grey)

        color = trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, -1.0), max_depth=1)
        assert color == (0.0, 0.0, 0.0)

    def test_zero_direction_rejected(self):
        """Test that a zero direction is rejected."""
        from tinytracer.core.integrator import trace_ray

        with pytest.raises(ValueError, match="non-zero"):
            trace_ray((0.0, 0.0, 0.0), (0.0, 0.0, 0.0))


class TestRenderTarget:
    """Tests for render target setup."""

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (-1, 5), (4096, 10), (10, 4096)])
    def test_invalid_dimensions(self, width, height):
        """Test that out-of-range dimensions are rejected."""
        from tinytracer.core.integrator import setup_render_target

        with pytest.raises(ValueError):
            setup_render_target(width, height)

    @pytest.mark.parametrize("seed", [-1, 2**31])
    def test_invalid_seed(self, seed):
        """Test that seeds outside [0, 2^31) are rejected."""
        from tinytracer.core.integrator import setup_render_target

        with pytest.raises(ValueError, match="Seed"):
            setup_render_target(8, 8, seed)

    def test_setup_sets_dimensions(self):
        """Test that dimensions are recorded and samples reset."""
        from tinytracer.core.integrator import (
            get_image_dimensions,
            get_total_samples,
            render_passes,
            setup_render_target,
        )

        setup_render_target(8, 4)
        render_passes(2)
        assert get_total_samples() == 2

        setup_render_target(6, 3)
        assert get_image_dimensions() == (6, 3)
        assert get_total_samples() == 0

    def test_resolve_without_samples(self):
        """Test that resolving before any sample raises RuntimeError."""
        from tinytracer.core.integrator import resolve_pixels, setup_render_target

        setup_render_target(4, 4)
        with pytest.raises(RuntimeError, match="No samples"):
            resolve_pixels()


class TestRenderImage:
    """Tests for full image rendering."""

    def test_empty_scene_is_sky(self):
        """Test that every pixel of an empty scene is the tone-mapped sky."""
        from tinytracer.core.integrator import render_image

        pixels = render_image(16, 9, num_samples=4, seed=0)

        assert pixels.width == 16
        assert pixels.height == 9
        data = pixels.data.astype(np.int32)
        # sqrt(0.5, 0.8, 0.9) * 255 truncated
        assert np.all(data[..., 0] == 180)
        assert np.all(data[..., 1] == 228)
        assert np.all(np.abs(data[..., 2] - 241) <= 1)
        assert np.all(data[..., 3] == 255)

    def test_buffer_size(self):
        """Test that the byte size is width * height * 4."""
        from tinytracer.core.integrator import render_image

        pixels = render_image(7, 5, num_samples=1)
        assert len(pixels.to_bytes()) == 7 * 5 * 4

    def test_invalid_sample_count(self):
        """Test that a non-positive sample count is rejected."""
        from tinytracer.core.integrator import render_image

        with pytest.raises(ValueError, match="num_samples"):
            render_image(8, 8, num_samples=0)

    def test_same_seed_reproducible(self, grey):
        """Test that a fixed seed gives bit-identical images."""
        from tinytracer.core.integrator import render_image
        from tinytracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.4, grey)
        add_sphere((0.0, -100.5, -1.0), 100.0, grey)

        first = render_image(24, 16, num_samples=3, seed=7)
        second = render_image(24, 16, num_samples=3, seed=7)
        assert first.to_bytes() == second.to_bytes()

    def test_different_seeds_differ(self, grey):
        """Test that changing the seed changes the noise."""
        from tinytracer.core.integrator import render_image
        from tinytracer.scene.intersection import add_sphere

        add_sphere((0.0, 0.0, -1.0), 0.4, grey)
        add_sphere((0.0, -100.5, -1.0), 100.0, grey)

        first = render_image(24, 16, num_samples=1, seed=1)
        second = render_image(24, 16, num_samples=1, seed=2)
        assert first.to_bytes() != second.to_bytes()


class TestDefaultCamera:
    """Tests for rendering before any camera has been set up."""

    @staticmethod
    def _forget_camera():
        from tinytracer.camera import pinhole

        pinhole._camera_initialized[None] = 0
        pinhole._camera_origin[None] = [0.0, 0.0, 0.0]
        pinhole._fov_scale[None] = 0.0

    def test_render_uploads_default_camera(self, grey):
        """Test that rendering without a camera uses the 60 degree default."""
        from tinytracer.camera.pinhole import get_camera_info
        from tinytracer.core.integrator import render_image
        from tinytracer.scene.intersection import add_sphere

        self._forget_camera()
        add_sphere((0.0, 0.0, -1.0), 0.4, grey)

        pixels = render_image(16, 9, num_samples=1)

        assert get_camera_info()["fov_scale"] == pytest.approx(math.tan(math.radians(30.0)))
        # Corner rays miss the sphere, the center ray hits it
        assert pixels.pixel(0, 0)[:2] == (180, 228)
        assert pixels.pixel(8, 4)[:2] != (180, 228)

    def test_explicit_camera_kept(self):
        """Test that an uploaded camera is not replaced by the default."""
        from tinytracer.camera.pinhole import PinholeCamera, get_camera_info, setup_camera
        from tinytracer.core.integrator import render_image

        setup_camera(PinholeCamera(position=(1.0, 2.0, 3.0), vfov=90.0))
        render_image(4, 4, num_samples=1)

        info = get_camera_info()
        assert info["origin"] == pytest.approx((1.0, 2.0, 3.0))
        assert info["fov_scale"] == pytest.approx(1.0)

    def test_fresh_process_render(self):
        """Test render_image in a new interpreter with no camera set up."""
        script = textwrap.dedent(
            """
            import numpy as np
            import taichi as ti

            ti.init(arch=ti.cpu)

            from tinytracer.camera.pinhole import get_camera_info
            from tinytracer.core.integrator import render_image
            from tinytracer.materials.material import Material
            from tinytracer.scene.intersection import add_sphere

            add_sphere((0.0, 0.0, -1.0), 0.2, Material((0.5, 0.5, 0.5)))
            pixels = render_image(16, 9, num_samples=1)
            colors = np.unique(pixels.data.reshape(-1, 4), axis=0)
            print("RESULT", get_camera_info()["fov_scale"], len(colors))
            """
        )
        src_dir = Path(__file__).resolve().parents[1] / "src"
        env = dict(os.environ)
        env["PYTHONPATH"] = os.pathsep.join(
            p for p in (str(src_dir), env.get("PYTHONPATH")) if p
        )

        completed = subprocess.run(
            [sys.executable, "-c", script],
            env=env,
            capture_output=True,
            text=True,
            timeout=300,
        )
        assert completed.returncode == 0, completed.stderr

        result = [line for line in completed.stdout.splitlines() if line.startswith("RESULT")]
        assert len(result) == 1
        _, fov_scale, color_count = result[0].split()
        assert float(fov_scale) == pytest.approx(math.tan(math.radians(30.0)), rel=1e-5)
        assert int(color_count) > 1

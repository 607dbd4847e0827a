"""Scene manager coordinating the camera, spheres and their materials.

This module provides a high-level scene API on top of the sphere storage in
scene.intersection. It keeps Python-side records of what was added so a scene
can be inspected and serialized, and uploads the camera for the render
kernels.

The SceneManager maintains:
- The scene camera (uploaded to the render kernels on every change)
- An ordered list of spheres; insertion order decides ties in intersection
- Scene serialization/configuration support

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.materials.material import Material
    >>> from tinytracer.scene.manager import SceneManager
    >>> scene = SceneManager()
    >>> scene.add_sphere((0, 0, -1), 0.5, Material(albedo=(0.8, 0.3, 0.3)))
    0
"""

from dataclasses import dataclass, field
from typing import Any

from tinytracer.camera.pinhole import PinholeCamera, setup_camera
from tinytracer.materials.material import Material
from tinytracer.scene.intersection import (
    MAX_SPHERES,
    add_sphere,
    clear_scene,
    get_sphere_count,
)


@dataclass
class SphereInfo:
    """Information about a sphere in the scene.

    Attributes:
        sphere_index: The index in the sphere storage arrays.
        center: The center of the sphere.
        radius: The radius of the sphere.
        material: The material assigned to the sphere.
    """

    sphere_index: int
    center: tuple[float, float, float]
    radius: float
    material: Material


@dataclass
class SceneConfig:
    """Configuration for scene serialization.

    Attributes:
        camera: Camera configuration with "position" and "vfov" keys.
        spheres: List of sphere configurations, each with "center", "radius"
            and a nested "material" dict.
    """

    camera: dict[str, Any] = field(default_factory=dict)
    spheres: list[dict[str, Any]] = field(default_factory=list)


def _vec3_from_config(values: Any, name: str) -> tuple[float, float, float]:
    """Convert a 3-element list from a config dict into a tuple."""
    if len(values) != 3:
        raise ValueError(f"{name} must have 3 components, got {len(values)}")
    return (float(values[0]), float(values[1]), float(values[2]))


class SceneManager:
    """Scene of spheres viewed through a pinhole camera.

    Attributes:
        spheres: List of SphereInfo for all spheres in the scene.

    Example:
        >>> scene = SceneManager()
        >>> scene.set_camera(PinholeCamera(position=(0, 0, 1), vfov=45.0))
        >>> grey = Material(albedo=(0.5, 0.5, 0.5))
        >>> mirror = Material(albedo=(1.0, 1.0, 1.0), metallic=1.0)
        >>> scene.add_sphere((0, 0, -1), 0.2, grey)
        >>> scene.add_sphere((0.45, 0, -1), 0.2, mirror)
    """

    def __init__(self) -> None:
        """Initialize an empty scene with the default camera."""
        self.spheres: list[SphereInfo] = []
        self._camera = PinholeCamera()
        self._clear_all()
        setup_camera(self._camera)

    def _clear_all(self) -> None:
        """Clear all scene data including Taichi fields."""
        clear_scene()
        self.spheres.clear()

    def clear(self) -> None:
        """Remove every sphere from the scene.

        The camera is kept.
        """
        self._clear_all()

    # =========================================================================
    # Camera
    # =========================================================================

    @property
    def camera(self) -> PinholeCamera:
        """Get the scene camera."""
        return self._camera

    def set_camera(self, camera: PinholeCamera) -> None:
        """Replace the scene camera and upload it for rendering.

        Args:
            camera: The new camera configuration.
        """
        self._camera = camera
        setup_camera(camera)

    # =========================================================================
    # Primitive Management
    # =========================================================================

    def add_sphere(
        self,
        center: tuple[float, float, float],
        radius: float,
        material: Material,
    ) -> int:
        """Add a sphere to the scene.

        Args:
            center: The center point of the sphere as (x, y, z).
            radius: The radius of the sphere (must be positive).
            material: The material of the sphere.

        Returns:
            The index of the added sphere.

        Raises:
            ValueError: If the radius is not positive or the center does not
                have three components.
            RuntimeError: If the maximum number of spheres is exceeded.
        """
        if len(center) != 3:
            raise ValueError(f"Sphere center must have 3 components, got {len(center)}")

        sphere_index = add_sphere(center, radius, material)

        info = SphereInfo(
            sphere_index=sphere_index,
            center=(float(center[0]), float(center[1]), float(center[2])),
            radius=float(radius),
            material=material,
        )
        self.spheres.append(info)

        return sphere_index

    # =========================================================================
    # Scene Queries
    # =========================================================================

    def get_sphere_count(self) -> int:
        """Get the number of spheres in the scene."""
        return get_sphere_count()

    # =========================================================================
    # Scene Serialization
    # =========================================================================

    def to_config(self) -> SceneConfig:
        """Export the scene to a configuration object.

        Returns:
            A SceneConfig containing the camera and all spheres.
        """
        config = SceneConfig(
            camera={
                "position": list(self._camera.position),
                "vfov": self._camera.vfov,
            }
        )

        for sphere in self.spheres:
            sphere_config = {
                "center": list(sphere.center),
                "radius": sphere.radius,
                "material": {
                    "albedo": list(sphere.material.albedo),
                    "roughness": sphere.material.roughness,
                    "metallic": sphere.material.metallic,
                },
            }
            config.spheres.append(sphere_config)

        return config

    def from_config(self, config: SceneConfig) -> None:
        """Load a scene from a configuration object.

        Clears the current scene and loads the configuration. A missing
        camera entry leaves the default camera.

        Args:
            config: The scene configuration to load.

        Raises:
            ValueError: If the configuration contains invalid data.
        """
        self.clear()

        camera = PinholeCamera()
        if config.camera:
            position = _vec3_from_config(config.camera.get("position", [0.0, 0.0, 0.0]), "Camera position")
            camera = PinholeCamera(position=position, vfov=float(config.camera.get("vfov", camera.vfov)))
        self.set_camera(camera)

        for sphere_config in config.spheres:
            if "center" not in sphere_config or "radius" not in sphere_config:
                raise ValueError(f"Sphere config needs 'center' and 'radius', got {sorted(sphere_config)}")

            center = _vec3_from_config(sphere_config["center"], "Sphere center")
            mat_config = sphere_config.get("material", {})
            material = Material(
                albedo=_vec3_from_config(mat_config.get("albedo", [0.5, 0.5, 0.5]), "Albedo"),
                roughness=float(mat_config.get("roughness", 1.0)),
                metallic=float(mat_config.get("metallic", 0.0)),
            )
            self.add_sphere(center, float(sphere_config["radius"]), material)

    def to_dict(self) -> dict[str, Any]:
        """Export the scene to a dictionary (for JSON serialization).

        Returns:
            A dictionary representation of the scene.
        """
        config = self.to_config()
        return {
            "camera": config.camera,
            "spheres": config.spheres,
        }

    def from_dict(self, data: dict[str, Any]) -> None:
        """Load a scene from a dictionary.

        Args:
            data: Dictionary with 'camera' and 'spheres' keys.
        """
        config = SceneConfig(
            camera=data.get("camera", {}),
            spheres=data.get("spheres", []),
        )
        self.from_config(config)

    @staticmethod
    def get_max_spheres() -> int:
        """Get the maximum number of spheres supported."""
        return MAX_SPHERES

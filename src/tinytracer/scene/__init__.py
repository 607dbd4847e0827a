"""Scene module for scene management and closest-hit queries.

Components:
    intersection: Sphere storage in Taichi fields and closest-hit queries
    manager: Scene manager coordinating camera, spheres and materials
    spheres: The stock three-sphere scene

Scene data is organized for efficient GPU access with a Structure-of-Arrays
layout for sphere geometry and materials.
"""

from .intersection import (
    MAX_SPHERES,
    HitRecord,
    add_sphere,
    clear_scene,
    get_sphere_count,
    intersect_scene,
)
from .manager import SceneConfig, SceneManager, SphereInfo
from .spheres import create_three_spheres_scene

__all__ = [
    # Intersection module
    "HitRecord",
    "add_sphere",
    "clear_scene",
    "get_sphere_count",
    "intersect_scene",
    "MAX_SPHERES",
    # Manager module
    "SceneManager",
    "SphereInfo",
    "SceneConfig",
    # Stock scene
    "create_three_spheres_scene",
]

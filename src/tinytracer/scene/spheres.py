"""Stock three-sphere scene.

The scene consists of:
- A small grey diffuse sphere straight ahead of the camera
- A white mirror sphere of the same size to its right
- A large green diffuse sphere acting as the ground, just touching the
  bottom of the small spheres

The camera sits at the origin looking down -Z with a 60 degree vertical FOV.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from tinytracer.scene.spheres import create_three_spheres_scene
    >>> from tinytracer.core.renderer import Renderer
    >>>
    >>> scene = create_three_spheres_scene()
    >>> pixels = Renderer(426, 240).render()
"""

from tinytracer.camera.pinhole import PinholeCamera
from tinytracer.materials.material import Material
from tinytracer.scene.manager import SceneManager

# =============================================================================
# Scene Parameters
# =============================================================================

SMALL_SPHERE_RADIUS = 0.2

GREY_DIFFUSE = Material(albedo=(0.5, 0.5, 0.5), roughness=1.0, metallic=0.0)
WHITE_MIRROR = Material(albedo=(1.0, 1.0, 1.0), roughness=1.0, metallic=1.0)
GREEN_GROUND = Material(albedo=(0.4, 0.8, 0.5), roughness=1.0, metallic=0.0)

GROUND_RADIUS = 100.0
# Slightly below the small spheres so the ground does not cut through them
GROUND_CENTER = (0.0, -100.21, -1.0)


def create_three_spheres_scene(scene: SceneManager | None = None) -> SceneManager:
    """Create the stock three-sphere scene.

    Args:
        scene: Existing SceneManager to populate. It is cleared first. If
            None, a new one is created.

    Returns:
        The populated SceneManager, with the default camera uploaded.
    """
    if scene is None:
        scene = SceneManager()
    else:
        scene.clear()

    scene.set_camera(PinholeCamera(position=(0.0, 0.0, 0.0), vfov=60.0))

    scene.add_sphere((0.0, 0.0, -1.0), SMALL_SPHERE_RADIUS, GREY_DIFFUSE)
    scene.add_sphere((0.45, 0.0, -1.0), SMALL_SPHERE_RADIUS, WHITE_MIRROR)
    scene.add_sphere(GROUND_CENTER, GROUND_RADIUS, GREEN_GROUND)

    return scene

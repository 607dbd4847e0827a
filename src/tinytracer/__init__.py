"""Small Taichi-based path tracer for scenes made of spheres.

This package renders a scene of diffuse and mirror spheres under a constant
sky into an RGBA8 pixel buffer, with support for:
- Seedable, per-pixel random streams for reproducible renders
- Progressive accumulation with progress callbacks
- PNG export and a preview window

Subpackages:
    core: Ray utilities, random sampling, integrator and rendering loop
    geometry: Sphere primitive and ray-sphere intersection
    materials: Diffuse and metallic scatter
    scene: Scene storage, scene manager and the stock scene
    camera: Pinhole camera with ray generation
    preview: PNG export and preview window
"""

__version__ = "0.1.0"

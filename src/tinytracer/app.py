"""Render the stock three-sphere scene and show it.

This is the command-line entry point. It initializes Taichi, builds the stock
scene, renders it with progressive accumulation and then saves and/or
displays the result.

Usage:
    tinytracer [options]
    python -m tinytracer [options]

Options:
    --width WIDTH           Image width in pixels (default: 426)
    --height HEIGHT         Image height in pixels (default: 240)
    --scale SCALE           Size as a fraction of the display size instead
    --display-width W       Display width used with --scale (default: 1280)
    --display-height H      Display height used with --scale (default: 720)
    --samples SAMPLES       Number of samples per pixel (default: 150)
    --depth DEPTH           Maximum bounces per path (default: 50)
    --seed SEED             Seed for the random streams (default: 0)
    --batch-size SIZE       Samples per progress update (default: 10)
    --backend {cpu,gpu}     Taichi backend (default: gpu, falls back to cpu)
    --output OUTPUT         Also save the image as a PNG file
    --no-window             Do not open the preview window
    --quiet                 Suppress progress output

Example:
    tinytracer --samples 50 --output spheres.png --no-window
"""

from __future__ import annotations

import argparse
import sys
import time
from pathlib import Path
from typing import TYPE_CHECKING

import taichi as ti

if TYPE_CHECKING:
    from tinytracer.core.pixels import PixelBuffer

DEFAULT_DISPLAY_WIDTH = 1280
DEFAULT_DISPLAY_HEIGHT = 720
DEFAULT_SCALE = 1.0 / 3.0


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        prog="tinytracer",
        description="Render a scene of spheres with a small path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: display width / 3)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: display height / 3)",
    )
    parser.add_argument(
        "--scale",
        type=float,
        default=DEFAULT_SCALE,
        help="Image size as a fraction of the display size (default: 1/3)",
    )
    parser.add_argument(
        "--display-width",
        type=int,
        default=DEFAULT_DISPLAY_WIDTH,
        help=f"Display width used with --scale (default: {DEFAULT_DISPLAY_WIDTH})",
    )
    parser.add_argument(
        "--display-height",
        type=int,
        default=DEFAULT_DISPLAY_HEIGHT,
        help=f"Display height used with --scale (default: {DEFAULT_DISPLAY_HEIGHT})",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=150,
        help="Number of samples per pixel (default: 150)",
    )
    parser.add_argument(
        "--depth",
        type=int,
        default=50,
        help="Maximum bounces per path (default: 50)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=0,
        help="Seed for the per-pixel random streams (default: 0)",
    )
    parser.add_argument(
        "--batch-size",
        type=int,
        default=10,
        help="Samples per progress update (default: 10)",
    )
    parser.add_argument(
        "--backend",
        choices=["cpu", "gpu"],
        default="gpu",
        help="Taichi backend; gpu falls back to cpu if unavailable (default: gpu)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default=None,
        help="Save the rendered image to this PNG file",
    )
    parser.add_argument(
        "--no-window",
        action="store_true",
        help="Do not open the preview window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def resolve_image_size(args: argparse.Namespace) -> tuple[int, int]:
    """Work out the image size from explicit dimensions or the display scale.

    Explicit --width/--height win; a missing one is derived from the display
    size and --scale.

    Raises:
        ValueError: If the resulting size is not positive.
    """
    if args.scale <= 0.0:
        raise ValueError(f"Scale must be positive, got {args.scale}")

    width = args.width if args.width is not None else int(args.display_width * args.scale)
    height = args.height if args.height is not None else int(args.display_height * args.scale)

    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    return width, height


def initialize_taichi(backend: str = "gpu", quiet: bool = False) -> None:
    """Initialize Taichi on the requested backend.

    The GPU backend falls back to the CPU when no GPU is available.
    """
    if backend == "gpu":
        try:
            ti.init(arch=ti.gpu)
            if not quiet:
                print("Using GPU backend")
            return
        except Exception:
            if not quiet:
                print("GPU backend unavailable, falling back to CPU")

    ti.init(arch=ti.cpu)
    if not quiet:
        print("Using CPU backend")


def render_spheres(
    width: int = 426,
    height: int = 240,
    num_samples: int = 150,
    max_depth: int = 50,
    seed: int = 0,
    batch_size: int = 10,
    quiet: bool = False,
) -> PixelBuffer:
    """Render the stock three-sphere scene.

    Args:
        width: Image width in pixels.
        height: Image height in pixels.
        num_samples: Number of samples per pixel.
        max_depth: Maximum bounces per path.
        seed: Seed for the per-pixel random streams.
        batch_size: Number of samples to render between progress updates.
        quiet: If True, suppress progress output.

    Returns:
        The rendered pixel buffer.
    """
    # Lazy imports so Taichi is initialized before any field is declared
    from tinytracer.core.renderer import Renderer, RenderSettings
    from tinytracer.scene.spheres import create_three_spheres_scene

    settings = RenderSettings(
        width=width,
        height=height,
        samples_per_pixel=num_samples,
        max_depth=max_depth,
        seed=seed,
    )

    if not quiet:
        print(f"Creating three-sphere scene ({width}x{height})...")

    create_three_spheres_scene()
    renderer = Renderer.from_settings(settings)

    if not quiet:
        print(f"Rendering {num_samples} samples per pixel...")

    start_time = time.time()

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (current / target) * 100 if target > 0 else 0
            samples_per_sec = current / elapsed if elapsed > 0 else 0
            print(
                f"\r  Progress: {current}/{target} samples "
                f"({progress_pct:.1f}%) - {samples_per_sec:.1f} spp/s",
                end="",
                flush=True,
            )

    pixels = renderer.render(
        num_samples=settings.samples_per_pixel,
        batch_size=batch_size,
        callback=progress_callback,
    )

    if not quiet:
        print()  # Newline after progress
        print(f"Render time: {time.time() - start_time:.2f}s")

    return pixels


def run(args: argparse.Namespace) -> int:
    """Render, then save and/or show the image as requested."""
    from tinytracer.preview.export import save_png
    from tinytracer.preview.window import PreviewWindow

    width, height = resolve_image_size(args)

    pixels = render_spheres(
        width=width,
        height=height,
        num_samples=args.samples,
        max_depth=args.depth,
        seed=args.seed,
        batch_size=args.batch_size,
        quiet=args.quiet,
    )

    if args.output is not None:
        output_file = Path(args.output)
        save_png(pixels, output_file)
        if not args.quiet:
            print(f"Saved to: {output_file.absolute()}")

    if not args.no_window:
        if PreviewWindow.is_display_available():
            PreviewWindow(width, height).show(pixels)
        elif not args.quiet:
            print("No display available, skipping preview window")

    return 0


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    try:
        initialize_taichi(args.backend, quiet=args.quiet)
        return run(args)
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

#!/usr/bin/env python3
"""Render the random spheres scene.

This script renders a sphere scene end to end: it builds or loads the scene,
sets up the thin-lens camera, traces the image bands in parallel with Taichi
and writes the image to disk.

Usage:
    python -m examples.render_random_spheres [options]

Options:
    --width WIDTH         Image width in pixels (default: 2000)
    --height HEIGHT       Image height in pixels (default: 1000)
    --samples SAMPLES     Number of samples per pixel (default: 50)
    --threads THREADS     Number of worker threads (default: 6)
    --seed SEED           Random seed for the scene and the render
    --scene NAME          Preset scene: random or two-spheres (default: random)
    --scene-file PATH     Load spheres from a JSON scene file instead
    --output OUTPUT       Output file path, .ppm or .png (default: image.ppm)
    --preview             Show the result in a Matplotlib window
    --quiet               Suppress progress output
    --verbose             Enable debug logging

Example:
    python -m examples.render_random_spheres --width 400 --height 200 --samples 10
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

from raytracer.camera.thin_lens import CameraConfig, setup_camera
from raytracer.core.renderer import RenderSettings, render
from raytracer.core.sampling import RandomSource
from raytracer.preview.export import save_image
from raytracer.scene.intersection import Scene
from raytracer.scene.manager import load_scene
from raytracer.scene.presets import (
    random_spheres_camera,
    random_spheres_scene,
    two_spheres_camera,
    two_spheres_scene,
)

SCENE_CHOICES = ("random", "two-spheres")


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render a sphere scene with the path tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=2000,
        help="Image width in pixels (default: 2000)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=1000,
        help="Image height in pixels (default: 1000)",
    )
    parser.add_argument(
        "--samples",
        type=int,
        default=50,
        help="Number of samples per pixel (default: 50)",
    )
    parser.add_argument(
        "--threads",
        type=int,
        default=6,
        help="Number of worker threads (default: 6)",
    )
    parser.add_argument(
        "--seed",
        type=int,
        default=None,
        help="Random seed for the scene and the render (default: random)",
    )
    parser.add_argument(
        "--scene",
        choices=SCENE_CHOICES,
        default="random",
        help="Preset scene to render (default: random)",
    )
    parser.add_argument(
        "--scene-file",
        type=str,
        default=None,
        help="JSON scene file to render instead of a preset",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="image.ppm",
        help="Output file path (default: image.ppm)",
    )
    parser.add_argument(
        "--preview",
        action="store_true",
        help="Show the rendered image in a Matplotlib window",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    parser.add_argument(
        "--verbose",
        action="store_true",
        help="Enable debug logging",
    )
    return parser.parse_args(argv)


def build_scene(
    scene_name: str,
    aspect_ratio: float,
    seed: int | None = None,
    scene_file: str | None = None,
) -> tuple[Scene, CameraConfig]:
    """Create the scene and its camera configuration.

    A scene file is rendered from the random spheres camera position.

    Args:
        scene_name: One of SCENE_CHOICES.
        aspect_ratio: Image width divided by height.
        seed: Seed for random sphere placement.
        scene_file: Optional JSON scene file overriding the preset.

    Returns:
        Tuple of (scene, camera configuration).

    Raises:
        ValueError: If the scene name is unknown.
    """
    if scene_file is not None:
        return load_scene(scene_file), random_spheres_camera(aspect_ratio)
    if scene_name == "random":
        return random_spheres_scene(RandomSource.from_seed(seed)), random_spheres_camera(
            aspect_ratio
        )
    if scene_name == "two-spheres":
        return two_spheres_scene(), two_spheres_camera(aspect_ratio)
    raise ValueError(f"Unknown scene: {scene_name}")


def render_scene(
    settings: RenderSettings,
    scene_name: str = "random",
    scene_file: str | None = None,
    output_path: str = "image.ppm",
    preview: bool = False,
    quiet: bool = False,
) -> Path:
    """Render a scene and save it to file.

    Args:
        settings: Image, sampling and threading parameters.
        scene_name: Preset scene to render.
        scene_file: Optional JSON scene file overriding the preset.
        output_path: Output file path (.ppm for plain PPM, otherwise Pillow).
        preview: If True, show the image once saved.
        quiet: If True, suppress progress output.

    Returns:
        Path to the saved image file.
    """
    if not quiet:
        source = scene_file if scene_file is not None else scene_name
        print(f"Creating scene '{source}' ({settings.width}x{settings.height})...")

    scene, camera_config = build_scene(
        scene_name, settings.aspect_ratio, seed=settings.seed, scene_file=scene_file
    )
    camera = setup_camera(camera_config)

    if not quiet:
        print(
            f"Rendering {len(scene)} spheres at {settings.samples} samples per pixel "
            f"on {settings.threads} threads..."
        )

    start_time = time.time()

    def progress_callback(completed: int, total: int) -> None:
        if not quiet:
            elapsed = time.time() - start_time
            progress_pct = (completed / total) * 100 if total > 0 else 0
            print(
                f"\r  Progress: {completed}/{total} rows "
                f"({progress_pct:.1f}%) - {elapsed:.1f}s",
                end="",
                flush=True,
            )

    image = render(scene, camera, settings, callback=progress_callback)

    if not quiet:
        print()  # Newline after progress

    output_file = save_image(image, output_path)

    total_time = time.time() - start_time
    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    if preview:
        from raytracer.preview.display import show_preview

        show_preview(image, title=f"{output_file.name} - {settings.samples} SPP")

    return output_file


def main(argv: list[str] | None = None) -> int:
    """Main entry point."""
    args = parse_args(argv)

    logging.basicConfig(
        level=logging.DEBUG if args.verbose else logging.WARNING,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    try:
        settings = RenderSettings(
            width=args.width,
            height=args.height,
            samples=args.samples,
            threads=args.threads,
            seed=args.seed,
        )
        render_scene(
            settings,
            scene_name=args.scene,
            scene_file=args.scene_file,
            output_path=args.output,
            preview=args.preview,
            quiet=args.quiet,
        )
        return 0
    except Exception as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

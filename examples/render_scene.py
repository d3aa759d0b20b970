#!/usr/bin/env python3
"""Render a scene with the Whitted ray tracer.

This script renders either the built-in demo scene (two spheres over a
checkerboard floor) or a scene loaded from JSON, and writes the result as a
binary PPM or PNG depending on the output suffix.

Usage:
    python -m examples.render_scene [options]

Options:
    --width WIDTH         Image width in pixels (default: 1600)
    --height HEIGHT       Image height in pixels (default: 1600)
    --fov FOV             Vertical field of view in degrees (default: 90)
    --max-depth DEPTH     Maximum reflection/refraction depth (default: 5)
    --scene SCENE         JSON scene file (default: built-in demo scene)
    --output OUTPUT       Output file path (default: out.ppm)
    --batch-rows ROWS     Rows per progress update (default: 64)
    --gpu                 Try the GPU backend (falls back to CPU)
    --quiet               Suppress progress output

Example:
    python -m examples.render_scene --width 400 --height 400 --output demo.png
"""

from __future__ import annotations

import argparse
import logging
import sys
import time
from pathlib import Path

import taichi as ti


def parse_args(argv: list[str] | None = None) -> argparse.Namespace:
    """Parse command-line arguments (sys.argv when argv is None)."""
    parser = argparse.ArgumentParser(
        description="Render a scene with the Whitted ray tracer.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument(
        "--width",
        type=int,
        default=None,
        help="Image width in pixels (default: 1600, or the scene file's value)",
    )
    parser.add_argument(
        "--height",
        type=int,
        default=None,
        help="Image height in pixels (default: 1600, or the scene file's value)",
    )
    parser.add_argument(
        "--fov",
        type=float,
        default=None,
        help="Vertical field of view in degrees (default: 90)",
    )
    parser.add_argument(
        "--max-depth",
        type=int,
        default=None,
        help="Maximum reflection/refraction depth (default: 5)",
    )
    parser.add_argument(
        "--scene",
        type=str,
        default=None,
        help="JSON scene file (default: built-in demo scene)",
    )
    parser.add_argument(
        "--output",
        type=str,
        default="out.ppm",
        help="Output file path, .ppm or .png (default: out.ppm)",
    )
    parser.add_argument(
        "--batch-rows",
        type=int,
        default=64,
        help="Rows per progress update (default: 64)",
    )
    parser.add_argument(
        "--gpu",
        action="store_true",
        help="Try the GPU backend, falling back to CPU (default: CPU)",
    )
    parser.add_argument(
        "--quiet",
        action="store_true",
        help="Suppress progress output",
    )
    return parser.parse_args(argv)


def render(args: argparse.Namespace) -> Path:
    """Build the scene, render it and save the image.

    Args:
        args: Parsed command-line arguments.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from dataclasses import replace

    from whitted.core.options import RenderOptions
    from whitted.core.renderer import Renderer
    from whitted.scene.default_scene import create_default_scene
    from whitted.scene.manager import SceneManager

    if args.scene is not None:
        if not args.quiet:
            print(f"Loading scene from {args.scene}...")
        scene = SceneManager()
        options = scene.load_json(args.scene) or RenderOptions()
    else:
        if not args.quiet:
            print("Creating default scene...")
        scene, options = create_default_scene()

    overrides = {
        "width": args.width,
        "height": args.height,
        "fov": args.fov,
        "max_depth": args.max_depth,
    }
    options = replace(options, **{k: v for k, v in overrides.items() if v is not None})

    if not args.quiet:
        print(
            f"Scene: {scene.get_object_count()} objects, {scene.get_light_count()} lights"
        )
        print(f"Rendering {options.width}x{options.height}, max depth {options.max_depth}...")

    renderer = Renderer(options)
    start_time = time.time()

    def progress_callback(done: int, total: int) -> None:
        if not args.quiet:
            progress_pct = (done / total) * 100 if total > 0 else 0
            print(f"\r  Progress: {done}/{total} rows ({progress_pct:.1f}%)", end="", flush=True)

    renderer.render(batch_rows=args.batch_rows, callback=progress_callback)

    if not args.quiet:
        print()  # Newline after progress

    output_file = Path(args.output)
    renderer.save_image(output_file)

    total_time = time.time() - start_time
    if not args.quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total time: {total_time:.2f}s")

    return output_file


def init_backend(use_gpu: bool = False) -> str:
    """Initialize Taichi and return the backend name.

    Pixels are shaded serially, so the CPU backend is used unless a GPU is
    requested. A failed GPU initialization falls back to the CPU.
    """
    if use_gpu:
        try:
            ti.init(arch=ti.gpu)
            return "GPU"
        except Exception:
            logging.getLogger(__name__).warning("GPU backend unavailable, using CPU")
    ti.init(arch=ti.cpu)
    return "CPU"


def main() -> int:
    """Main entry point."""
    args = parse_args()
    logging.basicConfig(
        level=logging.WARNING if args.quiet else logging.INFO,
        format="%(asctime)s %(levelname)s %(name)s: %(message)s",
    )

    backend = init_backend(args.gpu)
    if not args.quiet:
        print(f"Using {backend} backend")

    try:
        render(args)
        return 0
    except (OSError, ValueError, RuntimeError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

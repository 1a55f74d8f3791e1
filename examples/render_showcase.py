#!/usr/bin/env python3
"""Render the showcase scene headlessly and save a PNG.

Runs a RenderSession to its sample budget, one frame at a time, printing
the time each frame took, then writes the pixel buffer to disk.

Usage:
    python -m examples.render_showcase [options]

Options:
    --width WIDTH           Image width in pixels (default: 640)
    --height HEIGHT         Image height in pixels (default: 360)
    --samples SAMPLES       Sample budget (default: 16)
    --depth DEPTH           Maximum bounces per path (default: 5)
    --roughness VALUE       Metal sphere roughness (default: 0.2)
    --index VALUE           Glass sphere refractive index (default: 2.5)
    --output OUTPUT         Output file path (default: showcase.png)
    --cpu                   Force the CPU backend
    --quiet                 Suppress progress output

Example:
    python -m examples.render_showcase --width 320 --height 180 --samples 64
"""

from __future__ import annotations

import argparse
import sys
from pathlib import Path

import taichi as ti


def parse_args() -> argparse.Namespace:
    """Parse command-line arguments."""
    parser = argparse.ArgumentParser(
        description="Render the showcase scene.",
        formatter_class=argparse.RawDescriptionHelpFormatter,
    )
    parser.add_argument("--width", type=int, default=640, help="Image width in pixels (default: 640)")
    parser.add_argument("--height", type=int, default=360, help="Image height in pixels (default: 360)")
    parser.add_argument("--samples", type=int, default=16, help="Sample budget (default: 16)")
    parser.add_argument("--depth", type=int, default=5, help="Maximum bounces per path (default: 5)")
    parser.add_argument(
        "--roughness", type=float, default=0.2, help="Metal sphere roughness (default: 0.2)"
    )
    parser.add_argument(
        "--index", type=float, default=2.5, help="Glass sphere refractive index (default: 2.5)"
    )
    parser.add_argument(
        "--output", type=str, default="showcase.png", help="Output file path (default: showcase.png)"
    )
    parser.add_argument("--cpu", action="store_true", help="Force the CPU backend")
    parser.add_argument("--quiet", action="store_true", help="Suppress progress output")
    return parser.parse_args()


def render_showcase(
    width: int = 640,
    height: int = 360,
    sample_budget: int = 16,
    max_depth: int = 5,
    roughness: float = 0.2,
    refractive_index: float = 2.5,
    output_path: str = "showcase.png",
    quiet: bool = False,
) -> Path:
    """Render the showcase scene to its sample budget and save it.

    Returns:
        Path to the saved image file.
    """
    # Lazy imports to allow Taichi initialization first
    from pathtracer.core.framebuffer import PixelBuffer
    from pathtracer.core.progressive import RenderSession, RenderSettings
    from pathtracer.preview.export import save_png
    from pathtracer.scene.showcase import ShowcaseParams, create_showcase_scene

    if not quiet:
        print(f"Creating showcase scene ({width}x{height})...")

    params = ShowcaseParams(metal_roughness=roughness, glass_refractive_index=refractive_index)
    scene, camera = create_showcase_scene(params)
    settings = RenderSettings(sample_budget=sample_budget, max_depth=max_depth)
    session = RenderSession(scene, camera, width, height, settings)
    buffer = PixelBuffer(width, height)

    def progress_callback(current: int, target: int) -> None:
        if not quiet:
            print(f"  Frame {current}/{target}: {session.last_frame_seconds * 1000.0:.1f}ms")

    session.render(buffer, callback=progress_callback)

    output_file = Path(output_path)
    save_png(buffer, output_file)

    if not quiet:
        print(f"Saved to: {output_file.absolute()}")
        print(f"Total render time: {session.total_render_seconds:.2f}s")

    return output_file


def main() -> int:
    """Main entry point."""
    args = parse_args()

    if args.cpu:
        ti.init(arch=ti.cpu)
    else:
        # Use GPU if available, fall back to CPU
        try:
            ti.init(arch=ti.gpu)
        except RuntimeError:
            ti.init(arch=ti.cpu)

    try:
        render_showcase(
            width=args.width,
            height=args.height,
            sample_budget=args.samples,
            max_depth=args.depth,
            roughness=args.roughness,
            refractive_index=args.index,
            output_path=args.output,
            quiet=args.quiet,
        )
        return 0
    except (ValueError, RuntimeError, OSError) as e:
        print(f"Error: {e}", file=sys.stderr)
        return 1


if __name__ == "__main__":
    sys.exit(main())

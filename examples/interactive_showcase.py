#!/usr/bin/env python3
"""Interactive progressive renderer for the showcase scene.

Opens a GGUI window that refines the image by one sample per pixel each
frame until the sample budget is reached. Resizing the window restarts the
accumulation at the new size.

Usage:
    python -m examples.interactive_showcase [--width W] [--height H] [--samples N]

Controls:
    - Metal roughness: fuzziness of the red sphere (0-1)
    - Glass index: refractive index of the blue sphere (1-3)
    - Export PNG: save the current buffer with a timestamped name
"""

from __future__ import annotations

import argparse
import platform
import sys

import taichi as ti


def initialize_taichi() -> str:
    """Initialize Taichi with the best available backend.

    On macOS, prefers Metal. Falls back to CPU if GPU is unavailable.

    Returns:
        Name of the backend being used.
    """
    if platform.system() == "Darwin":
        try:
            ti.init(arch=ti.metal)
            return "Metal (GPU)"
        except RuntimeError:
            pass

    try:
        ti.init(arch=ti.gpu)
        return "GPU"
    except RuntimeError:
        ti.init(arch=ti.cpu)
        return "CPU"


def main() -> int:
    """Main entry point for the interactive showcase renderer.

    Returns:
        Exit code (0 for success, non-zero for error).
    """
    parser = argparse.ArgumentParser(description="Interactive showcase renderer.")
    parser.add_argument("--width", type=int, default=800, help="Window width (default: 800)")
    parser.add_argument("--height", type=int, default=450, help="Window height (default: 450)")
    parser.add_argument("--samples", type=int, default=16, help="Sample budget (default: 16)")
    args = parser.parse_args()

    # Initialize Taichi first (before importing modules that declare fields)
    backend = initialize_taichi()
    print(f"Taichi backend: {backend}")

    from pathtracer.core.progressive import RenderSettings
    from pathtracer.preview.interactive import InteractivePreview

    if not InteractivePreview.is_display_available():
        print("Error: No display available. Cannot run interactive preview.", file=sys.stderr)
        return 1

    print(f"Creating interactive preview window ({args.width}x{args.height})...")
    preview = InteractivePreview(
        args.width,
        args.height,
        settings=RenderSettings(sample_budget=args.samples),
    )

    print("Starting interactive rendering...")
    print("  - Adjust sliders to modify the scene")
    print("  - Click 'Export PNG' to save the current render")
    print("  - Close window to exit")

    try:
        preview.run()
    except KeyboardInterrupt:
        print("\nInterrupted by user.")
    finally:
        preview.close()
        session = preview.session
        print(f"Rendered {session.sample_count} samples in {session.total_render_seconds:.2f}s")

    return 0


if __name__ == "__main__":
    sys.exit(main())

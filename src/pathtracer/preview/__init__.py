"""Preview module for output and visualization.

Components:
    display: Matplotlib-based static preview
    export: PNG export via Pillow
    interactive: Taichi GGUI window driving a progressive render

Example:
    >>> from pathtracer.preview import save_png, show_preview
    >>> session.render(buffer)
    >>> show_preview(buffer, session=session)
    >>> save_png(buffer, "output.png")
"""

from pathtracer.preview.display import preview_title, show_comparison, show_preview
from pathtracer.preview.export import (
    compute_rmse,
    image_to_uint8,
    load_png,
    save_png,
    save_png_from_array,
)
from pathtracer.preview.interactive import InteractivePreview

__all__ = [
    # Interactive preview
    "InteractivePreview",
    # Display functions
    "show_preview",
    "show_comparison",
    "preview_title",
    # Export functions
    "save_png",
    "save_png_from_array",
    "image_to_uint8",
    "load_png",
    "compute_rmse",
]

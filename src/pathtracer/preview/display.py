"""Matplotlib-based preview of rendered pixel buffers.

The pixel buffer already holds gamma-encoded 8-bit colour, so display is a
straight copy: no tone mapping or extra gamma is applied.

Example:
    >>> from pathtracer.preview.display import show_preview
    >>> session.render(buffer)
    >>> show_preview(buffer, session=session)
"""

from __future__ import annotations

from typing import TYPE_CHECKING

import numpy as np
import numpy.typing as npt

if TYPE_CHECKING:
    from matplotlib.figure import Figure

    from pathtracer.core.framebuffer import PixelBuffer
    from pathtracer.core.progressive import RenderSession


def preview_title(session: RenderSession | None) -> str:
    """Build the default preview title, with progress if a session is given."""
    if session is None:
        return "Render Preview"
    budget = session.settings.sample_budget
    title = f"Render Preview - {session.sample_count}/{budget} SPP"
    if session.last_frame_seconds > 0.0:
        title += f" ({session.last_frame_seconds * 1000.0:.1f} ms/frame)"
    return title


def show_preview(
    buffer: PixelBuffer,
    *,
    session: RenderSession | None = None,
    title: str | None = None,
    figsize: tuple[float, float] = (8, 6),
    block: bool = True,
) -> Figure:
    """Display a pixel buffer as a Matplotlib figure.

    Args:
        buffer: The pixel buffer to show.
        session: Optional render session; its progress goes into the title.
        title: Custom title (overrides the session-based default).
        figsize: Figure size in inches (width, height).
        block: Whether to block execution until the figure is closed.

    Returns:
        The Matplotlib figure.
    """
    import matplotlib.pyplot as plt

    fig, ax = plt.subplots(1, 1, figsize=figsize)
    ax.imshow(buffer.to_float_rgb(), origin="upper")
    ax.axis("off")
    ax.set_title(title if title is not None else preview_title(session))

    plt.tight_layout()
    plt.show(block=block)
    return fig


def show_comparison(
    image_a: npt.NDArray[np.float32],
    image_b: npt.NDArray[np.float32],
    *,
    labels: tuple[str, str] = ("A", "B"),
    diff_scale: float = 10.0,
    figsize: tuple[float, float] = (16, 6),
    block: bool = True,
) -> float:
    """Display two images side by side with their amplified difference.

    Args:
        image_a: First image (H, W, 3), display-encoded floats in [0, 1].
        image_b: Second image, same shape as image_a.
        labels: Labels for the two images.
        diff_scale: Scale factor for difference amplification.
        figsize: Figure size in inches.
        block: Whether to block execution until the figure is closed.

    Returns:
        RMSE between the two images.

    Raises:
        ValueError: If the image shapes differ.
    """
    import matplotlib.pyplot as plt

    from pathtracer.preview.export import compute_rmse

    rmse = compute_rmse(image_a, image_b)
    diff = np.abs(image_a.astype(np.float64) - image_b.astype(np.float64))
    diff_amplified = np.clip(diff * diff_scale, 0.0, 1.0)

    fig, axes = plt.subplots(1, 3, figsize=figsize)
    for ax, image, label in zip(
        axes,
        (image_a, image_b, diff_amplified),
        (labels[0], labels[1], f"Difference ({diff_scale}x) - RMSE: {rmse:.6f}"),
    ):
        ax.imshow(np.clip(image, 0.0, 1.0))
        ax.set_title(label)
        ax.axis("off")

    plt.tight_layout()
    plt.show(block=block)

    return rmse

"""Interactive progressive preview using Taichi GGUI.

The window drives a RenderSession: every display tick renders one more
frame into the host's PixelBuffer until the sample budget is reached, after
which the window keeps showing the converged image. When the window is
resized a new PixelBuffer is allocated, and the session notices the size
change on its next frame and starts over.

GUI controls:
    - Metal roughness slider (0.0 to 1.0)
    - Glass refractive index slider (1.0 to 3.0)
    - Export PNG button

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.gpu)
    >>> from pathtracer.preview.interactive import InteractivePreview
    >>> preview = InteractivePreview(800, 450)
    >>> preview.run()  # Blocks until the window is closed
"""

import os
from dataclasses import replace
from datetime import datetime
from typing import Any

import taichi as ti

from pathtracer.core.framebuffer import PixelBuffer
from pathtracer.core.progressive import FrameOutcome, RenderSession, RenderSettings
from pathtracer.scene.showcase import ShowcaseParams, create_showcase_scene

# Lazy kernel holder - kernel is created on first use after Taichi is initialized
_to_display_kernel: Any = None


def _get_to_display_kernel() -> Any:
    """Get or create the kernel converting RGBA8 pixels to float RGB for the canvas."""
    global _to_display_kernel
    if _to_display_kernel is None:

        @ti.kernel
        def _kernel(src: ti.template(), dst: ti.template()):
            for i, j in src:
                pixel = src[i, j]
                dst[i, j] = ti.Vector(
                    [
                        ti.cast(pixel[0], ti.f32),
                        ti.cast(pixel[1], ti.f32),
                        ti.cast(pixel[2], ti.f32),
                    ]
                ) / 255.0

        _to_display_kernel = _kernel
    return _to_display_kernel


class InteractivePreview:
    """Window that shows a progressive render of the showcase scene.

    Attributes:
        width: Current pixel buffer width.
        height: Current pixel buffer height.
        params: Scene parameters currently rendered.
        buffer: The PixelBuffer the session renders into.
        session: The RenderSession driving the render.
        last_export: Path of the most recent PNG export, if any.
    """

    def __init__(
        self,
        width: int,
        height: int,
        *,
        title: str = "Path Tracer - Interactive Preview",
        params: ShowcaseParams | None = None,
        settings: RenderSettings | None = None,
    ) -> None:
        """Set up the scene and buffers. The window opens on first use."""
        self._title = title
        self._initial_res = (width, height)
        self.params = params if params is not None else ShowcaseParams()

        scene, camera = create_showcase_scene(self.params)
        self.session = RenderSession(scene, camera, width, height, settings)
        self.buffer = PixelBuffer(width, height)
        self._display_image = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
        self.last_export: str | None = None

        self._window: "ti.ui.Window | None" = None
        self._canvas: "ti.ui.Canvas | None" = None

    @property
    def width(self) -> int:
        return self.buffer.width

    @property
    def height(self) -> int:
        return self.buffer.height

    def _initialize_window(self) -> None:
        if self._window is not None:
            return
        self._window = ti.ui.Window(name=self._title, res=self._initial_res, vsync=True)
        self._canvas = self._window.get_canvas()

    @property
    def window(self) -> "ti.ui.Window":
        """Get the Taichi GGUI window, initializing if needed."""
        self._initialize_window()
        assert self._window is not None
        return self._window

    @property
    def canvas(self) -> "ti.ui.Canvas":
        """Get the canvas for rendering."""
        self._initialize_window()
        assert self._canvas is not None
        return self._canvas

    def handle_resize(self, width: int, height: int) -> bool:
        """Reallocate the host buffers if the view size changed.

        The session is not touched here; it resets itself on the next
        render_frame() because the buffer size no longer matches.

        Returns:
            True if the buffers were reallocated.
        """
        if (width, height) == self.buffer.size or width <= 0 or height <= 0:
            return False
        self.buffer = PixelBuffer(width, height)
        self._display_image = ti.Vector.field(3, dtype=ti.f32, shape=(width, height))
        return True

    def update_params(self, params: ShowcaseParams) -> bool:
        """Rebuild the scene if the parameters changed, restarting accumulation.

        Returns:
            True if the scene was rebuilt.
        """
        if params == self.params:
            return False
        self.params = params
        scene, camera = create_showcase_scene(params)
        self.session.set_scene(scene, camera)
        return True

    def tick(self) -> FrameOutcome:
        """Render one frame and refresh the display image."""
        outcome = self.session.render_frame(self.buffer)
        if outcome != FrameOutcome.IDLE:
            _get_to_display_kernel()(self.buffer.pixels, self._display_image)
        return outcome

    def run(self) -> None:
        """Run the window loop until the window is closed."""
        self._initialize_window()
        while self.window.running:
            width, height = self.window.get_window_shape()
            self.handle_resize(width, height)
            self.tick()
            self._draw_gui_panel()
            self.canvas.set_image(self._display_image)
            self.window.show()

    def close(self) -> None:
        """Close the preview window."""
        if self._window is not None:
            self._window.running = False

    def _draw_gui_panel(self) -> None:
        session = self.session
        with self.window.GUI.sub_window("Scene", 0.02, 0.02, 0.3, 0.25) as gui:
            roughness = gui.slider_float(
                "Metal roughness", self.params.metal_roughness, minimum=0.0, maximum=1.0
            )
            index = gui.slider_float(
                "Glass index", self.params.glass_refractive_index, minimum=1.0, maximum=3.0
            )
            gui.text(f"Samples: {session.sample_count}/{session.settings.sample_budget}")
            gui.text(f"Frame: {session.last_frame_seconds * 1000.0:.1f} ms")
            if gui.button("Export PNG"):
                self._export_png()
            if self.last_export is not None:
                gui.text(f"Saved {self.last_export}")

        self.update_params(
            replace(self.params, metal_roughness=roughness, glass_refractive_index=index)
        )

    def _export_png(self) -> str:
        from pathtracer.preview.export import save_png

        timestamp = datetime.now().strftime("%Y%m%d_%H%M%S")
        filename = f"showcase_{timestamp}_{self.session.sample_count}spp.png"
        save_png(self.buffer, filename)
        self.last_export = filename
        return filename

    @staticmethod
    def is_display_available() -> bool:
        """Check if a display is available for GUI rendering.

        Returns:
            True if a display is available, False for headless environments.
        """
        display = os.environ.get("DISPLAY")
        wayland = os.environ.get("WAYLAND_DISPLAY")

        if os.name == "nt":
            return True

        if os.uname().sysname == "Darwin":
            # SSH without X forwarding has no display
            return not (os.environ.get("SSH_CONNECTION") and not display)

        return bool(display or wayland)

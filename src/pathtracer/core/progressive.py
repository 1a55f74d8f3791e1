"""Progressive frame driver.

A RenderSession refines an image by one sample per pixel each time the host
asks for a frame, until a fixed sample budget is reached. Each pixel keeps a
running average of gamma-encoded samples:

    average = lerp(average, sqrt(sample), 1 / (n + 1))

where n is the number of frames accumulated so far, and the average is
written to the host's RGBA8 PixelBuffer after every frame. Gamma is applied
to each sample before averaging, so the image converges to the mean of the
square roots rather than the square root of the mean.

The host owns the PixelBuffer. When its size no longer matches the session,
the next call to render_frame() resizes the session, clears the buffer and
reports FrameOutcome.RESET instead of rendering.

Example:
    >>> import taichi as ti
    >>> ti.init(arch=ti.cpu)
    >>> from pathtracer.core.framebuffer import PixelBuffer
    >>> from pathtracer.core.progressive import FrameOutcome, RenderSession
    >>> from pathtracer.scene.showcase import create_showcase_scene
    >>>
    >>> scene, camera = create_showcase_scene()
    >>> session = RenderSession(scene, camera, 320, 240)
    >>> buffer = PixelBuffer(320, 240)
    >>> while session.render_frame(buffer) != FrameOutcome.IDLE:
    ...     pass
    >>> session.sample_count
    16
"""

import time
from collections.abc import Callable, Generator
from dataclasses import dataclass
from enum import Enum

import numpy as np
import numpy.typing as npt
import taichi as ti
import taichi.math as tm

from pathtracer.camera.pinhole import PinholeCamera, get_ray_jittered, setup_camera
from pathtracer.core.framebuffer import PixelBuffer
from pathtracer.core.integrator import (
    MAX_DEPTH,
    MAX_SAMPLES,
    T_MAX,
    T_MIN,
    gamma_compress,
    sample_radiance,
    sanitize,
)
from pathtracer.core.vector import lerp
from pathtracer.scene.scene import Scene

# Largest supported image size
MAX_IMAGE_WIDTH = 2048
MAX_IMAGE_HEIGHT = 2048

# Callback receives (frames_accumulated, sample_budget)
ProgressCallback = Callable[[int, int], None]


class FrameOutcome(Enum):
    """What a call to RenderSession.render_frame() did."""

    RESET = "reset"
    RENDERED = "rendered"
    IDLE = "idle"


@dataclass
class RenderSettings:
    """Per-session render configuration.

    Attributes:
        sample_budget: Frames (samples per pixel) to accumulate before the
            session goes idle.
        max_depth: Maximum bounces per path.
        t_min: Lower bound (exclusive) of accepted hits.
        t_max: Upper bound (exclusive) of accepted hits.
        reject_non_finite: Replace NaN/Inf sample channels with 0 before
            blending. Off by default, in which case such values propagate
            into the average.
    """

    sample_budget: int = MAX_SAMPLES
    max_depth: int = MAX_DEPTH
    t_min: float = T_MIN
    t_max: float = T_MAX
    reject_non_finite: bool = False

    def validate(self) -> None:
        """Check the settings.

        Raises:
            ValueError: If any value is out of range.
        """
        if self.sample_budget < 0:
            raise ValueError(f"sample_budget must be >= 0, got {self.sample_budget}")
        if self.max_depth < 0:
            raise ValueError(f"max_depth must be >= 0, got {self.max_depth}")
        if self.t_min < 0.0:
            raise ValueError(f"t_min must be >= 0, got {self.t_min}")
        if self.t_max <= self.t_min:
            raise ValueError(f"t_max ({self.t_max}) must be greater than t_min ({self.t_min})")


def _validate_dimensions(width: int, height: int) -> None:
    if width <= 0 or height <= 0:
        raise ValueError(f"Image dimensions must be positive, got {width}x{height}")
    if width > MAX_IMAGE_WIDTH or height > MAX_IMAGE_HEIGHT:
        raise ValueError(
            f"Image dimensions ({width}x{height}) exceed maximum supported "
            f"({MAX_IMAGE_WIDTH}x{MAX_IMAGE_HEIGHT})"
        )


# Scene and camera live in global fields; remember whose are uploaded
_bound_session: "RenderSession | None" = None


def unbind_session() -> None:
    """Forget which session's scene and camera are on the device.

    The next frame of any session uploads its scene and camera again.
    """
    global _bound_session
    _bound_session = None


@ti.kernel
def _render_frame(
    accumulation: ti.template(),
    pixels: ti.template(),
    width: ti.i32,
    height: ti.i32,
    sample_count: ti.i32,
    max_depth: ti.i32,
    t_min: ti.f32,
    t_max: ti.f32,
    reject_non_finite: ti.i32,
):
    weight = 1.0 / ti.cast(sample_count + 1, ti.f32)
    for x, y in ti.ndrange(width, height):
        ray = get_ray_jittered(x, y, width, height)
        sample = gamma_compress(sample_radiance(ray, max_depth, t_min, t_max))
        if reject_non_finite == 1:
            sample = sanitize(sample)

        average = lerp(accumulation[x, y], sample, weight)
        accumulation[x, y] = average

        rgb = tm.clamp(average * 255.0 + 0.5, 0.0, 255.0)
        pixels[x, y] = ti.Vector(
            [
                ti.cast(rgb[0], ti.u8),
                ti.cast(rgb[1], ti.u8),
                ti.cast(rgb[2], ti.u8),
                ti.cast(255, ti.u8),
            ]
        )


class RenderSession:
    """Accumulation state for progressively rendering one scene.

    Owns the per-pixel running average, the frame counter and frame timings.
    Create one per view, call render_frame() once per displayed frame, and
    drop it when the view goes away.

    Attributes:
        width: Current image width in pixels.
        height: Current image height in pixels.
        settings: The RenderSettings in use.
        sample_count: Frames accumulated since the last reset.
        last_frame_seconds: Wall time of the most recent rendered frame.
        total_render_seconds: Wall time of all frames since the last reset.
    """

    def __init__(
        self,
        scene: Scene,
        camera: PinholeCamera,
        width: int,
        height: int,
        settings: RenderSettings | None = None,
    ) -> None:
        """Create a session and upload its scene and camera.

        The camera's aspect ratio is replaced by width / height.

        Raises:
            ValueError: If the dimensions or settings are invalid.
        """
        _validate_dimensions(width, height)
        self.settings = settings if settings is not None else RenderSettings()
        self.settings.validate()

        self._scene = scene
        self._width = int(width)
        self._height = int(height)
        self._camera = camera.with_aspect_ratio(self._width / self._height)

        self._capacity = (self._width, self._height)
        self._accumulation = ti.Vector.field(3, dtype=ti.f32, shape=self._capacity)

        self._sample_count = 0
        self.last_frame_seconds = 0.0
        self.total_render_seconds = 0.0

        self._bind()
        self.reset_accumulation()

    def __repr__(self) -> str:
        return (
            f"RenderSession(width={self._width}, height={self._height}, "
            f"samples={self._sample_count}/{self.settings.sample_budget})"
        )

    @property
    def width(self) -> int:
        return self._width

    @property
    def height(self) -> int:
        return self._height

    @property
    def sample_count(self) -> int:
        return self._sample_count

    @property
    def camera(self) -> PinholeCamera:
        """The camera as uploaded, with the session's aspect ratio."""
        return self._camera

    @property
    def scene(self) -> Scene:
        return self._scene

    @property
    def is_converged(self) -> bool:
        """True once the sample budget has been reached."""
        return self._sample_count >= self.settings.sample_budget

    def _bind(self) -> None:
        global _bound_session
        self._scene.upload()
        setup_camera(self._camera)
        _bound_session = self

    def reset_accumulation(self) -> None:
        """Discard all accumulated samples and start over from frame 0.

        Call after anything that changes the image: a resize, or a scene or
        camera update.
        """
        self._accumulation.fill(0.0)
        self._sample_count = 0
        self.total_render_seconds = 0.0

    def resize(self, width: int, height: int) -> None:
        """Change the image size and reset accumulation.

        The accumulation storage only grows; shrinking reuses it.

        Raises:
            ValueError: If the dimensions are invalid.
        """
        _validate_dimensions(width, height)
        self._width = int(width)
        self._height = int(height)

        if self._width > self._capacity[0] or self._height > self._capacity[1]:
            self._capacity = (
                max(self._width, self._capacity[0]),
                max(self._height, self._capacity[1]),
            )
            self._accumulation = ti.Vector.field(3, dtype=ti.f32, shape=self._capacity)

        self._camera = self._camera.with_aspect_ratio(self._width / self._height)
        self._bind()
        self.reset_accumulation()

    def set_scene(self, scene: Scene, camera: PinholeCamera | None = None) -> None:
        """Swap in a new scene (and optionally camera) and reset accumulation."""
        self._scene = scene
        if camera is not None:
            self._camera = camera.with_aspect_ratio(self._width / self._height)
        self._bind()
        self.reset_accumulation()

    def render_frame(self, output: PixelBuffer) -> FrameOutcome:
        """Advance the progressive render by one frame.

        Args:
            output: The host's pixel buffer. Rendered pixels are written to it
                with (0, 0) at the bottom-left.

        Returns:
            FrameOutcome.RESET if the buffer size changed; the session was
            resized and the buffer cleared, nothing was rendered.
            FrameOutcome.IDLE if the sample budget is already reached; the
            buffer is untouched.
            FrameOutcome.RENDERED after one sample per pixel was blended in
            and the buffer updated.
        """
        if output.size != (self._width, self._height):
            self.resize(output.width, output.height)
            output.clear()
            return FrameOutcome.RESET

        if self.is_converged:
            return FrameOutcome.IDLE

        if _bound_session is not self:
            self._bind()

        start = time.perf_counter()
        _render_frame(
            self._accumulation,
            output.pixels,
            self._width,
            self._height,
            self._sample_count,
            self.settings.max_depth,
            self.settings.t_min,
            self.settings.t_max,
            int(self.settings.reject_non_finite),
        )
        ti.sync()
        self.last_frame_seconds = time.perf_counter() - start
        self.total_render_seconds += self.last_frame_seconds

        self._sample_count += 1
        return FrameOutcome.RENDERED

    def render(self, output: PixelBuffer, callback: ProgressCallback | None = None) -> int:
        """Render frames until the session is idle.

        Args:
            output: The pixel buffer to render into.
            callback: Optional function called after each rendered frame
                with (sample_count, sample_budget).

        Returns:
            The number of frames rendered by this call.
        """
        rendered = 0
        for count, budget in self.render_progressive(output):
            rendered += 1
            if callback is not None:
                callback(count, budget)
        return rendered

    def render_progressive(self, output: PixelBuffer) -> Generator[tuple[int, int], None, None]:
        """Render frames until idle, yielding progress after each frame.

        A size mismatch on the first call resets once and then carries on.

        Yields:
            Tuple of (sample_count, sample_budget).
        """
        outcome = self.render_frame(output)
        while outcome != FrameOutcome.IDLE:
            if outcome == FrameOutcome.RENDERED:
                yield (self._sample_count, self.settings.sample_budget)
            outcome = self.render_frame(output)

    def accumulation_numpy(self) -> npt.NDArray[np.float32]:
        """Copy the running average to a (height, width, 3) array, top row first.

        Values are gamma-encoded and unclamped.
        """
        full = self._accumulation.to_numpy()
        image = np.transpose(full[: self._width, : self._height, :], (1, 0, 2))
        return np.ascontiguousarray(np.flipud(image)).astype(np.float32)

"""Tests for the progressive renderer.

This module tests RenderSession, including:
- Frame outcomes (rendered, reset on resize, idle once converged)
- Sample budget and progress reporting
- Accumulation behaviour (gamma per sample, convergence)
- Image orientation and output encoding
- Sessions sharing the device-side scene
"""

import numpy as np
import pytest


def _sky_session(width=8, height=6, **settings):
    """Session over an empty scene: every pixel sees only the sky."""
    from pathtracer.camera import PinholeCamera
    from pathtracer.core.progressive import RenderSession, RenderSettings
    from pathtracer.scene import Scene

    camera = PinholeCamera(
        lookfrom=(0.0, 0.0, 0.0),
        lookat=(0.0, 0.0, 1.0),
        vup=(0.0, 1.0, 0.0),
        vfov=90.0,
        aspect_ratio=1.0,
    )
    return RenderSession(Scene(), camera, width, height, RenderSettings(**settings))


class TestRenderSettings:
    """Tests for RenderSettings validation."""

    def test_defaults(self):
        from pathtracer.core.progressive import RenderSettings

        settings = RenderSettings()
        assert settings.sample_budget == 16
        assert settings.max_depth == 5
        assert settings.t_min == 0.001
        assert settings.t_max == 1.0e6
        assert settings.reject_non_finite is False

    @pytest.mark.parametrize(
        "overrides",
        [
            {"sample_budget": -1},
            {"max_depth": -1},
            {"t_min": -0.1},
            {"t_min": 1.0, "t_max": 1.0},
        ],
    )
    def test_invalid_settings(self, overrides):
        from pathtracer.core.progressive import RenderSettings

        with pytest.raises(ValueError):
            RenderSettings(**overrides).validate()

    @pytest.mark.parametrize("width,height", [(0, 10), (10, 0), (4096, 10), (10, 4096)])
    def test_invalid_dimensions(self, width, height):
        with pytest.raises(ValueError):
            _sky_session(width, height)


class TestFrameOutcomes:
    """Tests for RenderSession.render_frame()."""

    def test_first_frame_renders(self):
        """A correctly sized buffer renders on the very first call."""
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.core.progressive import FrameOutcome

        session = _sky_session()
        buffer = PixelBuffer(8, 6)

        assert session.render_frame(buffer) == FrameOutcome.RENDERED
        assert session.sample_count == 1
        # Every pixel written as opaque
        assert (buffer.to_numpy()[:, :, 3] == 255).all()

    def test_idle_after_budget(self):
        """Once the budget is reached frames are skipped and the buffer kept."""
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.core.progressive import FrameOutcome

        session = _sky_session(sample_budget=4)
        buffer = PixelBuffer(8, 6)

        outcomes = [session.render_frame(buffer) for _ in range(4)]
        assert outcomes == [FrameOutcome.RENDERED] * 4
        assert session.is_converged

        before = buffer.to_numpy().copy()
        assert session.render_frame(buffer) == FrameOutcome.IDLE
        assert session.sample_count == 4
        assert np.array_equal(buffer.to_numpy(), before)

    def test_zero_budget_is_immediately_idle(self):
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.core.progressive import FrameOutcome

        session = _sky_session(sample_budget=0)
        buffer = PixelBuffer(8, 6)
        assert session.render_frame(buffer) == FrameOutcome.IDLE
        assert not buffer.to_numpy().any()

    def test_size_change_resets(self):
        """A buffer of another size resets the session and clears the buffer."""
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.core.progressive import FrameOutcome

        session = _sky_session(sample_budget=4)
        session.render(PixelBuffer(8, 6))
        assert session.sample_count == 4

        resized = PixelBuffer(5, 3)
        resized.write(0, 0, (9, 9, 9, 9))
        assert session.render_frame(resized) == FrameOutcome.RESET
        assert session.sample_count == 0
        assert (session.width, session.height) == (5, 3)
        assert session.camera.aspect_ratio == pytest.approx(5.0 / 3.0)
        assert not resized.to_numpy().any()

        assert session.render_frame(resized) == FrameOutcome.RENDERED
        assert session.sample_count == 1

    def test_growing_past_initial_size(self):
        """Accumulation storage grows when the buffer gets bigger."""
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.core.progressive import FrameOutcome

        session = _sky_session(4, 4, sample_budget=2)
        bigger = PixelBuffer(12, 9)
        assert session.render_frame(bigger) == FrameOutcome.RESET
        session.render(bigger)
        assert (bigger.to_numpy()[:, :, 3] == 255).all()
        assert session.accumulation_numpy().shape == (9, 12, 3)


class TestProgress:
    """Tests for render() and render_progressive()."""

    def test_render_reports_progress(self):
        from pathtracer.core.framebuffer import PixelBuffer

        session = _sky_session(sample_budget=3)
        calls = []
        rendered = session.render(PixelBuffer(8, 6), lambda n, total: calls.append((n, total)))

        assert rendered == 3
        assert calls == [(1, 3), (2, 3), (3, 3)]
        assert session.last_frame_seconds > 0.0
        assert session.total_render_seconds >= session.last_frame_seconds

    def test_render_progressive_skips_reset(self):
        """A first-call resize does not count as a frame."""
        from pathtracer.core.framebuffer import PixelBuffer

        session = _sky_session(sample_budget=2)
        progress = list(session.render_progressive(PixelBuffer(3, 3)))
        assert progress == [(1, 2), (2, 2)]

    def test_set_scene_restarts(self):
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.scene import create_single_sphere_scene

        session = _sky_session(sample_budget=2)
        session.render(PixelBuffer(8, 6))
        scene, _ = create_single_sphere_scene()
        session.set_scene(scene)
        assert session.sample_count == 0
        assert session.scene is scene


class TestAccumulation:
    """Tests for the per-pixel running average."""

    def test_zenith_sky_encoding(self):
        """Gamma-encoded sky colour is rounded to the nearest 8-bit level."""
        from pathtracer.camera import PinholeCamera
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.core.progressive import RenderSession, RenderSettings
        from pathtracer.scene import Scene

        # A very narrow view straight up sees the zenith colour (0.5, 0.7, 1.0)
        camera = PinholeCamera(
            lookfrom=(0.0, 0.0, 0.0),
            lookat=(0.0, 1.0, 0.0),
            vup=(0.0, 0.0, 1.0),
            vfov=0.5,
            aspect_ratio=1.0,
        )
        session = RenderSession(Scene(), camera, 4, 4, RenderSettings(sample_budget=2))
        buffer = PixelBuffer(4, 4)
        session.render(buffer)

        expected = np.sqrt([0.5, 0.7, 1.0])
        assert np.allclose(session.accumulation_numpy(), expected, atol=1e-3)
        pixels = buffer.to_numpy()
        assert (pixels[:, :, 0] == 180).all()
        assert (pixels[:, :, 1] == 213).all()
        assert (pixels[:, :, 2] == 255).all()

    def test_gamma_applied_per_sample_before_averaging(self):
        """The average is of gamma-encoded samples, not the gamma of the average.

        Looking straight down at glass with one bounce allowed, a sample is
        the zenith sky with the Schlick probability 0.04 and black otherwise.
        Averaging square roots gives red near 0.04 * sqrt(0.5); taking the
        square root of the linear average would give sqrt(0.04 * 0.5).
        """
        from pathtracer.camera import PinholeCamera
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.core.progressive import RenderSession, RenderSettings
        from pathtracer.materials import Glass
        from pathtracer.scene import Scene

        scene = Scene()
        scene.add_sphere((0.0, 0.0, 0.0), 1.0, Glass(albedo=(1.0, 1.0, 1.0), refractive_index=1.5))
        camera = PinholeCamera(
            lookfrom=(0.0, 5.0, 0.0),
            lookat=(0.0, 0.0, 0.0),
            vup=(0.0, 0.0, 1.0),
            vfov=0.01,
            aspect_ratio=1.0,
        )
        settings = RenderSettings(sample_budget=16, max_depth=1)
        session = RenderSession(scene, camera, 16, 16, settings)
        session.render(PixelBuffer(16, 16))

        red = session.accumulation_numpy()[:, :, 0].mean()
        assert abs(red - 0.04 * np.sqrt(0.5)) < 0.01
        assert red < 0.5 * np.sqrt(0.04 * 0.5)

    def test_sky_is_bluer_at_the_top(self):
        """Row 0 of the NumPy image is the top of the view."""
        from pathtracer.core.framebuffer import PixelBuffer

        session = _sky_session(16, 16, sample_budget=1)
        buffer = PixelBuffer(16, 16)
        session.render(buffer)

        image = buffer.to_numpy().astype(np.float64)
        # Red falls from white at the horizon toward 0.5 at the zenith
        assert image[0, :, 0].mean() < image[-1, :, 0].mean()

    def test_frame_to_frame_change_shrinks(self):
        """Later frames move the average less than early ones."""
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.core.progressive import FrameOutcome, RenderSession
        from pathtracer.scene import create_showcase_scene

        scene, camera = create_showcase_scene()
        session = RenderSession(scene, camera, 24, 16)
        buffer = PixelBuffer(24, 16)

        snapshots = []
        while session.render_frame(buffer) == FrameOutcome.RENDERED:
            snapshots.append(session.accumulation_numpy())
        assert len(snapshots) == 16

        early = np.abs(snapshots[1] - snapshots[0]).mean()
        late = np.abs(snapshots[15] - snapshots[14]).mean()
        assert late < early

    def test_reject_non_finite_still_renders(self):
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.core.progressive import RenderSession, RenderSettings
        from pathtracer.scene import create_showcase_scene

        scene, camera = create_showcase_scene()
        settings = RenderSettings(sample_budget=2, reject_non_finite=True)
        session = RenderSession(scene, camera, 8, 6, settings)
        session.render(PixelBuffer(8, 6))
        assert np.isfinite(session.accumulation_numpy()).all()


class TestSharedDeviceScene:
    """Sessions take turns on the device-side scene and camera."""

    def test_session_rebinds_its_scene(self):
        from pathtracer.core.framebuffer import PixelBuffer
        from pathtracer.core.progressive import RenderSession
        from pathtracer.scene import create_single_sphere_scene, get_object_count

        sky = _sky_session(sample_budget=2)
        scene, camera = create_single_sphere_scene()
        sphere = RenderSession(scene, camera, 8, 6)
        assert get_object_count() == 2

        sky.render_frame(PixelBuffer(8, 6))
        assert get_object_count() == 0

        sphere.render_frame(PixelBuffer(8, 6))
        assert get_object_count() == 2

"""Pytest configuration for path tracer tests.

This module provides shared fixtures for all test modules, including
Taichi initialization which must happen once per session.
"""

import pytest
import taichi as ti


@pytest.fixture(scope="session", autouse=True)
def init_taichi_session():
    """Initialize Taichi once for the entire test session.

    Using session scope prevents multiple ti.init() calls which can cause
    segmentation faults due to Taichi runtime conflicts.
    """
    ti.init(arch=ti.cpu, random_seed=42)
    yield


@pytest.fixture(autouse=True)
def clear_all_scene_data():
    """Clear the uploaded scene before and after each test.

    This ensures tests are isolated from each other.
    """
    # Import here so the fields are declared after ti.init()
    from pathtracer.core.progressive import unbind_session
    from pathtracer.materials.material import clear_materials
    from pathtracer.scene.intersection import clear_scene

    def _clear_all():
        clear_scene()
        clear_materials()
        unbind_session()

    _clear_all()
    yield
    _clear_all()

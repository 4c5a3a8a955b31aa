"""Root-level pytest fixtures for the maplat test suite.

Provides shared configuration fixtures following the Pydantic-based config
layering, a fresh projection registry per test, and small map descriptors.
All tests must use these fixtures instead of creating raw dict configs.
"""

import pytest

from maplat.projection.registry import ProjectionRegistry
from maplat.schemas import ParamConfig, UserConfig, resolve_config
from tests.helpers.maps import DEMO_SIZE, make_compiled


# =============================================================================
# Configuration Fixtures (Pydantic-based)
# =============================================================================

@pytest.fixture
def param_config():
    """Expert configuration with all defaults."""
    return ParamConfig()


@pytest.fixture
def internal_config(param_config):
    """Fully validated runtime configuration (no overrides).

    Examples
    --------
    >>> def test_layer_init(internal_config):
    ...     layer = ClusterLayer([], internal_config)
    ...     assert layer.engine.distance == 35.0
    """
    return resolve_config(param_config, None, None)


@pytest.fixture
def make_config(param_config):
    """Factory fixture for creating custom test configs.

    Returns a callable that accepts UserConfig-compatible kwargs.

    Examples
    --------
    >>> def test_custom_distance(make_config):
    ...     config = make_config(CLUSTER_DISTANCE=40)
    ...     assert config.cluster.distance == 40.0
    """
    def _make(**user_overrides):
        """Create InternalConfig with user overrides."""
        if user_overrides:
            user = UserConfig(**user_overrides)
            return resolve_config(param_config, user, None)
        return resolve_config(param_config, None, None)

    return _make


# =============================================================================
# Projection Fixtures
# =============================================================================

@pytest.fixture
def registry(internal_config):
    """Fresh projection registry (one per test, no shared state)."""
    return ProjectionRegistry.from_config(internal_config)


@pytest.fixture
def compiled():
    """Compiled TIN data of the demo map (linear, exact inside the hull)."""
    return make_compiled()


@pytest.fixture
def legacy_doc(compiled):
    """Legacy TIN descriptor of the 1000x600 demo map."""
    return {
        "mapID": "demo",
        "title": "Demo castle town",
        "width": DEMO_SIZE[0],
        "height": DEMO_SIZE[1],
        "url": "https://example.com/demo/{z}/{x}/{y}.jpg",
        "compiled": compiled,
        "attr": "Example attribution",
    }


@pytest.fixture
def zone_doc():
    """Modern descriptor georeferenced to the JCP zone B survey grid (yards)."""
    return {
        "version": "2.0",
        "mapID": "kyoto_survey",
        "metaData": {"title": "Kyoto survey sheet"},
        "projectionSpec": {
            "mapCoord": "JCP:ZONEB:NAD27",
            "worldParams": {
                "xScale": 1.0, "xRotation": 0.0, "xOrigin": 1075000.0,
                "yRotation": 0.0, "yScale": 1.0, "yOrigin": 1335000.0,
            },
            "size": [2000, 1500],
        },
        "sourceSpec": {
            "tileSourceType": "PIXEL",
            "url": "https://example.com/kyoto/{z}/{x}/{y}.png",
        },
    }

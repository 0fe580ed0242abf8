"""Shared pytest fixtures for precool_sim tests."""

from __future__ import annotations

import numpy as np
import pytest

from precool_sim.core.events import reset_event_bus
from precool_sim.core.state import SystemParameters, SystemState
from precool_sim.simulation.scenarios import reference_parameters, reference_state

# =============================================================================
# Autouse fixtures for test isolation
# =============================================================================


@pytest.fixture(autouse=True)
def reset_global_state() -> None:
    """Reset global singletons before each test for isolation.

    The model registry is left alone: evolution models register themselves
    at import time.
    """
    reset_event_bus()


# =============================================================================
# Random number generator fixtures
# =============================================================================


@pytest.fixture
def rng() -> np.random.Generator:
    """Provide a seeded random generator for reproducible tests."""
    return np.random.default_rng(42)


@pytest.fixture
def deterministic_seed() -> int:
    """Provide a fixed seed for reproducible simulations."""
    return 42


# =============================================================================
# Reference container fixtures
# =============================================================================


@pytest.fixture
def params() -> SystemParameters:
    """Reference 2 x 2 container parameters."""
    return reference_parameters()


@pytest.fixture
def state() -> SystemState:
    """Reference initial state: 20C product over 15C air."""
    return reference_state()


@pytest.fixture
def still_params() -> SystemParameters:
    """Reference parameters with no turbulence perturbation."""
    return reference_parameters(alpha=0.0)

"""Core module for the produce cooling simulation framework.

This module provides the foundational pieces of a run:
- State and parameter data structures
- Exception types for invalid input and numerical failure
- Configuration loading and validation
- Evolution model registry
- Event system for run telemetry
"""

from precool_sim.core.events import Event, EventBus, EventType, get_event_bus
from precool_sim.core.exceptions import DomainError, NumericalInstabilityError
from precool_sim.core.registry import get_registry, register_model
from precool_sim.core.state import SystemParameters, SystemState

__all__ = [
    # State
    "SystemState",
    "SystemParameters",
    # Errors
    "DomainError",
    "NumericalInstabilityError",
    # Registry
    "register_model",
    "get_registry",
    # Events
    "Event",
    "EventBus",
    "EventType",
    "get_event_bus",
]

"""Evolution model registry for name-based strategy selection.

This module implements a decorator-based registration system for state
evolution models. Models register themselves at import time using the
@register_model decorator, so configuration files and the CLI can select
a strategy by name.

Usage:
    @register_model("lumped")
    class LumpedZoneModel(EvolutionModel):
        ...

    # Later, build a model from its name
    model = create_model("lumped")
"""

from __future__ import annotations

from collections.abc import Callable
from typing import Any, TypeVar

T = TypeVar("T", bound=type)

# Global registry instance
_registry: ModelRegistry | None = None


class ModelRegistry:
    """Registry mapping model names to evolution model classes."""

    def __init__(self) -> None:
        """Initialize empty registry."""
        self._models: dict[str, type] = {}

    def register(self, name: str, model_class: T) -> T:
        """Register a model class under a name.

        Args:
            name: Model name (e.g., "lumped").
            model_class: The model class to register.

        Returns:
            The registered class (for use as decorator).

        Raises:
            ValueError: If a different class is already registered under name.
        """
        existing = self._models.get(name)
        # Same class re-registering after a module reload is allowed
        if existing is not None and existing.__name__ != model_class.__name__:
            msg = f"Model '{name}' already registered as {existing.__name__}"
            raise ValueError(msg)
        self._models[name] = model_class
        return model_class

    def get(self, name: str) -> type:
        """Get a registered model class.

        Raises:
            KeyError: If the model is not registered.
        """
        if name not in self._models:
            msg = f"Unknown model '{name}'. Available: {self.list_models()}"
            raise KeyError(msg)
        return self._models[name]

    def __contains__(self, name: object) -> bool:
        return name in self._models

    def list_models(self) -> list[str]:
        """List registered model names in registration order."""
        return list(self._models)

    def create(self, name: str, **kwargs: Any) -> Any:
        """Instantiate a registered model.

        Args:
            name: Model name.
            **kwargs: Arguments passed to the model constructor.

        Returns:
            New model instance.
        """
        return self.get(name)(**kwargs)

    def clear(self) -> None:
        """Remove all registrations."""
        self._models.clear()


def get_registry() -> ModelRegistry:
    """Get the global model registry, creating it on first call."""
    global _registry
    if _registry is None:
        _registry = ModelRegistry()
    return _registry


def register_model(name: str) -> Callable[[T], T]:
    """Decorator to register an evolution model class.

    Args:
        name: Name the model is selected by.

    Returns:
        Decorator function that registers the class.
    """

    def decorator(cls: T) -> T:
        return get_registry().register(name, cls)

    return decorator


def list_models() -> list[str]:
    """List all registered model names."""
    return get_registry().list_models()


def create_model(name: str, **kwargs: Any) -> Any:
    """Create a model instance by name.

    Convenience function wrapping registry.create().
    """
    return get_registry().create(name, **kwargs)

"""
Resource-type resolution for audit events and error messages.

The registry is built once at startup and passed to the services that need
it. A type's name is resolved on first use and cached; overrides must be
registered before that.

Usage:
    registry = ResourceTypeRegistry()
    registry.register(EnclosureCleaning, "enclosure_cleaning")
    registry.resolve(EnclosureCleaning).base_action  # "enclosure_cleaning"
"""

from __future__ import annotations

from dataclasses import dataclass

from reptile_api.models import EnclosureCleaning, FeedingLog, PoopLog, ReptileImage, SheddingLog, WeightLog


@dataclass(frozen=True)
class ResourceType:
    resource_type: str
    base_action: str


class ResourceTypeRegistry:
    """
    Type -> ResourceType lookup with explicit overrides.

    Not locked: overrides are registered while the application starts,
    before any request resolves a type. Concurrent first resolutions of the
    same type compute the same value.
    """

    def __init__(self) -> None:
        self._overrides: dict[type, ResourceType] = {}
        self._resolved: dict[type, ResourceType] = {}

    def register(
        self,
        model: type,
        resource_type: str | None = None,
        base_action: str | None = None,
    ) -> ResourceType:
        """
        Register an explicit name for ``model``.

        Raises:
            RuntimeError: If ``model`` was already resolved.
        """
        if model in self._resolved:
            raise RuntimeError(
                f"Resource type for {model.__name__} was already resolved; "
                "register overrides at startup"
            )
        default = model.__name__.lower()
        entry = ResourceType(
            resource_type=resource_type or default,
            base_action=base_action or resource_type or default,
        )
        self._overrides[model] = entry
        return entry

    def resolve(self, model: type) -> ResourceType:
        entry = self._resolved.get(model)
        if entry is None:
            entry = self._overrides.get(model)
            if entry is None:
                name = model.__name__.lower()
                entry = ResourceType(resource_type=name, base_action=name)
            self._resolved[model] = entry
        return entry


def build_resource_registry() -> ResourceTypeRegistry:
    """Registry with the application's multi-word resource names."""
    registry = ResourceTypeRegistry()
    registry.register(EnclosureCleaning, "enclosure_cleaning")
    registry.register(FeedingLog, "feeding_log")
    registry.register(WeightLog, "weight_log")
    registry.register(SheddingLog, "shedding_log")
    registry.register(PoopLog, "poop_log")
    registry.register(ReptileImage, "reptile_image")
    return registry

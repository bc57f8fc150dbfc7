"""Minimal service container.

This package provides a lightweight service locator for Python: services are
registered by name from classes, import paths, factories, callables or
pre-built instances, and are either shared (built once) or rebuilt per lookup.

Exports:
- `Container`: the registry/resolver, plus the process-wide default container.
- `ContainerAware`, `ContainerAwareMixin`: opt-in capability for services that
  need the container that built them.
- `Definition`, `DefinitionKind`: explicit service recipes.
- `Registration`: entries returned by `Container.get_services()`.
- Errors: `ContainerError` and its subclasses.
"""

from ._container import (
    Container,
    ContainerAware,
    ContainerAwareMixin,
    Definition,
    DefinitionKind,
    Registration,
)
from ._errors import (
    AlreadyResolvedError,
    ContainerError,
    MissingDefinitionError,
    ResolveFailedError,
    ServiceNotFoundError,
)


__all__ = [
    "AlreadyResolvedError",
    "Container",
    "ContainerAware",
    "ContainerAwareMixin",
    "ContainerError",
    "Definition",
    "DefinitionKind",
    "MissingDefinitionError",
    "Registration",
    "ResolveFailedError",
    "ServiceNotFoundError",
]

from __future__ import annotations

import inspect
import logging
import pkgutil
import threading
from abc import ABC, abstractmethod
from dataclasses import dataclass, field
from enum import Enum
from typing import TYPE_CHECKING, Any

from ._errors import (
    AlreadyResolvedError,
    MissingDefinitionError,
    ResolveFailedError,
    ServiceNotFoundError,
)


logger = logging.getLogger(__name__)

if TYPE_CHECKING:
    from collections.abc import Callable, Sequence


class DefinitionKind(Enum):
    TYPE = "type"
    FACTORY = "factory"
    CALLABLE = "callable"
    INSTANCE = "instance"
    UNRESOLVABLE = "unresolvable"


@dataclass(frozen=True)
class Definition:
    """Classified service recipe.

    `Definition.infer` picks the kind with a fixed priority:

    1. class object, or import path naming a class -> construct it
    2. plain function or lambda -> factory, called with the container first
    3. any other callable (methods, builtins, partials, callable objects,
       import paths naming a callable) -> called with the parameters only
    4. any other non-string object -> returned as-is
    5. anything else -> cannot produce an instance
    """

    kind: DefinitionKind
    target: object

    def __post_init__(self) -> None:
        if self.kind is DefinitionKind.TYPE and not inspect.isclass(self.target):
            msg = f"{self.target!r} is not a class"
            raise TypeError(msg)
        if self.kind in (DefinitionKind.FACTORY, DefinitionKind.CALLABLE) and not callable(self.target):
            msg = f"{self.kind.value.capitalize()} target {self.target!r} is not callable"
            raise TypeError(msg)

    @classmethod
    def infer(cls, value: object) -> Definition:
        if isinstance(value, Definition):
            return value

        if inspect.isclass(value):
            return cls(DefinitionKind.TYPE, value)

        if isinstance(value, str):
            found = _import_path(value)
            if inspect.isclass(found):
                return cls(DefinitionKind.TYPE, found)
            if callable(found):
                return cls(DefinitionKind.CALLABLE, found)
            return cls(DefinitionKind.UNRESOLVABLE, value)

        if inspect.isfunction(value):
            return cls(DefinitionKind.FACTORY, value)

        if callable(value):
            return cls(DefinitionKind.CALLABLE, value)

        return cls(DefinitionKind.INSTANCE, value)

    @classmethod
    def of_type(cls, tp: type | str) -> Definition:
        target = _import_path(tp) if isinstance(tp, str) else tp
        if not inspect.isclass(target):
            msg = f"{tp!r} does not denote a class"
            raise TypeError(msg)
        return cls(DefinitionKind.TYPE, target)

    @classmethod
    def factory(cls, func: Callable[..., object]) -> Definition:
        """Wrap `func` so it is called as `func(container, *parameters)`."""
        return cls(DefinitionKind.FACTORY, func)

    @classmethod
    def plain(cls, func: Callable[..., object]) -> Definition:
        """Wrap `func` so it is called as `func(*parameters)`, without the container."""
        return cls(DefinitionKind.CALLABLE, func)

    @classmethod
    def instance(cls, obj: object) -> Definition:
        """Wrap a pre-built object, even one that is itself a class or callable."""
        return cls(DefinitionKind.INSTANCE, obj)

    def build(self, container: Container, parameters: Sequence[Any]) -> object | None:
        """Produce an instance, or None when this definition cannot produce one."""
        target: Any = self.target
        if self.kind is DefinitionKind.TYPE:
            return target(*parameters)
        if self.kind is DefinitionKind.FACTORY:
            return target(container, *parameters)
        if self.kind is DefinitionKind.CALLABLE:
            return target(*parameters)
        if self.kind is DefinitionKind.INSTANCE:
            return target
        return None


@dataclass(frozen=True)
class Registration:
    definition: object
    is_shared: bool
    recipe: Definition = field(repr=False, compare=False)


class _DefaultSlot:
    """Holds the process-wide default container, if any."""

    def __init__(self) -> None:
        self._container: Container | None = None

    def get(self) -> Container | None:
        return self._container

    def set(self, container: Container) -> None:
        self._container = container

    def reset(self) -> None:
        self._container = None


_default = _DefaultSlot()

_EMPTY_CHECKED = (str, bytes, bytearray, list, tuple, dict, set, frozenset)


class Container:
    """Service locator container.

    - register services by name: classes, import paths, factories, callables or instances
    - shared services are built once and cached; others are rebuilt on every `get`
    - the first container created becomes the process-wide default.

    Example:
      container = Container()
      container.set("request", Request)
      container.set_shared("db", lambda c: connect(c.get("settings").dsn))
      db = container.get("db")

    Note: once a shared service is cached, `get` returns it and ignores any
    parameters passed to later calls.
    """

    def __init__(self) -> None:
        self._registrations: dict[str, Registration] = {}
        self._instances: dict[str, object] = {}
        self._lock = threading.RLock()

        if _default.get() is None:
            _default.set(self)

    @classmethod
    def set_default(cls, container: Container) -> None:
        _default.set(container)

    @classmethod
    def get_default(cls) -> Container:
        """Return the default container, creating one if there is none."""
        container = _default.get()
        if container is None:
            container = cls()
            _default.set(container)
            logger.debug("Created default container %r", container)
        return container

    @classmethod
    def reset_default(cls) -> None:
        _default.reset()

    def set(self, name: str, definition: object = None, shared: bool = False) -> Container:  # noqa: FBT001, FBT002
        """Register a service definition under `name`.

        When `definition` is omitted and `name` is an import path of a class,
        that class is used.

        Raises:
          MissingDefinitionError: no definition and `name` is not a class path.
          AlreadyResolvedError: `name` is a shared service that was already resolved.
        """
        if not name:
            msg = "Service name must be a non-empty string."
            raise ValueError(msg)

        if _is_empty(definition):
            if inspect.isclass(_import_path(name)):
                definition = name
            else:
                msg = f'Definition for service "{name}" is missing'
                raise MissingDefinitionError(msg)

        recipe = Definition.infer(definition)

        with self._lock:
            if name in self._instances:
                msg = f'Shared service "{name}" already registered and resolved'
                raise AlreadyResolvedError(msg)

            self._registrations[name] = Registration(definition=definition, is_shared=shared, recipe=recipe)

        logger.debug("Registered %s service %r (%s)", "shared" if shared else "transient", name, recipe.kind.value)
        return self

    def set_shared(self, name: str, definition: object = None) -> Container:
        """Register a service that is built once and then reused."""
        return self.set(name, definition, shared=True)

    def remove(self, name: str) -> Container:
        """Drop the definition and any cached instance. Unknown names are ignored."""
        with self._lock:
            self._registrations.pop(name, None)
            dropped = self._instances.pop(name, None) is not None

        logger.debug("Removed service %r%s", name, " and its cached instance" if dropped else "")
        return self

    def has(self, name: str) -> bool:
        return name in self._registrations

    def __contains__(self, name: object) -> bool:
        return isinstance(name, str) and self.has(name)

    def is_shared(self, name: str) -> bool:
        reg = self._registrations.get(name)
        if reg is None:
            msg = f'Service "{name}" is not found'
            raise ServiceNotFoundError(msg)
        return reg.is_shared

    def get(self, name: str, *parameters: Any) -> Any:
        """Resolve a service by name.

        `parameters` are passed to the constructor, factory or callable.
        Shared services return their cached instance once resolved.
        """
        with self._lock:
            if name in self._instances:
                return self._instances[name]
            return self._resolve(name, parameters)

    def try_get(self, name: str, *parameters: Any) -> Any | None:
        """Resolve a service if it is registered; return None otherwise."""
        with self._lock:
            if name not in self._instances and name not in self._registrations:
                return None
            return self.get(name, *parameters)

    def get_services(self) -> dict[str, Registration]:
        """Snapshot of all registrations in registration order."""
        with self._lock:
            return dict(self._registrations)

    def _resolve(self, name: str, parameters: Sequence[Any]) -> object:
        reg = self._registrations.get(name)
        if reg is None:
            msg = f'Service "{name}" is not found'
            raise ServiceNotFoundError(msg)

        instance = reg.recipe.build(self, parameters)
        if _is_empty(instance):
            msg = f'Service "{name}" can not be resolved'
            raise ResolveFailedError(msg)

        if isinstance(instance, ContainerAware):
            instance.set_container(self)

        if reg.is_shared:
            self._instances[name] = instance
            logger.debug("Cached shared service %r", name)
        else:
            logger.debug("Built service %r", name)

        return instance


class ContainerAware(ABC):
    """Capability of objects that want the container resolving them.

    The container calls `set_container` right after building an instance of
    a subclass (or of a class registered via `ContainerAware.register`).
    """

    @abstractmethod
    def set_container(self, container: Container) -> ContainerAware: ...

    @abstractmethod
    def get_container(self) -> Container: ...


class ContainerAwareMixin(ContainerAware):
    """Default `ContainerAware` implementation.

    Falls back to the process-wide default container when none has been set.
    """

    _container: Container | None = None

    def set_container(self, container: Container) -> ContainerAwareMixin:
        self._container = container
        return self

    def get_container(self) -> Container:
        if self._container is None:
            self._container = Container.get_default()
        return self._container


def _import_path(path: str) -> object | None:
    """Look up `pkg.mod.attr` or `pkg.mod:attr`; None when nothing matches.

    Bare tokens are never imported.
    """
    if "." not in path and ":" not in path:
        return None
    try:
        return pkgutil.resolve_name(path)
    except (ValueError, ImportError, AttributeError) as exc:
        logger.debug("'%s' is not an importable path (%s)", path, exc)
        return None


def _is_empty(value: object) -> bool:
    """None, or an empty builtin string or collection."""
    if value is None:
        return True
    return isinstance(value, _EMPTY_CHECKED) and len(value) == 0

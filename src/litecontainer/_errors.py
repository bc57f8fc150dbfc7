from __future__ import annotations


class ContainerError(Exception):
    """Base class for every error raised by the container."""


class MissingDefinitionError(ContainerError, ValueError):
    """No usable definition was given and the name does not denote a type."""


class AlreadyResolvedError(ContainerError, ValueError):
    """A shared service was re-registered after it has been resolved."""


class ServiceNotFoundError(ContainerError, KeyError):
    """The requested service name is not registered."""

    # KeyError wraps its message in quotes; keep it readable.
    def __str__(self) -> str:
        return str(self.args[0]) if self.args else ""


class ResolveFailedError(ContainerError, RuntimeError):
    """Building the service definition produced no instance."""

"""
Tiny service container used to wire adapters, translators and the
validator plugin manager together.
"""

from __future__ import annotations

import importlib
import logging
from typing import Any, Callable, Dict, Mapping, Optional

from dbvalidator.errors.exceptions import ConfigError, ServiceNotFoundError

log = logging.getLogger(__name__)

ServiceFactory = Callable[["ServiceContainer"], Any]


def import_string(ref: str) -> Any:
    """Resolve "package.module:attr" (or "package.module.attr") to an object."""
    if not isinstance(ref, str) or not ref.strip():
        raise ConfigError(f"Invalid import reference: {ref!r}")
    module_name, sep, attr = ref.strip().partition(":")
    if not sep:
        module_name, _, attr = module_name.rpartition(".")
    if not module_name or not attr:
        raise ConfigError(f"Invalid import reference: {ref!r}")
    try:
        module = importlib.import_module(module_name)
        return getattr(module, attr)
    except (ImportError, AttributeError) as e:
        raise ConfigError(f"Cannot import {ref!r}: {e}") from e


class ServiceContainer:
    def __init__(self, dependencies: Optional[Mapping[str, Any]] = None) -> None:
        self._services: Dict[str, Any] = {}
        self._factories: Dict[str, ServiceFactory] = {}
        self._aliases: Dict[str, str] = {}
        if dependencies:
            self.configure(dependencies)

    def configure(self, dependencies: Mapping[str, Any]) -> "ServiceContainer":
        for name, service in (dependencies.get("services") or {}).items():
            self.set_service(name, service)
        for name, factory in (dependencies.get("factories") or {}).items():
            self.set_factory(name, factory)
        for alias, target in (dependencies.get("aliases") or {}).items():
            self.set_alias(alias, target)
        return self

    def set_service(self, name: str, service: Any) -> None:
        self._services[name] = service

    def set_factory(self, name: str, factory: ServiceFactory | str) -> None:
        if isinstance(factory, str):
            factory = import_string(factory)
        if not callable(factory):
            raise ConfigError(f"Factory for service {name!r} is not callable")
        self._factories[name] = factory
        # a new factory invalidates a previously built instance
        self._services.pop(name, None)

    def set_alias(self, alias: str, target: str) -> None:
        self._aliases[alias] = target

    def resolve_name(self, name: str) -> str:
        seen = {name}
        while name in self._aliases:
            name = self._aliases[name]
            if name in seen:
                raise ConfigError(f"Alias cycle detected at {name!r}")
            seen.add(name)
        return name

    def has(self, name: str) -> bool:
        resolved = self.resolve_name(name)
        return resolved in self._services or resolved in self._factories

    def get(self, name: str) -> Any:
        resolved = self.resolve_name(name)
        if resolved in self._services:
            return self._services[resolved]

        factory = self._factories.get(resolved)
        if factory is None:
            raise ServiceNotFoundError(f"Service {name!r} was not found in the container")

        service = factory(self)
        self._services[resolved] = service
        log.debug("Built service", extra={"service": resolved})
        return service

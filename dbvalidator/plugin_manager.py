from __future__ import annotations

import logging
from typing import Any, Callable, Dict, List, Mapping, Optional, Type

from adapters.metrics.noop import NoOpMetrics
from dbvalidator.container import import_string
from dbvalidator.db_validator import AbstractDbValidator
from dbvalidator.errors.exceptions import (
    InvalidServiceError,
    ServiceNotFoundError,
)
from dbvalidator.registry import ALIASES, VALIDATORS
from dbvalidator.validator import AbstractValidator

log = logging.getLogger(__name__)

ValidatorFactory = Callable[[Any, str, Dict[str, Any]], Any]
Initializer = Callable[[Any, Any], None]

ADAPTER_SERVICE = "DbAdapter"
METRICS_SERVICE = "Metrics"
TRANSLATOR_SERVICES = ("MvcTranslator", "Translator")


def _container_has(container: Any, name: str) -> bool:
    return container is not None and container.has(name)


# ------------------------------ factories ------------------------------ #
def invokable_factory(cls: Type[AbstractValidator]) -> ValidatorFactory:
    def factory(container: Any, name: str, options: Dict[str, Any]) -> AbstractValidator:
        return cls(**options)

    return factory


def db_validator_factory(cls: Type[AbstractDbValidator]) -> ValidatorFactory:
    """Like invokable_factory, but falls back to the container's DbAdapter."""

    def factory(container: Any, name: str, options: Dict[str, Any]) -> AbstractDbValidator:
        if options.get("adapter") is None and _container_has(container, ADAPTER_SERVICE):
            options = {**options, "adapter": container.get(ADAPTER_SERVICE)}
        return cls(**options)

    return factory


def _factory_for_class(cls: type) -> ValidatorFactory:
    if issubclass(cls, AbstractDbValidator):
        return db_validator_factory(cls)
    return invokable_factory(cls)


def _deep_merge(base: Mapping[str, Any], override: Mapping[str, Any]) -> Dict[str, Any]:
    out: Dict[str, Any] = dict(base)
    for k, v in override.items():
        if isinstance(v, Mapping) and isinstance(out.get(k), Mapping):
            out[k] = _deep_merge(out[k], v)
        else:
            out[k] = v
    return out


DEFAULT_CONFIGURATION: Dict[str, Any] = {
    "factories": {name: _factory_for_class(cls) for name, cls in VALIDATORS.items()},
    "aliases": dict(ALIASES),
}


class ValidatorPluginManager:
    """
    Builds validators by name or alias.

    Instances are not shared by default: every get() returns a fresh
    validator unless the name is listed under "shared". After a validator is
    built, initializers inject the container's translator, this manager and
    the metrics sink into validators that support them.
    """

    shared_by_default = False
    instance_of: type = AbstractValidator

    def __init__(self, creation_context: Any = None, config: Optional[Mapping[str, Any]] = None):
        merged = _deep_merge(DEFAULT_CONFIGURATION, config or {})
        self.creation_context = creation_context

        self._factories: Dict[str, ValidatorFactory] = {}
        self._aliases: Dict[str, str] = {}
        self._shared: Dict[str, bool] = {}
        self._instances: Dict[str, Any] = {}
        self._initializers: List[Initializer] = []

        for name, factory in (merged.get("factories") or {}).items():
            self.set_factory(name, factory)
        for name, cls in (merged.get("invokables") or {}).items():
            self.set_invokable(name, cls)
        for alias, target in (merged.get("aliases") or {}).items():
            self.set_alias(alias, target)
        for name, flag in (merged.get("shared") or {}).items():
            self.set_shared(name, flag)

        self.add_initializer(self.inject_translator)
        self.add_initializer(self.inject_validator_plugin_manager)
        self.add_initializer(self.inject_metrics)

    # ------------------------------ configuration ------------------------------ #
    def set_factory(self, name: str, factory: Any) -> None:
        if isinstance(factory, str):
            factory = import_string(factory)
        if isinstance(factory, type):
            if not issubclass(factory, self.instance_of):
                raise InvalidServiceError(
                    f"{factory.__name__} is not a {self.instance_of.__name__}"
                )
            factory = _factory_for_class(factory)
        if not callable(factory):
            raise InvalidServiceError(f"Factory for {name!r} is not callable")
        self._factories[name] = factory
        self._instances.pop(name, None)

    def set_invokable(self, name: str, cls: Any) -> None:
        if isinstance(cls, str):
            cls = import_string(cls)
        if not isinstance(cls, type) or not issubclass(cls, self.instance_of):
            raise InvalidServiceError(f"Invokable {name!r} is not a validator class")
        self._factories[name] = _factory_for_class(cls)

    def set_alias(self, alias: str, target: str) -> None:
        self._aliases[alias] = target

    def set_shared(self, name: str, flag: bool) -> None:
        self._shared[self.resolve_name(name)] = bool(flag)

    def add_initializer(self, initializer: Initializer) -> None:
        self._initializers.append(initializer)

    def get_aliases(self) -> Dict[str, str]:
        return dict(self._aliases)

    # ------------------------------ lookup ------------------------------ #
    def resolve_name(self, name: str) -> str:
        seen = {name}
        while name in self._aliases:
            name = self._aliases[name]
            if name in seen:
                raise InvalidServiceError(f"Alias cycle detected at {name!r}")
            seen.add(name)
        return name

    def has(self, name: str) -> bool:
        return self.resolve_name(name) in self._factories

    def get(self, name: str, options: Optional[Mapping[str, Any]] = None) -> Any:
        resolved = self.resolve_name(name)
        shared = self._shared.get(resolved, self.shared_by_default)

        if shared and not options and resolved in self._instances:
            return self._instances[resolved]

        instance = self.build(name, options)
        if shared and not options:
            self._instances[resolved] = instance
        return instance

    def build(self, name: str, options: Optional[Mapping[str, Any]] = None) -> Any:
        resolved = self.resolve_name(name)
        factory = self._factories.get(resolved)
        if factory is None:
            raise ServiceNotFoundError(
                f"A plugin by the name {name!r} was not found in {type(self).__name__}"
            )

        instance = factory(self.creation_context, resolved, dict(options or {}))
        if not isinstance(instance, self.instance_of):
            raise InvalidServiceError(
                f"Plugin {resolved!r} built {type(instance).__name__}, "
                f"expected {self.instance_of.__name__}"
            )

        for initializer in self._initializers:
            initializer(self.creation_context, instance)

        log.debug(
            "Built validator",
            extra={"requested": name, "resolved": resolved, "cls": type(instance).__name__},
        )
        return instance

    # ------------------------------ initializers ------------------------------ #
    def inject_translator(self, container: Any, validator: Any) -> None:
        if not hasattr(validator, "set_translator"):
            return
        if getattr(validator, "has_translator", lambda: False)():
            return

        for service in TRANSLATOR_SERVICES:
            if _container_has(container, service):
                validator.set_translator(container.get(service))
                return

    def inject_validator_plugin_manager(self, container: Any, validator: Any) -> None:
        if not hasattr(validator, "set_validator_plugin_manager"):
            return
        validator.set_validator_plugin_manager(self)

    def inject_metrics(self, container: Any, validator: Any) -> None:
        if not hasattr(validator, "set_metrics"):
            return
        # keep a sink passed explicitly through options
        if not isinstance(getattr(validator, "metrics", None), NoOpMetrics):
            return
        if _container_has(container, METRICS_SERVICE):
            validator.set_metrics(container.get(METRICS_SERVICE))

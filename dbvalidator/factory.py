from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import Any, Dict, Mapping, Optional, cast

import yaml  # type: ignore[import-untyped]

from adapters.db.base import DBAdapter
from adapters.db.postgres_adapter import PostgresAdapter
from adapters.db.sqlite_adapter import MEMORY, SQLiteAdapter
from adapters.metrics.base import Metrics
from adapters.metrics.noop import NoOpMetrics
from adapters.metrics.prometheus import PrometheusMetrics
from dbvalidator.config_provider import ConfigProvider
from dbvalidator.container import ServiceContainer
from dbvalidator.errors.exceptions import ConfigError
from dbvalidator.plugin_manager import (
    ADAPTER_SERVICE,
    METRICS_SERVICE,
    ValidatorPluginManager,
)
from dbvalidator.settings import Settings, get_settings
from dbvalidator.translator import DictTranslator
from dbvalidator.validator import AbstractValidator

log = logging.getLogger(__name__)


# ------------------------------ helpers ------------------------------ #
def _require_str(value: Any, *, name: str) -> str:
    if value is None or not isinstance(value, str) or not value.strip():
        raise ConfigError(f"Config {name} must be a non-empty string")
    return os.path.expandvars(value.strip())


def build_adapter(
    adapter_cfg: Mapping[str, Any], *, base_dir: Optional[Path] = None
) -> DBAdapter:
    """
    Build a DB adapter from an adapter config section.

    A relative SQLite path is resolved against base_dir (the directory of
    the config file) when given, else against the current directory.
    """
    kind = str(adapter_cfg.get("kind") or "sqlite").lower()
    if kind == "sqlite":
        dsn = _require_str(adapter_cfg.get("dsn"), name="adapter.dsn")
        if dsn != MEMORY:
            path = Path(dsn).expanduser()
            if base_dir is not None and not path.is_absolute():
                path = base_dir / path
            dsn = str(path)
        return SQLiteAdapter(dsn)
    if kind in ("postgres", "postgresql"):
        dsn = _require_str(adapter_cfg.get("dsn"), name="adapter.dsn")
        return PostgresAdapter(dsn)
    raise ConfigError(f"Unknown adapter kind: {kind}")


def adapter_from_settings(settings: Settings) -> DBAdapter:
    if settings.db_mode == "postgres":
        return build_adapter({"kind": "postgres", "dsn": settings.postgres_dsn})
    return build_adapter({"kind": "sqlite", "dsn": settings.sqlite_path})


def build_metrics(kind: Optional[str]) -> Metrics:
    kind = (kind or "noop").lower()
    if kind == "prometheus":
        return PrometheusMetrics()
    if kind == "noop":
        return NoOpMetrics()
    raise ConfigError(f"Unknown metrics kind: {kind}")


def load_config(path: str) -> Dict[str, Any]:
    try:
        with open(path, "r", encoding="utf-8") as fh:
            cfg = yaml.safe_load(fh)
    except FileNotFoundError as e:
        raise ConfigError(f"Config file not found: {path}") from e
    except yaml.YAMLError as e:
        raise ConfigError(f"Invalid YAML in {path}: {e}") from e

    if cfg is None:
        return {}
    if not isinstance(cfg, dict):
        raise ConfigError(f"Config root in {path} must be a mapping")
    return cfg


# ------------------------------ factory ------------------------------ #
def container_from_dict(
    cfg: Mapping[str, Any],
    *,
    adapter: Optional[DBAdapter] = None,
    base_dir: Optional[Path] = None,
) -> ServiceContainer:
    """
    Build a ServiceContainer from a config mapping (dependency-injected).

    Keys: adapter, validators, translations, metrics, checks. When no
    adapter section is given, the adapter is derived from Settings.
    Relative SQLite paths resolve against base_dir.
    """
    container = ServiceContainer(ConfigProvider()()["dependencies"])
    container.set_service("config", dict(cfg))

    # --- Adapter ---
    if adapter is None:
        adapter_cfg = cfg.get("adapter")
        if adapter_cfg is not None and not isinstance(adapter_cfg, Mapping):
            raise ConfigError("Config adapter must be a mapping")
        adapter = (
            build_adapter(cast(Mapping[str, Any], adapter_cfg), base_dir=base_dir)
            if adapter_cfg
            else adapter_from_settings(get_settings())
        )
    container.set_service(ADAPTER_SERVICE, adapter)

    # --- Translator ---
    translations = cfg.get("translations")
    if translations:
        if not isinstance(translations, Mapping):
            raise ConfigError("Config translations must be a mapping of domains")
        container.set_service("Translator", DictTranslator(translations))

    # --- Metrics ---
    container.set_service(
        METRICS_SERVICE, build_metrics(cfg.get("metrics") or get_settings().metrics)
    )

    log.debug(
        "Container built from config",
        extra={"adapter": getattr(adapter, "name", "?"), "checks": len(cfg.get("checks") or {})},
    )
    return container


def container_from_config(path: str, *, adapter: Optional[DBAdapter] = None) -> ServiceContainer:
    return container_from_dict(
        load_config(path), adapter=adapter, base_dir=Path(path).resolve().parent
    )


def validator_manager_from_config(
    path: str, *, adapter: Optional[DBAdapter] = None
) -> ValidatorPluginManager:
    container = container_from_config(path, adapter=adapter)
    return cast(ValidatorPluginManager, container.get("ValidatorManager"))


def build_check(container: ServiceContainer, name: str) -> AbstractValidator:
    """Build the validator declared under checks.<name> in the container config."""
    checks = container.get("config").get("checks") or {}
    check = checks.get(name)
    if not isinstance(check, Mapping):
        known = ", ".join(sorted(checks)) or "none"
        raise ConfigError(f"Unknown check {name!r} (known: {known})")

    options = dict(check)
    validator_name = _require_str(options.pop("validator", None), name=f"checks.{name}.validator")
    manager = cast(ValidatorPluginManager, container.get("ValidatorManager"))
    return cast(AbstractValidator, manager.get(validator_name, options))


def check_from_config(
    path: str, name: str, *, adapter: Optional[DBAdapter] = None
) -> AbstractValidator:
    return build_check(container_from_config(path, adapter=adapter), name)

from __future__ import annotations

from typing import Any, Dict, Mapping

from dbvalidator.errors.exceptions import ConfigError
from dbvalidator.plugin_manager import DEFAULT_CONFIGURATION, ValidatorPluginManager
from dbvalidator.registry import ALIASES

VALIDATOR_MANAGER = "ValidatorPluginManager"


def validator_plugin_manager_factory(container: Any) -> ValidatorPluginManager:
    """Build the plugin manager from the "validators" section of the container config."""
    config: Any = container.get("config") if container.has("config") else {}
    if not isinstance(config, Mapping):
        raise ConfigError("Container 'config' service must be a mapping")

    validators = config.get("validators")
    if not isinstance(validators, Mapping):
        validators = {}

    return ValidatorPluginManager(container, validators)


class ConfigProvider:
    """Service wiring exposed by this package."""

    def __call__(self) -> Dict[str, Any]:
        return {"dependencies": self.get_dependency_config()}

    def get_dependency_config(self) -> Dict[str, Any]:
        return {
            "aliases": {
                "ValidatorManager": VALIDATOR_MANAGER,
            },
            "factories": {
                VALIDATOR_MANAGER: validator_plugin_manager_factory,
            },
        }


def module_config() -> Dict[str, Any]:
    """Default validator configuration, in the shape of the "validators" config key."""
    return {
        "validators": {
            "factories": dict(DEFAULT_CONFIGURATION["factories"]),
            "aliases": dict(ALIASES),
        },
    }

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict


@dataclass
class ValidatorError(Exception):
    """Base class for errors raised by validators and their wiring."""

    message: str
    code: str = "validator_error"
    extra: Dict[str, Any] = field(default_factory=dict)

    def __str__(self) -> str:
        return self.message


@dataclass
class InvalidArgumentError(ValidatorError):
    code: str = "invalid_argument"


@dataclass
class ValidatorRuntimeError(ValidatorError):
    code: str = "runtime_error"


@dataclass
class ServiceNotFoundError(ValidatorError):
    code: str = "service_not_found"


@dataclass
class InvalidServiceError(ValidatorError):
    code: str = "invalid_service"


@dataclass
class ConfigError(ValidatorError):
    code: str = "config_error"

from __future__ import annotations

import time
from abc import ABC, abstractmethod
from enum import Enum
from typing import Any, ClassVar, Dict, Mapping, Optional

from dbvalidator.errors.exceptions import InvalidArgumentError
from dbvalidator.translator import Translator
from dbvalidator.types import ValidationResult, ValidationTrace


def _key(key: Any) -> str:
    return str(key.value) if isinstance(key, Enum) else str(key)


class AbstractValidator(ABC):
    """
    Base validator with message templates, %value% substitution and
    optional translation.

    Subclasses declare `message_templates` (key -> template) and may expose
    extra placeholders through `message_variables` (placeholder -> attribute).
    Messages are reset on every `set_value()`, so `get_messages()` always
    reflects the last `is_valid()` call.
    """

    message_templates: ClassVar[Dict[str, str]] = {}
    message_variables: ClassVar[Dict[str, str]] = {}

    def __init__(
        self,
        *,
        messages: Optional[Mapping[str, str]] = None,
        translator: Optional[Translator] = None,
        translator_text_domain: str = "default",
        translator_enabled: bool = True,
        value_obscured: bool = False,
    ) -> None:
        self._templates: Dict[str, str] = {
            _key(k): v for k, v in type(self).message_templates.items()
        }
        self._messages: Dict[str, str] = {}
        self._value: Any = None

        self._translator = translator
        self._translator_text_domain = translator_text_domain or "default"
        self._translator_enabled = bool(translator_enabled)
        self._value_obscured = bool(value_obscured)

        for key, message in (messages or {}).items():
            self.set_message(message, key)

    # ------------------------------ contract ------------------------------ #
    @abstractmethod
    def is_valid(self, value: Any) -> bool: ...

    def __call__(self, value: Any) -> bool:
        return self.is_valid(value)

    def validate(self, value: Any) -> ValidationResult:
        t0 = time.perf_counter()
        ok = self.is_valid(value)
        trace = ValidationTrace(
            validator=type(self).__name__,
            duration_ms=(time.perf_counter() - t0) * 1000,
            notes={"message_count": len(self._messages)},
        )
        return ValidationResult(
            ok=ok, value=value, messages=self.get_messages(), trace=trace
        )

    # ------------------------------ messages ------------------------------ #
    def get_messages(self) -> Dict[str, str]:
        return dict(self._messages)

    def get_message_templates(self) -> Dict[str, str]:
        return dict(self._templates)

    def get_message_variables(self) -> Dict[str, str]:
        return dict(self.message_variables)

    def set_message(self, message: str, key: Any = None) -> None:
        if key is None:
            for k in self._templates:
                self._templates[k] = message
            return

        k = _key(key)
        if k not in self._templates:
            raise InvalidArgumentError(f"No message template exists for key '{k}'")
        self._templates[k] = message

    def set_value(self, value: Any) -> None:
        self._value = value
        self._messages = {}

    def get_value(self) -> Any:
        return self._value

    def error(self, key: Any, value: Any = None) -> None:
        k = _key(key)
        if k not in self._templates:
            raise InvalidArgumentError(f"No message template exists for key '{k}'")
        self._messages[k] = self._create_message(
            k, self._value if value is None else value
        )

    def _create_message(self, key: str, value: Any) -> str:
        template = self._templates[key]
        if self._translator is not None and self._translator_enabled:
            template = self._translator.translate(
                template, self._translator_text_domain
            )

        shown = "" if value is None else str(value)
        if self._value_obscured:
            shown = "*" * len(shown)

        message = template.replace("%value%", shown)
        for name, attr in self.message_variables.items():
            message = message.replace(f"%{name}%", str(getattr(self, attr, "")))
        return message

    def is_value_obscured(self) -> bool:
        return self._value_obscured

    def set_value_obscured(self, flag: bool) -> None:
        self._value_obscured = bool(flag)

    # ------------------------------ translation ------------------------------ #
    def set_translator(
        self, translator: Optional[Translator], text_domain: Optional[str] = None
    ) -> None:
        self._translator = translator
        if text_domain is not None:
            self.set_translator_text_domain(text_domain)

    def get_translator(self) -> Optional[Translator]:
        return self._translator if self._translator_enabled else None

    def has_translator(self) -> bool:
        return self._translator is not None

    def set_translator_text_domain(self, text_domain: str = "default") -> None:
        self._translator_text_domain = text_domain or "default"

    def get_translator_text_domain(self) -> str:
        return self._translator_text_domain

    def set_translator_enabled(self, enabled: bool = True) -> None:
        self._translator_enabled = bool(enabled)

    def is_translator_enabled(self) -> bool:
        return self._translator_enabled

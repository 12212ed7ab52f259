from __future__ import annotations

from typing import Dict, Mapping, Optional, Protocol


class Translator(Protocol):
    def translate(self, message: str, text_domain: str = "default") -> str:
        """Return the translated message, or the message itself if unknown."""


class DictTranslator:
    """In-memory translator: {text_domain: {msgid: msgstr}}."""

    def __init__(self, catalog: Optional[Mapping[str, Mapping[str, str]]] = None):
        self._catalog: Dict[str, Dict[str, str]] = {
            str(domain): {str(k): str(v) for k, v in (entries or {}).items()}
            for domain, entries in (catalog or {}).items()
        }

    def add(self, message: str, translation: str, text_domain: str = "default") -> None:
        self._catalog.setdefault(text_domain, {})[message] = translation

    def translate(self, message: str, text_domain: str = "default") -> str:
        return self._catalog.get(text_domain, {}).get(message, message)

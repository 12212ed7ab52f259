from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Literal

QueryOutcome = Literal["found", "not_found", "error"]


class Metrics(ABC):
    @abstractmethod
    def observe_query_duration_ms(self, *, validator: str, dt_ms: float) -> None: ...

    @abstractmethod
    def inc_query(self, *, validator: str, outcome: QueryOutcome) -> None: ...

    @abstractmethod
    def inc_validation(self, *, validator: str, valid: bool) -> None: ...

    @abstractmethod
    def inc_query_error(self, *, validator: str, error_type: str) -> None: ...

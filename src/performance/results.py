"""Outcome of one aggregator run: a value plus optional degradation notes."""
from __future__ import annotations

from dataclasses import dataclass, field


@dataclass(frozen=True)
class DegradedReason:
    aggregator: str
    reason: str

    def as_dict(self) -> dict:
        return {"aggregator": self.aggregator, "reason": self.reason}


@dataclass
class AggregatorResult:
    name: str
    value: object
    degraded: list = field(default_factory=list)

    @property
    def ok(self) -> bool:
        return not self.degraded

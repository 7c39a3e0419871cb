"""Data models describing the outcome of a settlement."""

from typing import List

from pydantic import BaseModel


class FlowData(BaseModel):
    """A single applied resource flow."""

    resource: str
    amount: float  # positive consumed, negative produced
    label: str


class SettlementReport(BaseModel):
    """Summary of one settlement for host display and logging."""

    label: str
    elapsed_s: float
    factor: float
    flows: List[FlowData] = []

    @property
    def throttled(self) -> bool:
        return self.factor < 1.0

    def consumed(self, resource: str) -> float:
        """Total amount of ``resource`` drawn in this settlement."""
        return sum(f.amount for f in self.flows if f.resource == resource and f.amount > 0)

    def produced(self, resource: str) -> float:
        """Total amount of ``resource`` added in this settlement."""
        return -sum(f.amount for f in self.flows if f.resource == resource and f.amount < 0)

from dataclasses import dataclass, field
from typing import Iterator, List


@dataclass(frozen=True)
class ResourceRequest:
    """One signed rate request.

    Attributes:
        name: Resource identifier, passed through to the oracle unchecked.
        rate: Units per second. Positive consumes, negative produces.
    """

    name: str
    rate: float

    @property
    def is_consumer(self) -> bool:
        return self.rate > 0


@dataclass
class RequestLedger:
    """Batch of resource requests settled together in one tick.

    Requests are kept in registration order and never merged, so the same
    resource may appear several times. Both registration methods return the
    ledger to allow chaining:

        ledger = RequestLedger().consume("ElectricCharge", 0.5).produce("Oxygen", 0.1)
    """

    requests: List[ResourceRequest] = field(default_factory=list)

    def produce(self, resource_name: str, rate: float) -> "RequestLedger":
        """Register production of ``rate`` units per second."""
        self.requests.append(ResourceRequest(resource_name, -rate))
        return self

    def consume(self, resource_name: str, rate: float) -> "RequestLedger":
        """Register consumption of ``rate`` units per second."""
        self.requests.append(ResourceRequest(resource_name, rate))
        return self

    def __iter__(self) -> Iterator[ResourceRequest]:
        return iter(self.requests)

    def __len__(self) -> int:
        return len(self.requests)

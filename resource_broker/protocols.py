"""Protocol-based abstractions for the host environment.

The broker never talks to a concrete game or simulation. Everything it needs
from the host is expressed as a structural protocol, so any object with the
right methods works without inheriting from anything here:

    ResourceOracle - availability query plus consume/produce mutations
    HostClock - source of simulated time
    FallbackConsumer - host's unconstrained per-tick consumption path

Example:
    # Bad - couples the engine to one backend
    if backend_loaded:
        kerbalism_api.consume_resource(vessel, "ElectricCharge", 1.0, "Antenna")

    # Good - works with the live backend, the null backend or a test fake
    oracle.consume(vessel, "ElectricCharge", 1.0, "Antenna")
"""

from typing import Any, Hashable, Protocol, Sequence, Tuple, runtime_checkable

VesselId = Hashable
"""Opaque vessel identity. The broker only passes it back to the oracle."""


@runtime_checkable
class ResourceOracle(Protocol):
    """Protocol for per-vessel resource accounting backends.

    Implementations must tolerate unknown vessels and resource names
    (``available`` returns 0.0) and zero magnitudes in both mutations.
    """

    def available(self, vessel: VesselId, resource_name: str) -> float:
        """Currently available quantity of ``resource_name`` on ``vessel``."""
        ...

    def consume(self, vessel: VesselId, resource_name: str, quantity: float, label: str) -> None:
        """Remove ``quantity`` (non-negative) and attribute the draw to ``label``."""
        ...

    def produce(self, vessel: VesselId, resource_name: str, quantity: float, label: str) -> None:
        """Add ``quantity`` (non-negative) and attribute it to ``label``."""
        ...


@runtime_checkable
class HostClock(Protocol):
    """Protocol for the host's simulated time source."""

    def universal_time(self) -> float:
        """Current simulated time in seconds."""
        ...


@runtime_checkable
class FallbackConsumer(Protocol):
    """Protocol for the host's unconstrained consumption model.

    Used instead of the settlement engine when the advanced resource backend
    is not present.
    """

    def update_module_resource_inputs(
        self,
        inputs: Sequence[Any],
        rate_multiplier: float,
        threshold: float,
    ) -> Tuple[float, str]:
        """Consume ``inputs`` for this tick.

        Returns:
            Tuple of (achieved rate, status message).
        """
        ...

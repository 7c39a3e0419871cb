"""Per-module resource handling on top of the settlement engine.

A host module (a converter, a greenhouse, a science experiment...) owns one
:class:`ResourceHandler`. The handler remembers the module's input resources
and the time of its last update, and on every tick either settles those
inputs through :class:`ThrottledSettlement` or, when the advanced backend was
not found at start-up, hands them to the host's fallback consumer.

Typical wiring:

    backend = probe_backend()              # once, at start-up
    handler = ResourceHandler(module, backend, clock, fallback=module.res_handler)
    handler.add_input_resource("ElectricCharge", 0.05)
    handler.on_awake()
    ...
    achieved = handler.fixed_update()      # every tick
"""

import logging
import math
from dataclasses import dataclass
from typing import Any, List, Optional

from resource_broker.backend import ResourceBackend
from resource_broker.config.settlement import SettlementConfig
from resource_broker.exceptions import ResourceConfigurationError
from resource_broker.ledger import RequestLedger
from resource_broker.protocols import FallbackConsumer, HostClock
from resource_broker.report import SettlementReport
from resource_broker.settlement import ThrottledSettlement
from resource_broker.snapshot import Snapshot, get_float, set_value

logger = logging.getLogger(__name__)

LAST_UPDATE_KEY = "last_update"


@dataclass
class InputResource:
    """A resource the module consumes continuously."""

    name: str
    rate: float  # units per second


class ResourceHandler:
    """Consumes a module's input resources once per tick.

    Attributes:
        module: Host module. Its ``vessel`` attribute is read on every update.
        backend: Start-up backend selection.
        title: Label shown by the backend for this module's draws.
        input_resources: Registered inputs, one entry per resource name.
        consumed_resources: Resource names reported to the host in fallback mode.
        last_update: Simulated time of the last settlement, 0.0 before the first.
        status: Last status message from the fallback consumer.
        last_report: Summary of the last settlement, None in fallback mode.
    """

    def __init__(
        self,
        module: Any,
        backend: ResourceBackend,
        clock: HostClock,
        fallback: Optional[FallbackConsumer] = None,
        title: Optional[str] = None,
        config: Optional[SettlementConfig] = None,
    ) -> None:
        if not backend.available and fallback is None:
            raise ResourceConfigurationError(
                "A fallback consumer is required when the advanced resource backend is absent"
            )

        self.module = module
        self.backend = backend
        self.clock = clock
        self.fallback = fallback
        self.config = config or SettlementConfig()
        self.title = title or getattr(module, "module_name", None) or type(module).__name__

        self.input_resources: List[InputResource] = []
        self.consumed_resources: List[str] = []
        self.last_update = 0.0
        self.status = ""
        self.last_report: Optional[SettlementReport] = None

    def add_input_resource(self, resource_name: str, rate: float) -> None:
        """Register an input resource, or update its rate if already registered.

        Safe to call repeatedly with the same values, e.g. from a load hook
        that the host may run more than once.

        Raises:
            ResourceConfigurationError: If the name is empty or the rate is
                negative or not finite.
        """
        if not resource_name:
            raise ResourceConfigurationError("Input resource name must be non-empty")
        if not math.isfinite(rate) or rate < 0:
            raise ResourceConfigurationError(
                f"Input rate for {resource_name} must be a finite non-negative number, got {rate!r}"
            )

        for resource in self.input_resources:
            if resource.name == resource_name:
                resource.rate = rate
                return

        self.input_resources.append(InputResource(resource_name, rate))

    def on_awake(self) -> None:
        """Rebuild the consumed-resource list. Call from the module's awake hook."""
        self.consumed_resources.clear()
        if self.backend.available:
            return
        self.consumed_resources.extend(resource.name for resource in self.input_resources)

    def get_consumed_resources(self) -> List[str]:
        return self.consumed_resources

    def fixed_update(self) -> float:
        """Consume this tick's inputs.

        Returns:
            Achieved rate in [0, 1]. The first update with no recorded
            timestamp only records the time and returns 1.0.
        """
        if not self.backend.available:
            rate, self.status = self.fallback.update_module_resource_inputs(
                self.input_resources,
                self.config.fallback_rate_multiplier,
                self.config.fallback_threshold,
            )
            return rate

        now = self.clock.universal_time()
        if self.last_update == 0.0:
            self.last_update = now
            return 1.0

        elapsed_s = now - self.last_update

        ledger = RequestLedger()
        for resource in self.input_resources:
            ledger.consume(resource.name, resource.rate)

        engine = ThrottledSettlement(ledger, self.backend.oracle, self.config)
        rate = engine.execute(self.module.vessel, self.title, elapsed_s)

        self.last_report = engine.report()
        self.last_update = now
        if rate < 1.0:
            logger.debug("%s running at %.3f over %.2fs", self.title, rate, elapsed_s)
        return rate

    def save(self, snapshot: Snapshot) -> None:
        """Persist the update timestamp into ``snapshot``."""
        set_value(snapshot, LAST_UPDATE_KEY, self.last_update)

    def restore(self, snapshot: Snapshot) -> None:
        """Resume from a timestamp saved by :meth:`save`.

        Missing or corrupt values restart timing from the next update.
        """
        self.last_update = get_float(snapshot, LAST_UPDATE_KEY, 0.0)

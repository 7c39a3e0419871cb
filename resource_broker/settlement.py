"""Throttled settlement of a request ledger against a resource oracle.

Settlement runs in two passes over the ledger:

1. Every consumer asks for ``rate * elapsed_s`` and the oracle reports what is
   actually available. The smallest satisfiable fraction across all consumers
   becomes the throttle factor.
2. Every request is applied. Consumers are scaled by the throttle factor, so
   a shortage of one resource slows down all of them by the same amount
   instead of serving whoever registered first.

Producers are not throttled unless ``SettlementConfig.throttle_production``
is set, in which case they are scaled like consumers.

An engine is created for a single tick and discarded afterwards:

    ledger = RequestLedger().consume("ElectricCharge", 0.2).consume("Water", 0.01)
    factor = ThrottledSettlement(ledger, backend.oracle).execute(vessel, "Greenhouse", 1.5)
"""

import logging
import math
from dataclasses import dataclass
from typing import List, Optional

from resource_broker.config.settlement import MAX_THROTTLE, MIN_THROTTLE, SettlementConfig
from resource_broker.ledger import RequestLedger
from resource_broker.protocols import ResourceOracle, VesselId
from resource_broker.report import FlowData, SettlementReport

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class ResourceFlow:
    """Flow applied to the oracle during pass 2.

    Attributes:
        name: Resource identifier.
        amount: Applied quantity. Positive was consumed, zero or negative produced.
        label: Attribution label handed to the oracle.
    """

    name: str
    amount: float
    label: str


class ThrottledSettlement:
    """Settles one ledger against one oracle.

    Attributes:
        ledger: Requests to settle.
        oracle: Availability query and mutation backend.
        config: Settlement toggles.
        factor: Throttle factor of the last ``execute`` call, None before it.
        flows: Flows applied by the last ``execute`` call.
    """

    def __init__(
        self,
        ledger: RequestLedger,
        oracle: ResourceOracle,
        config: Optional[SettlementConfig] = None,
    ) -> None:
        self.ledger = ledger
        self.oracle = oracle
        self.config = config or SettlementConfig()
        self.factor: Optional[float] = None
        self.flows: List[ResourceFlow] = []
        self._label = ""
        self._elapsed_s = 0.0

    def execute(self, vessel: VesselId, label: str, elapsed_s: float) -> float:
        """Produce and consume every registered request.

        Args:
            vessel: Vessel identity passed through to the oracle.
            label: Attribution for the oracle's bookkeeping (tooltips, logs).
            elapsed_s: Seconds since the previous settlement. Negative values
                are treated as zero.

        Returns:
            Throttle factor in [0, 1]. Values below 1 mean at least one
            consumed resource ran short.
        """
        # Negative intervals settle as zero
        elapsed_s = max(0.0, elapsed_s)

        factor = self._throttle_factor(vessel, elapsed_s)
        self._apply(vessel, label, elapsed_s, factor)

        self.factor = factor
        self._label = label
        self._elapsed_s = elapsed_s
        return factor

    def report(self) -> SettlementReport:
        """Summarize the last ``execute`` call."""
        if self.factor is None:
            raise RuntimeError("execute() must be called before report()")
        return SettlementReport(
            label=self._label,
            elapsed_s=self._elapsed_s,
            factor=self.factor,
            flows=[FlowData(resource=f.name, amount=f.amount, label=f.label) for f in self.flows],
        )

    def _throttle_factor(self, vessel: VesselId, elapsed_s: float) -> float:
        factor = MAX_THROTTLE
        limiting: Optional[str] = None

        for request in self.ledger:
            if request.rate <= 0:
                continue
            requested = request.rate * elapsed_s
            # Also rejects NaN
            if not requested > 0:
                continue

            available = self.oracle.available(vessel, request.name)
            if not math.isfinite(available):
                available = 0.0
            ratio = min(requested, available) / requested
            if ratio < factor:
                factor = ratio
                limiting = request.name

        if not math.isfinite(factor):
            logger.warning("Non-finite throttle factor for vessel %s, pausing consumption", vessel)
            return MIN_THROTTLE

        factor = max(MIN_THROTTLE, min(MAX_THROTTLE, factor))
        if limiting is not None:
            logger.debug("Vessel %s throttled to %.3f by %s", vessel, factor, limiting)
        return factor

    def _apply(self, vessel: VesselId, label: str, elapsed_s: float, factor: float) -> None:
        producer_scale = factor if self.config.throttle_production else 1.0
        self.flows = []

        for request in self.ledger:
            scale = factor if request.rate > 0 else producer_scale
            applied = request.rate * elapsed_s * scale
            if not math.isfinite(applied):
                logger.warning(
                    "Skipping non-finite flow of %s on vessel %s (rate=%r)",
                    request.name,
                    vessel,
                    request.rate,
                )
                applied = 0.0

            if applied > 0:
                self.oracle.consume(vessel, request.name, applied, label)
            else:
                self.oracle.produce(vessel, request.name, abs(applied), label)
            self.flows.append(ResourceFlow(request.name, applied, label))


def settle(
    ledger: RequestLedger,
    oracle: ResourceOracle,
    vessel: VesselId,
    label: str,
    elapsed_s: float,
    config: Optional[SettlementConfig] = None,
) -> float:
    """Settle ``ledger`` once and return the throttle factor."""
    return ThrottledSettlement(ledger, oracle, config).execute(vessel, label, elapsed_s)

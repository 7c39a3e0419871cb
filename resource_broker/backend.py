"""Start-up selection of the resource accounting backend.

The advanced resource subsystem is an optional dependency. It is looked up
exactly once, when the host starts, and the outcome is frozen into a
:class:`ResourceBackend` that gets handed to every consumer:

    >>> backend = probe_backend()
    >>> backend.available
    False
    >>> backend.oracle.available("vessel-1", "ElectricCharge")
    0.0

Consumers branch on ``backend.available`` to choose between the settlement
engine and the host's fallback path. Nothing re-checks for the subsystem on
a per-call basis.
"""

import importlib
import logging
import math
from dataclasses import dataclass, field
from types import ModuleType
from typing import Any, Callable, Optional

from resource_broker.config.backend import BackendConfig
from resource_broker.exceptions import BackendUnavailableError
from resource_broker.protocols import ResourceOracle, VesselId

logger = logging.getLogger(__name__)


class NullResourceOracle:
    """Oracle used when the advanced subsystem is absent.

    Reports zero availability and ignores every mutation.
    """

    def available(self, vessel: VesselId, resource_name: str) -> float:
        return 0.0

    def consume(self, vessel: VesselId, resource_name: str, quantity: float, label: str) -> None:
        return None

    def produce(self, vessel: VesselId, resource_name: str, quantity: float, label: str) -> None:
        return None


class LiveResourceOracle:
    """Oracle bound to the advanced subsystem's entry points.

    Args:
        resource_amount: ``(vessel, name) -> float`` availability query.
        consume_resource: ``(vessel, name, quantity, label)`` consumption call.
        produce_resource: ``(vessel, name, quantity, label)`` production call.
    """

    __slots__ = ("_resource_amount", "_consume_resource", "_produce_resource")

    def __init__(
        self,
        resource_amount: Callable[..., Any],
        consume_resource: Callable[..., Any],
        produce_resource: Callable[..., Any],
    ) -> None:
        self._resource_amount = resource_amount
        self._consume_resource = consume_resource
        self._produce_resource = produce_resource

    def available(self, vessel: VesselId, resource_name: str) -> float:
        try:
            amount = self._resource_amount(vessel, resource_name)
            if amount is None:
                return 0.0
            amount = float(amount)
        except (TypeError, ValueError, LookupError) as e:
            logger.warning(
                "Availability query for %s on vessel %s failed, assuming none: %s",
                resource_name,
                vessel,
                e,
            )
            return 0.0
        # Non-finite readings count as nothing available
        if not math.isfinite(amount):
            return 0.0
        return amount

    def consume(self, vessel: VesselId, resource_name: str, quantity: float, label: str) -> None:
        self._consume_resource(vessel, resource_name, abs(quantity), label)

    def produce(self, vessel: VesselId, resource_name: str, quantity: float, label: str) -> None:
        self._produce_resource(vessel, resource_name, abs(quantity), label)


@dataclass(frozen=True)
class ResourceBackend:
    """Immutable outcome of the start-up probe.

    Attributes:
        available: True when the advanced subsystem was found with all entry points.
        oracle: Live oracle when available, otherwise a :class:`NullResourceOracle`.
        reason: Why the backend is unavailable, None when it is available.
    """

    available: bool
    oracle: ResourceOracle = field(default_factory=NullResourceOracle)
    reason: Optional[str] = None

    @classmethod
    def unavailable(cls, reason: str) -> "ResourceBackend":
        return cls(available=False, oracle=NullResourceOracle(), reason=reason)


def bind_api(api: Any, config: Optional[BackendConfig] = None) -> ResourceBackend:
    """Bind an already-loaded API object (module or instance) to an oracle.

    Returns an unavailable backend when any entry point is missing, which is
    how a partially loaded subsystem shows up.
    """
    config = config or BackendConfig()
    missing = [name for name in config.entry_points if not callable(getattr(api, name, None))]
    if missing:
        reason = f"resource API is missing entry points: {', '.join(missing)}"
        logger.warning("Advanced resource backend disabled: %s", reason)
        return ResourceBackend.unavailable(reason)

    oracle = LiveResourceOracle(
        resource_amount=getattr(api, config.resource_amount),
        consume_resource=getattr(api, config.consume_resource),
        produce_resource=getattr(api, config.produce_resource),
    )
    api_name = api.__name__ if isinstance(api, ModuleType) else type(api).__name__
    logger.info("Advanced resource backend bound to %s", api_name)
    return ResourceBackend(available=True, oracle=oracle)


def _is_missing(api_module: str, missing_name: Optional[str]) -> bool:
    """True when the API module itself (or a parent package) is not installed."""
    if not missing_name:
        return False
    return api_module == missing_name or api_module.startswith(missing_name + ".")


def _import_failed(config: BackendConfig, error: Exception, strict: bool) -> ResourceBackend:
    reason = f"resource API module '{config.api_module}' failed to load: {error!r}"
    logger.warning("Advanced resource backend disabled: %s", reason)
    if strict:
        raise BackendUnavailableError(reason) from error
    return ResourceBackend.unavailable(reason)


def probe_backend(
    config: Optional[BackendConfig] = None,
    *,
    api: Any = None,
    strict: bool = False,
) -> ResourceBackend:
    """Detect the advanced resource subsystem. Call once during start-up.

    Args:
        config: Module path and entry point names to look for.
        api: Pre-located API object; skips the module import when given.
        strict: Raise instead of returning a degraded backend.

    Returns:
        The frozen backend selection.

    Raises:
        BackendUnavailableError: If ``strict`` and the subsystem is absent or
            incomplete.
    """
    config = config or BackendConfig()

    if api is None:
        try:
            api = importlib.import_module(config.api_module)
        except ModuleNotFoundError as e:
            if not _is_missing(config.api_module, e.name):
                return _import_failed(config, e, strict)
            reason = f"resource API module '{config.api_module}' not found: {e}"
            logger.info("Advanced resource backend not present, using fallback consumption")
            if strict:
                raise BackendUnavailableError(reason) from e
            return ResourceBackend.unavailable(reason)
        except Exception as e:
            return _import_failed(config, e, strict)

    backend = bind_api(api, config)
    if strict and not backend.available:
        raise BackendUnavailableError(backend.reason)
    return backend

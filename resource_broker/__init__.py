"""Throttled resource settlement for simulated vessels.

Modules register signed resource rates in a :class:`RequestLedger`; a
:class:`ThrottledSettlement` reconciles them against what the vessel actually
holds and applies every flow scaled by a single throttle factor.
"""

from resource_broker.backend import (
    LiveResourceOracle,
    NullResourceOracle,
    ResourceBackend,
    bind_api,
    probe_backend,
)
from resource_broker.config import BackendConfig, SettlementConfig
from resource_broker.exceptions import (
    BackendUnavailableError,
    ResourceBrokerError,
    ResourceConfigurationError,
)
from resource_broker.handler import InputResource, ResourceHandler
from resource_broker.ledger import RequestLedger, ResourceRequest
from resource_broker.protocols import FallbackConsumer, HostClock, ResourceOracle
from resource_broker.report import FlowData, SettlementReport
from resource_broker.settlement import ResourceFlow, ThrottledSettlement, settle

__all__ = [
    "BackendConfig",
    "BackendUnavailableError",
    "FallbackConsumer",
    "FlowData",
    "HostClock",
    "InputResource",
    "LiveResourceOracle",
    "NullResourceOracle",
    "RequestLedger",
    "ResourceBackend",
    "ResourceBrokerError",
    "ResourceConfigurationError",
    "ResourceFlow",
    "ResourceHandler",
    "ResourceOracle",
    "ResourceRequest",
    "SettlementConfig",
    "SettlementReport",
    "ThrottledSettlement",
    "bind_api",
    "probe_backend",
    "settle",
]

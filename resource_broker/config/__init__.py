"""Configuration package for the resource broker.

Constants live in per-concern modules (``backend``, ``settlement``); the
dataclasses built from them are re-exported here.
"""

from resource_broker.config.backend import BackendConfig
from resource_broker.config.settlement import SettlementConfig

__all__ = ["BackendConfig", "SettlementConfig"]

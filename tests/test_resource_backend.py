"""Tests for start-up backend selection and the oracle adapters."""

import dataclasses
import logging
import math
import sys
import types
from unittest.mock import MagicMock

import pytest

from resource_broker.backend import (
    LiveResourceOracle,
    NullResourceOracle,
    ResourceBackend,
    bind_api,
    probe_backend,
)
from resource_broker.config import BackendConfig
from resource_broker.exceptions import BackendUnavailableError
from resource_broker.ledger import RequestLedger
from resource_broker.protocols import ResourceOracle
from resource_broker.settlement import settle
from tests.fakes.fake_host import FakeResourceApi

MISSING_MODULE = "resource_broker_tests_missing_api"


@pytest.fixture
def api_module(monkeypatch, oracle):
    """Register a fake resource API module that probe_backend can import."""
    module = types.ModuleType("fake_resource_api")
    api = FakeResourceApi(oracle)
    module.resource_amount = api.resource_amount
    module.consume_resource = api.consume_resource
    module.produce_resource = api.produce_resource
    monkeypatch.setitem(sys.modules, "fake_resource_api", module)
    return module


class TestProbe:
    def test_missing_module_selects_null_backend(self):
        backend = probe_backend(BackendConfig(api_module=MISSING_MODULE))

        assert backend.available is False
        assert isinstance(backend.oracle, NullResourceOracle)
        assert MISSING_MODULE in backend.reason

    def test_missing_module_strict_raises(self):
        with pytest.raises(BackendUnavailableError):
            probe_backend(BackendConfig(api_module=MISSING_MODULE), strict=True)

    def test_importable_module_selects_live_backend(self, api_module, oracle, vessel):
        oracle.set_amount(vessel, "ElectricCharge", 42.0)

        backend = probe_backend(BackendConfig(api_module="fake_resource_api"))

        assert backend.available is True
        assert backend.reason is None
        assert isinstance(backend.oracle, LiveResourceOracle)
        assert backend.oracle.available(vessel, "ElectricCharge") == 42.0

    def test_explicit_api_skips_import(self, oracle):
        backend = probe_backend(BackendConfig(api_module=MISSING_MODULE), api=FakeResourceApi(oracle))

        assert backend.available is True

    def test_partially_loaded_api_is_unavailable(self, caplog):
        api = types.SimpleNamespace(resource_amount=lambda vessel, name: 1.0)

        with caplog.at_level(logging.WARNING, logger="resource_broker.backend"):
            backend = bind_api(api)

        assert backend.available is False
        assert "consume_resource" in backend.reason
        assert "produce_resource" in backend.reason
        assert len(caplog.records) == 1

    def test_partially_loaded_api_strict_raises(self):
        api = types.SimpleNamespace(resource_amount=lambda vessel, name: 1.0)

        with pytest.raises(BackendUnavailableError):
            probe_backend(api=api, strict=True)

    def test_custom_entry_point_names(self, oracle):
        api = types.SimpleNamespace(
            ResourceAmount=lambda vessel, name: 3.0,
            ConsumeResource=MagicMock(),
            ProduceResource=MagicMock(),
        )
        config = BackendConfig(
            resource_amount="ResourceAmount",
            consume_resource="ConsumeResource",
            produce_resource="ProduceResource",
        )

        backend = probe_backend(config, api=api)

        assert backend.available is True
        assert backend.oracle.available("v", "Water") == 3.0

    def test_selection_is_immutable(self):
        backend = probe_backend(BackendConfig(api_module=MISSING_MODULE))

        with pytest.raises(dataclasses.FrozenInstanceError):
            backend.available = True

    def test_missing_module_logs_no_warning(self, caplog):
        with caplog.at_level(logging.INFO, logger="resource_broker.backend"):
            probe_backend(BackendConfig(api_module=MISSING_MODULE))

        assert [r.levelno for r in caplog.records] == [logging.INFO]

    def test_module_failing_on_import_is_unavailable(self, tmp_path, monkeypatch, caplog):
        (tmp_path / "half_loaded_resource_api.py").write_text("raise RuntimeError('half loaded')\n")
        monkeypatch.syspath_prepend(str(tmp_path))

        with caplog.at_level(logging.WARNING, logger="resource_broker.backend"):
            backend = probe_backend(BackendConfig(api_module="half_loaded_resource_api"))

        assert backend.available is False
        assert isinstance(backend.oracle, NullResourceOracle)
        assert "half loaded" in backend.reason
        assert len(caplog.records) == 1

    def test_module_with_missing_dependency_is_unavailable(self, tmp_path, monkeypatch, caplog):
        (tmp_path / "needy_resource_api.py").write_text(
            "import resource_broker_tests_absent_dependency\n"
        )
        monkeypatch.syspath_prepend(str(tmp_path))

        with caplog.at_level(logging.WARNING, logger="resource_broker.backend"):
            backend = probe_backend(BackendConfig(api_module="needy_resource_api"))

        assert backend.available is False
        assert "resource_broker_tests_absent_dependency" in backend.reason
        assert len(caplog.records) == 1

    def test_module_failing_on_import_strict_raises(self, tmp_path, monkeypatch):
        (tmp_path / "strict_broken_resource_api.py").write_text("raise RuntimeError('boom')\n")
        monkeypatch.syspath_prepend(str(tmp_path))

        with pytest.raises(BackendUnavailableError):
            probe_backend(BackendConfig(api_module="strict_broken_resource_api"), strict=True)


class TestOracles:
    def test_both_oracles_satisfy_protocol(self, oracle):
        assert isinstance(NullResourceOracle(), ResourceOracle)
        assert isinstance(bind_api(FakeResourceApi(oracle)).oracle, ResourceOracle)

    def test_null_oracle_is_inert(self):
        null = NullResourceOracle()

        assert null.available("v", "ElectricCharge") == 0.0
        assert null.consume("v", "ElectricCharge", 5.0, "x") is None
        assert null.produce("v", "ElectricCharge", 5.0, "x") is None

    def test_unavailable_backend_uses_null_oracle(self):
        backend = ResourceBackend.unavailable("absent")

        assert isinstance(backend.oracle, NullResourceOracle)

    @pytest.mark.parametrize("reading", [None, math.nan, math.inf])
    def test_live_oracle_sanitizes_bad_readings(self, reading):
        live = LiveResourceOracle(lambda vessel, name: reading, MagicMock(), MagicMock())

        assert live.available("v", "Water") == 0.0

    def test_live_oracle_passes_magnitudes(self):
        consume = MagicMock()
        produce = MagicMock()
        live = LiveResourceOracle(lambda vessel, name: 0.0, consume, produce)

        live.consume("v", "Water", -2.0, "Tank")
        live.produce("v", "Oxygen", -1.5, "Tank")

        consume.assert_called_once_with("v", "Water", 2.0, "Tank")
        produce.assert_called_once_with("v", "Oxygen", 1.5, "Tank")

    @pytest.mark.parametrize("reading", ["lots", object()])
    def test_live_oracle_ignores_non_numeric_readings(self, reading):
        live = LiveResourceOracle(lambda vessel, name: reading, MagicMock(), MagicMock())

        assert live.available("v", "Water") == 0.0

    def test_failing_query_counts_as_empty(self, caplog):
        def resource_amount(vessel, name):
            raise KeyError(vessel)

        api = types.SimpleNamespace(
            resource_amount=resource_amount,
            consume_resource=MagicMock(),
            produce_resource=MagicMock(),
        )
        backend = bind_api(api)
        ledger = RequestLedger().consume("ElectricCharge", 1.0)

        with caplog.at_level(logging.WARNING, logger="resource_broker.backend"):
            factor = settle(ledger, backend.oracle, "unknown-vessel", "Antenna", 1.0)

        assert factor == 0.0
        api.consume_resource.assert_not_called()
        assert any("unknown-vessel" in r.getMessage() for r in caplog.records)

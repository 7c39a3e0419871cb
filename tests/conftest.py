"""Pytest configuration and fixtures for resource broker tests."""

import pytest

from resource_broker.backend import ResourceBackend
from tests.fakes.fake_host import (
    FakeClock,
    FakeFallbackConsumer,
    FakePartModule,
    FakeResourceOracle,
)

VESSEL = "vessel-1"


@pytest.fixture
def vessel():
    return VESSEL


@pytest.fixture
def oracle():
    """Provide an empty recording oracle."""
    return FakeResourceOracle()


@pytest.fixture
def clock():
    return FakeClock()


@pytest.fixture
def fallback():
    return FakeFallbackConsumer()


@pytest.fixture
def part_module():
    return FakePartModule(vessel=VESSEL)


@pytest.fixture
def live_backend(oracle):
    """Backend selection as it looks when the advanced subsystem is present."""
    return ResourceBackend(available=True, oracle=oracle)


@pytest.fixture
def absent_backend():
    return ResourceBackend.unavailable("not installed")

"""Shared test fixtures."""

import pytest

from ev_vat_model import project
from view_model import ProjectionViewModel


class FakeClock:
    """Manually advanced stand-in for time.monotonic."""

    def __init__(self, start: float = 100.0) -> None:
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def counting_engine():
    """project() wrapper that records every base price it is called with."""
    calls = []

    def engine(base_price, params):
        calls.append(base_price)
        return project(base_price, params)

    engine.calls = calls
    return engine


@pytest.fixture
def view_model(counting_engine) -> ProjectionViewModel:
    return ProjectionViewModel(base_price=500_000, selected_year=2026,
                               engine=counting_engine)


@pytest.fixture
def events(view_model):
    """List collecting (event, base_price, selected_year) publications."""
    received = []
    view_model.subscribe(
        lambda event, vm: received.append((event, vm.base_price, vm.selected_year)))
    return received

"""Tests for the reactive projection view model."""

import math

import pytest

from ev_vat_model import project
from view_model import (
    CHART_HEADROOM, MAX_PRICE, MIN_PRICE, PRESET_PRICES, PROJECTION_EVENT,
    SELECTION_EVENT, ProjectionViewModel, increase_tier, validate_base_price,
)


class TestValidateBasePrice:
    @pytest.mark.parametrize("value", ["500000", None, [500_000], True])
    def test_rejects_non_numeric(self, value) -> None:
        with pytest.raises(TypeError):
            validate_base_price(value)

    @pytest.mark.parametrize("value", [-1, -500_000.0, math.nan, math.inf, -math.inf])
    def test_rejects_invalid_numbers(self, value) -> None:
        with pytest.raises(ValueError):
            validate_base_price(value)

    def test_in_range_passes_through(self) -> None:
        assert validate_base_price(735_000) == 735_000

    def test_clamps_below_range(self) -> None:
        assert validate_base_price(0) == MIN_PRICE
        assert validate_base_price(150_000) == MIN_PRICE

    def test_clamps_above_range(self) -> None:
        assert validate_base_price(5_000_000) == MAX_PRICE

    def test_snaps_to_step(self) -> None:
        assert validate_base_price(502_499) == 500_000
        assert validate_base_price(502_500) == 505_000
        assert validate_base_price(503_000.7) == 505_000


class TestDefaults:
    def test_uses_settings_defaults(self) -> None:
        vm = ProjectionViewModel()
        assert vm.base_price == 500_000
        assert vm.selected_year == 2026
        assert vm.projection == project(500_000)

    def test_invalid_initial_year(self) -> None:
        with pytest.raises(ValueError):
            ProjectionViewModel(selected_year=2024)


class TestPriceWrites:
    def test_recomputes_synchronously(self, view_model, counting_engine) -> None:
        view_model.set_base_price(300_000)
        assert counting_engine.calls[-1] == 300_000
        assert view_model.projection == project(300_000)
        assert view_model.projection.total_increase == 75_000

    def test_publishes_after_recompute(self, view_model, events) -> None:
        seen = []
        view_model.subscribe(lambda e, vm: seen.append(vm.projection.base_price))
        view_model.set_base_price(1_000_000)
        assert events == [(PROJECTION_EVENT, 1_000_000, 2026)]
        assert seen == [1_000_000]

    def test_returns_stored_price(self, view_model) -> None:
        assert view_model.set_base_price(3_000_000) == MAX_PRICE
        assert view_model.base_price == MAX_PRICE

    def test_invalid_write_keeps_state(self, view_model, events, counting_engine) -> None:
        before = view_model.projection
        calls = len(counting_engine.calls)
        with pytest.raises(ValueError):
            view_model.set_base_price(-10)
        assert view_model.projection is before
        assert len(counting_engine.calls) == calls
        assert events == []

    def test_every_preset_reachable(self, view_model) -> None:
        for mark in PRESET_PRICES:
            view_model.set_base_price(mark)
            assert view_model.base_price == mark
            assert view_model.is_preset_active(mark)

    def test_listener_errors_propagate(self, view_model) -> None:
        def broken(event, vm):
            raise RuntimeError("renderer failed")

        view_model.subscribe(broken)
        with pytest.raises(RuntimeError):
            view_model.set_base_price(600_000)

    def test_unsubscribe(self, view_model) -> None:
        seen = []
        unsubscribe = view_model.subscribe(lambda e, vm: seen.append(e))
        view_model.set_base_price(600_000)
        unsubscribe()
        unsubscribe()
        view_model.set_base_price(700_000)
        assert seen == [PROJECTION_EVENT]


class TestSelection:
    def test_select_does_not_recompute(self, view_model, counting_engine, events) -> None:
        calls = len(counting_engine.calls)
        before = view_model.projection
        view_model.select_year(2028)
        assert len(counting_engine.calls) == calls
        assert view_model.projection is before
        assert events == [(SELECTION_EVENT, 500_000, 2028)]

    def test_unknown_year(self, view_model) -> None:
        with pytest.raises(ValueError):
            view_model.select_year(2029)
        assert view_model.selected_year == 2026


class TestYearCards:
    def test_cards(self, view_model) -> None:
        cards = view_model.year_cards()
        assert [c.year for c in cards] == [2025, 2026, 2027, 2028]
        assert [c.price for c in cards] == [500_000, 550_000, 587_500, 625_000]
        assert [c.active for c in cards] == [False, True, False, False]
        assert [c.tier for c in cards] == ['base', 'medium', 'medium', 'medium']

    @pytest.mark.parametrize("increment,is_base,tier", [
        (0, True, 'base'),
        (0, False, 'low'),
        (29_999, False, 'low'),
        (30_000, False, 'medium'),
        (74_999, False, 'medium'),
        (75_000, False, 'high'),
    ])
    def test_increase_tier(self, increment, is_base, tier) -> None:
        assert increase_tier(increment, is_base) == tier


class TestBarSegments:
    def test_cumulative_union(self, view_model) -> None:
        seg = view_model.bar_segments()
        assert list(seg.index) == [2025, 2026, 2027, 2028]
        assert list(seg.columns) == ['base', 'increment_2026', 'increment_2027', 'increment_2028']
        assert list(seg.loc[2025]) == [500_000, 0, 0, 0]
        assert list(seg.loc[2026]) == [500_000, 50_000, 0, 0]
        assert list(seg.loc[2027]) == [500_000, 50_000, 37_500, 0]
        assert list(seg.loc[2028]) == [500_000, 50_000, 37_500, 37_500]

    def test_bar_totals_match_prices(self, view_model) -> None:
        view_model.set_base_price(1_235_000)
        totals = view_model.bar_segments().sum(axis=1)
        for yp in view_model.projection:
            assert totals[yp.year] == yp.price

    def test_chart_max(self, view_model) -> None:
        assert view_model.chart_max() == pytest.approx(625_000 * CHART_HEADROOM)
        view_model.set_base_price(2_000_000)
        assert view_model.chart_max() == pytest.approx(2_125_000 * CHART_HEADROOM)


class TestDetail:
    def test_base_year(self, view_model) -> None:
        view_model.select_year(2025)
        d = view_model.detail()
        assert d.is_base
        assert d.price == 500_000
        assert d.badge_increment is None
        assert d.total_increase is None
        assert [r.year for r in d.rows] == [2025]

    @pytest.mark.parametrize("year,total,rows", [
        (2026, 50_000, [2025, 2026]),
        (2027, 87_500, [2025, 2026, 2027]),
        (2028, 125_000, [2025, 2026, 2027, 2028]),
    ])
    def test_cumulative_total(self, view_model, year, total, rows) -> None:
        view_model.select_year(year)
        d = view_model.detail()
        assert d.total_increase == total
        assert [r.year for r in d.rows] == rows
        assert d.price == view_model.projection.price(year)

    def test_badge_hidden_for_zero_increase(self, view_model) -> None:
        view_model.set_base_price(300_000)
        d = view_model.detail()
        assert d.badge_increment is None
        assert d.total_increase == 0

    def test_row_labels(self, view_model) -> None:
        view_model.select_year(2028)
        labels = [r.label for r in view_model.detail().rows]
        assert labels == [
            "Base price (2025)",
            "VAT increase 2026 (300k–500k band)",
            "VAT increase 2027 (150k–300k band)",
            "VAT increase 2028 (full VAT)",
        ]


class TestSlider:
    def test_fill(self, view_model) -> None:
        view_model.set_base_price(MIN_PRICE)
        assert view_model.slider_fill() == 0
        view_model.set_base_price(MAX_PRICE)
        assert view_model.slider_fill() == 100
        view_model.set_base_price(1_100_000)
        assert view_model.slider_fill() == pytest.approx(50)

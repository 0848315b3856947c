"""
Projection view model
=====================
Single owner of the input price and the selected year. Every price write
recomputes the projection synchronously and notifies subscribers before
returning; selecting a year only notifies.

Renderers read the derived views below and keep no state of their own
beyond counter animation.
"""

import math
import numbers
from dataclasses import dataclass
from typing import Callable, Optional

import pandas as pd

from ev_vat_model import PHASE_IN, project
from logging_config import setup_logger
from settings import settings

logger = setup_logger(__name__, settings.log_level)

# Slider domain
MIN_PRICE = 200_000
MAX_PRICE = 2_000_000
PRICE_STEP = 5_000
PRESET_PRICES = (200_000, 500_000, 1_000_000, 1_500_000, 2_000_000)

# Chart scaling
CHART_FLOOR = 200_000
CHART_HEADROOM = 1.05

# Card highlight tiers (upper bounds of yearly increase)
TIER_LOW = 30_000
TIER_MEDIUM = 75_000

PROJECTION_EVENT = 'projection'
SELECTION_EVENT = 'selection'


def validate_base_price(value):
    """
    Reject invalid input and bring the rest into the slider domain.

    Non-numeric input raises TypeError; NaN, infinities and negatives
    raise ValueError. Other values are clamped to [MIN_PRICE, MAX_PRICE]
    and snapped to PRICE_STEP.
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Real):
        raise TypeError(f"Base price must be a number, got {type(value).__name__}")
    if math.isnan(value) or math.isinf(value):
        raise ValueError(f"Base price must be finite, got {value}")
    if value < 0:
        raise ValueError(f"Base price must be non-negative, got {value}")

    clamped = min(max(value, MIN_PRICE), MAX_PRICE)
    if clamped != value:
        logger.warning(f"Base price {value} outside [{MIN_PRICE}, {MAX_PRICE}], clamped to {clamped}")

    return math.floor(clamped / PRICE_STEP + 0.5) * PRICE_STEP


def increase_tier(increment, is_base=False):
    if is_base:
        return 'base'
    if increment < TIER_LOW:
        return 'low'
    if increment < TIER_MEDIUM:
        return 'medium'
    return 'high'


@dataclass(frozen=True)
class YearCard:
    year: int
    price: float
    increment: float
    threshold: Optional[float]
    is_base: bool
    active: bool
    tier: str


@dataclass(frozen=True)
class BreakdownRow:
    year: int
    label: str
    amount: float


@dataclass(frozen=True)
class YearDetail:
    """What the detail panel shows for the selected year."""
    year: int
    price: float
    is_base: bool
    badge_increment: Optional[float]
    rows: tuple
    total_increase: Optional[float]


class ProjectionViewModel:
    """Holds base price and selection, republishes the projection on change."""

    def __init__(self, base_price=None, selected_year=None, params=PHASE_IN,
                 engine: Callable = project):
        self._params = params
        self._engine = engine
        self._listeners = []
        self._base_price = validate_base_price(
            settings.default_base_price if base_price is None else base_price)
        self._selected_year = self._check_year(
            settings.default_year if selected_year is None else selected_year)
        self._projection = self._engine(self._base_price, self._params)

    # ── state ───────────────────────────────────────────────

    @property
    def base_price(self):
        return self._base_price

    @property
    def selected_year(self):
        return self._selected_year

    @property
    def projection(self):
        return self._projection

    @property
    def years(self):
        return self._params.years

    def _check_year(self, year):
        if year not in self._params.years:
            raise ValueError(f"Unknown year: {year}. Options: {list(self._params.years)}")
        return year

    def set_base_price(self, value):
        """Validate, recompute and publish. Returns the stored price."""
        price = validate_base_price(value)
        self._base_price = price
        self._projection = self._engine(price, self._params)
        logger.debug(f"Recomputed projection for {price}: total +{self._projection.total_increase:.0f}")
        self._publish(PROJECTION_EVENT)
        return price

    def select_year(self, year):
        self._selected_year = self._check_year(year)
        self._publish(SELECTION_EVENT)

    def subscribe(self, listener):
        """Register listener(event, view_model); returns an unsubscribe callable."""
        self._listeners.append(listener)

        def unsubscribe():
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _publish(self, event):
        for listener in list(self._listeners):
            listener(event, self)

    # ── derived views ───────────────────────────────────────

    def year_cards(self):
        return [
            YearCard(
                year=yp.year, price=yp.price, increment=yp.increment,
                threshold=yp.threshold, is_base=yp.is_base,
                active=yp.year == self._selected_year,
                tier=increase_tier(yp.increment, yp.is_base),
            )
            for yp in self._projection
        ]

    def bar_segments(self):
        """
        Stacked segments per year. Each row carries every increment realised
        up to and including that year; later years are zero.
        """
        proj = self._projection
        later_years = [yp.year for yp in proj if not yp.is_base]
        rows = []
        for yp in proj:
            row = {'year': yp.year, 'base': proj.base_price}
            for y in later_years:
                row[f'increment_{y}'] = proj.increment(y) if y <= yp.year else 0.0
            rows.append(row)
        return pd.DataFrame(rows).set_index('year')

    def chart_max(self):
        """Shared axis maximum for all bars."""
        tallest = self.bar_segments().sum(axis=1).max()
        return max(tallest, CHART_FLOOR) * CHART_HEADROOM

    def detail(self):
        proj = self._projection
        current = proj.for_year(self._selected_year)

        rows = [BreakdownRow(proj.years[0].year, f"Base price ({proj.years[0].year})",
                             proj.base_price)]
        prev_ceiling = self._params.ceilings[0]
        for yp in proj:
            if yp.is_base:
                continue
            if yp.year <= self._selected_year:
                rows.append(BreakdownRow(yp.year, _increase_label(yp, prev_ceiling), yp.increment))
            prev_ceiling = yp.threshold or 0

        badge = None if current.is_base or current.increment <= 0 else current.increment
        total = None if current.is_base else proj.cumulative_increase(self._selected_year)

        return YearDetail(
            year=current.year, price=current.price, is_base=current.is_base,
            badge_increment=badge, rows=tuple(rows), total_increase=total,
        )

    def slider_fill(self):
        """Slider position of the current price, in percent."""
        return (self._base_price - MIN_PRICE) / (MAX_PRICE - MIN_PRICE) * 100

    def is_preset_active(self, mark):
        return self._base_price == mark


def _increase_label(yp, upper):
    if yp.threshold is None:
        return f"VAT increase {yp.year} (full VAT)"
    return f"VAT increase {yp.year} ({yp.threshold / 1000:.0f}k–{upper / 1000:.0f}k band)"

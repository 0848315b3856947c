#!/usr/bin/env python3
"""
EV VAT Phase-In Model
=====================
Projects the price of an electric vehicle as the VAT (MVA) exemption for
EVs is phased out between 2025 and 2028.

Schedule:
  2025: exempt up to 500,000 kr, 25% on the part above
  2026: ceiling lowered to 300,000 kr
  2027: ceiling lowered to 150,000 kr
  2028: full 25% VAT on the whole purchase price

Each year adds VAT only on the band of the 2025 base price that the lower
ceiling newly exposes. Bands are measured against the base price, never the
running price, so increments never compound.

Run directly for validation and examples:
    python ev_vat_model.py
"""

import math
from dataclasses import dataclass, field
from decimal import Decimal, ROUND_HALF_UP
from typing import Optional

import numpy as np
import pandas as pd

# ============================================================
# TAX PARAMETERS
# ============================================================

YEARS = (2025, 2026, 2027, 2028)


@dataclass(frozen=True)
class PhaseInParams:
    """VAT rate and the exemption ceiling in force each year."""
    rate: float = 0.25
    # Ceiling per year, in YEARS order. 0 = no exemption left
    ceilings: tuple = (500_000.0, 300_000.0, 150_000.0, 0.0)
    years: tuple = field(default=YEARS)

    def bands(self):
        """(year, upper, lower) for each year after the base year."""
        return [
            (self.years[i], self.ceilings[i - 1], self.ceilings[i])
            for i in range(1, len(self.years))
        ]


PHASE_IN = PhaseInParams()


# ============================================================
# PROJECTION RECORDS
# ============================================================

@dataclass(frozen=True)
class YearProjection:
    """Price of the vehicle in one fiscal year."""
    year: int
    price: float
    increment: float
    threshold: Optional[float]
    is_base: bool = False


@dataclass(frozen=True)
class ProjectionSet:
    """All yearly projections derived from one base price."""
    base_price: float
    years: tuple
    total_increase: float

    def __iter__(self):
        return iter(self.years)

    def __len__(self):
        return len(self.years)

    def for_year(self, year):
        for yp in self.years:
            if yp.year == year:
                return yp
        raise KeyError(f"No projection for {year}. Options: {[y.year for y in self.years]}")

    def price(self, year):
        return self.for_year(year).price

    def increment(self, year):
        return self.for_year(year).increment

    def cumulative_increase(self, year):
        """Sum of increments for every year up to and including `year`."""
        self.for_year(year)
        return sum(yp.increment for yp in self.years if yp.year <= year)

    @property
    def final_price(self):
        return self.years[-1].price


# ============================================================
# PROJECTION ENGINE
# ============================================================

def _band_increment(base_price, upper, lower, rate):
    """VAT on the part of base_price that falls between lower and upper."""
    return rate * max(0.0, min(base_price, upper) - lower)


def project(base_price, params=PHASE_IN):
    """
    Project yearly prices for a 2025 base price.

    Pure and total for any non-negative base_price; input validation is
    the caller's job.

    Returns: ProjectionSet with one YearProjection per year
    """
    records = [YearProjection(
        year=params.years[0], price=base_price, increment=0.0,
        threshold=None, is_base=True,
    )]
    price = base_price
    total = 0.0

    for year, upper, lower in params.bands():
        inc = _band_increment(base_price, upper, lower, params.rate)
        price = price + inc
        total = total + inc
        records.append(YearProjection(
            year=year, price=price, increment=inc,
            threshold=lower if lower > 0 else None,
        ))

    return ProjectionSet(base_price=base_price, years=tuple(records),
                         total_increase=total)


def project_prices(base_prices, params=PHASE_IN):
    """
    Vectorised projection over many base prices.

    Returns: DataFrame indexed by base price with price_<year>,
    increment_<year> and total_increase columns
    """
    base = np.asarray(base_prices, dtype=float)
    cols = {f'price_{params.years[0]}': base}
    price = base.copy()
    total = np.zeros_like(base)

    for year, upper, lower in params.bands():
        inc = np.maximum(np.minimum(base, upper) - lower, 0.0) * params.rate
        price = price + inc
        total = total + inc
        cols[f'increment_{year}'] = inc
        cols[f'price_{year}'] = price

    cols['total_increase'] = total
    df = pd.DataFrame(cols, index=pd.Index(base, name='base_price'))
    ordered = [f'price_{y}' for y in params.years]
    ordered += [f'increment_{y}' for y, _, _ in params.bands()]
    return df[ordered + ['total_increase']]


def max_increments(params=PHASE_IN):
    """Largest possible increment per year (band width x rate)."""
    return {year: params.rate * (upper - lower)
            for year, upper, lower in params.bands()}


def schedule_table(params=PHASE_IN):
    """One row per year: ceiling, taxed band and maximum increment."""
    caps = max_increments(params)
    rows = [{
        'Year': params.years[0],
        'Ceiling': format_nok(params.ceilings[0]),
        'Newly taxed band': '—',
        'Max increase': '—',
    }]
    for year, upper, lower in params.bands():
        rows.append({
            'Year': year,
            'Ceiling': format_nok(lower) if lower > 0 else 'None',
            'Newly taxed band': f"{format_short(lower)}–{format_short(upper)}",
            'Max increase': format_nok(caps[year]),
        })
    return pd.DataFrame(rows)


def describe_schedule(params=PHASE_IN):
    """Plain-language rule for each year."""
    pct = f"{params.rate * 100:g}%"
    lines = [f"{params.years[0]}: VAT-free up to {format_nok(params.ceilings[0])}, "
             f"{pct} VAT above"]
    for year, _, lower in params.bands():
        if lower > 0:
            lines.append(f"{year}: ceiling lowered to {format_nok(lower)}")
        else:
            lines.append(f"{year}: full VAT ({pct}) on the whole purchase price")
    return lines


# ============================================================
# FORMATTING (nb-NO)
# ============================================================

NBSP = "\u00a0"


def _round_half_up(n, places=0):
    q = Decimal(1).scaleb(-places)
    return Decimal(str(n)).quantize(q, rounding=ROUND_HALF_UP)


def format_number(n):
    """Whole number with nb-NO digit grouping, e.g. 500 000."""
    rounded = int(_round_half_up(n))
    return f"{rounded:,}".replace(",", NBSP).replace("-", "−")


def format_nok(n):
    return f"{format_number(n)}{NBSP}kr"


def format_short(n):
    """Compact magnitude: 1.5M, 2M, 500k."""
    if n >= 1_000_000:
        text = f"{_round_half_up(n / 1_000_000, 2):.2f}"
        text = text.rstrip('0').rstrip('.')
        return f"{text}M"
    return f"{_round_half_up(n / 1000):.0f}k"


# ============================================================
# VALIDATION
# ============================================================

# (base_price, inc2026, inc2027, inc2028, total, price2028)
REFERENCE_SCENARIOS = [
    (0,           0,      0,      0,       0,         0),
    (100_000,     0,      0, 25_000,  25_000,   125_000),
    (150_000,     0,      0, 37_500,  37_500,   187_500),
    (300_000,     0, 37_500, 37_500,  75_000,   375_000),
    (500_000, 50_000, 37_500, 37_500, 125_000,  625_000),
    (2_000_000, 50_000, 37_500, 37_500, 125_000, 2_125_000),
]


def print_result(result):
    """Pretty-print a projection."""
    print()
    print("=" * 72)
    print(f"  Base price {format_nok(result.base_price)}")
    print("=" * 72)
    print(f"  {'YEAR':<8} {'THRESHOLD':>16} {'INCREASE':>16} {'PRICE':>18}")
    print("-" * 72)
    for yp in result:
        threshold = format_nok(yp.threshold) if yp.threshold is not None else "—"
        inc = "—" if yp.is_base else f"+{format_nok(yp.increment)}"
        print(f"  {yp.year:<8} {threshold:>16} {inc:>16} {format_nok(yp.price):>18}")
    print("-" * 72)
    print(f"  {'TOTAL INCREASE':<42} {format_nok(result.total_increase):>26}")
    print("=" * 72)


def validate():
    """Check the engine against hand-computed reference scenarios."""
    print("\n" + "=" * 72)
    print("  VALIDATION: Reference scenarios")
    print("=" * 72)
    print(f"  {'Base':>10} {'2026':>9} {'2027':>9} {'2028':>9} {'Total':>9} {'2028 price':>12}  OK")
    print("-" * 72)

    all_ok = True
    for base, i26, i27, i28, total, p28 in REFERENCE_SCENARIOS:
        r = project(base)
        got = (r.increment(2026), r.increment(2027), r.increment(2028),
               r.total_increase, r.final_price)
        ok = all(math.isclose(a, b) for a, b in zip(got, (i26, i27, i28, total, p28)))
        all_ok = all_ok and ok
        print(f"  {base:>10,} {got[0]:>9,.0f} {got[1]:>9,.0f} {got[2]:>9,.0f}"
              f" {got[3]:>9,.0f} {got[4]:>12,.0f}  {'✓' if ok else '✗'}")

    print()
    return all_ok


# ============================================================
# MAIN
# ============================================================

if __name__ == '__main__':
    validate()

    for price in (300_000, 500_000, 1_000_000):
        print_result(project(price))

    # ----------------------------------------------------------
    # Price sensitivity across the slider range
    # ----------------------------------------------------------
    print("\n" + "=" * 72)
    print("  2028 PRICE BY 2025 PRICE")
    print("=" * 72)
    grid = project_prices(np.arange(200_000, 2_000_001, 200_000))
    print(grid[['price_2028', 'total_increase']].to_string(
        float_format=lambda v: f"{v:,.0f}"))
    print()

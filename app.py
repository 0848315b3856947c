#!/usr/bin/env python3
"""
EV VAT Calculator — Interactive Interface
=========================================
Streamlit app wrapping the ev_vat_model engine through the projection
view model.

Run with:
    streamlit run app.py
"""

import time

import numpy as np
import pandas as pd
import plotly.graph_objects as go
import streamlit as st

from animation import AnimatedNumber
from ev_vat_model import (
    PHASE_IN, describe_schedule, format_nok, format_number, format_short,
    project_prices, schedule_table,
)
from logging_config import setup_logger
from settings import settings
from view_model import (
    MAX_PRICE, MIN_PRICE, PRESET_PRICES, PRICE_STEP, ProjectionViewModel,
)

logger = setup_logger(__name__, settings.log_level)

TIER_MARKDOWN = {'low': 'green', 'medium': 'orange', 'high': 'red'}
SEGMENT_COLORS = {
    'base': '#1e5a80',
    'increment_2026': '#00e5b4',
    'increment_2027': '#f7a600',
    'increment_2028': '#ff5e78',
}
SEGMENT_LABELS = {
    'base': 'Base price',
    'increment_2026': '+VAT 2026',
    'increment_2027': '+VAT 2027',
    'increment_2028': '+VAT 2028',
}

# ── Page config ──────────────────────────────────────────────

st.set_page_config(
    page_title="EV VAT Calculator",
    page_icon="⚡",
    layout="centered",
)

# ── Session state ────────────────────────────────────────────

if 'view_model' not in st.session_state:
    st.session_state.view_model = ProjectionViewModel()
    st.session_state.price_slider = st.session_state.view_model.base_price
    st.session_state.counters = {}
    logger.info(f"New session, base price {st.session_state.view_model.base_price}")

vm = st.session_state.view_model


def on_slider_change():
    st.session_state.price_slider = vm.set_base_price(st.session_state.price_slider)


def on_preset(mark):
    st.session_state.price_slider = vm.set_base_price(mark)


def counter(name, value):
    """Per-field AnimatedNumber, retargeted to value."""
    counters = st.session_state.counters
    if name not in counters:
        counters[name] = AnimatedNumber(value, duration=settings.animation_duration)
    else:
        counters[name].set_target(value)
    return counters[name]


# ── Sidebar: schedule ────────────────────────────────────────

with st.sidebar:
    st.markdown("## VAT Phase-In Schedule")
    st.dataframe(schedule_table(PHASE_IN), hide_index=True, use_container_width=True)

    st.markdown("**Rule changes**")
    for line in describe_schedule(PHASE_IN):
        st.markdown(f"- {line}")

    st.divider()
    st.caption("VAT rate 25%. Each year taxes only the band of the 2025 price "
               "newly exposed by the lower ceiling.")


# ── Header ───────────────────────────────────────────────────

st.title("VAT on Electric Vehicles")
st.markdown("Price increase from 2026 to 2028 as the EV VAT exemption is phased out.")

# ── Price input ──────────────────────────────────────────────

price_col, value_col = st.columns([3, 1])
with price_col:
    st.slider("Price in 2025 (kr)", MIN_PRICE, MAX_PRICE, step=PRICE_STEP,
              key="price_slider", on_change=on_slider_change,
              format="%d")
with value_col:
    price_slot = st.empty()

mark_cols = st.columns(len(PRESET_PRICES))
for col, mark in zip(mark_cols, PRESET_PRICES):
    with col:
        st.button(format_short(mark), key=f"preset_{mark}",
                  on_click=on_preset, args=(mark,),
                  type="primary" if vm.is_preset_active(mark) else "secondary",
                  use_container_width=True)

# ── Year cards ───────────────────────────────────────────────

card_cols = st.columns(len(vm.years))
for col, card in zip(card_cols, vm.year_cards()):
    with col:
        st.button(str(card.year), key=f"year_{card.year}",
                  on_click=vm.select_year, args=(card.year,),
                  type="primary" if card.active else "secondary",
                  use_container_width=True)
        if card.is_base:
            caption = "Current price"
        elif card.threshold is None:
            caption = "Full VAT"
        else:
            caption = f"Ceiling: {format_short(card.threshold)} kr"
        st.caption(caption)
        st.markdown(f"**{format_short(card.price)} kr**")
        if not card.is_base:
            if card.increment > 0:
                st.markdown(f":{TIER_MARKDOWN[card.tier]}[+{format_short(card.increment)} kr]")
            else:
                st.caption("No increase")

# ── Selected year detail ─────────────────────────────────────

st.divider()
detail = vm.detail()

head_col, badge_col = st.columns([3, 1])
with head_col:
    st.subheader(f"Price overview {detail.year}")
with badge_col:
    if detail.is_base:
        st.markdown(":blue[Starting price]")
    elif detail.badge_increment is not None:
        st.markdown(f":red[+{format_nok(detail.badge_increment)}]")

st.caption("New price")
detail_slot = st.empty()

breakdown = pd.DataFrame([
    {'Item': row.label,
     'Amount': (format_nok(row.amount) if row.year == detail.rows[0].year
                else f"+{format_nok(row.amount)}" if row.amount > 0 else "—")}
    for row in detail.rows
])
st.dataframe(breakdown, hide_index=True, use_container_width=True)

if detail.total_increase is not None:
    tot = detail.total_increase
    st.markdown(f"**Total increase from {vm.years[0]}:** "
                f"{f'+{format_nok(tot)}' if tot > 0 else 'No increase'}")

# ── Stacked bar chart ────────────────────────────────────────

st.divider()
st.subheader("Price by year")

segments = vm.bar_segments()
fig = go.Figure()
for col_name in segments.columns:
    fig.add_trace(go.Bar(
        y=[str(y) for y in segments.index],
        x=segments[col_name],
        name=SEGMENT_LABELS.get(col_name, col_name),
        orientation='h',
        marker_color=SEGMENT_COLORS.get(col_name),
        hovertemplate='%{x:,.0f} kr<extra>%{fullData.name}</extra>',
    ))
fig.update_layout(
    barmode='stack',
    height=320,
    margin=dict(l=10, r=10, t=10, b=10),
    xaxis=dict(range=[0, vm.chart_max()], title=None),
    yaxis=dict(autorange='reversed'),
    legend=dict(orientation='h', y=-0.2),
)
st.plotly_chart(fig, use_container_width=True)

totals = segments.sum(axis=1)
st.caption("  ·  ".join(f"{y}: {format_short(v)} kr" for y, v in totals.items()))

# ── Total increase summary ───────────────────────────────────

st.divider()
st.subheader(f"Total price increase {vm.years[0]} → {vm.years[-1]}")

summary = [(f"Increase {yp.year}", f"inc_{yp.year}", yp.increment)
           for yp in vm.projection if not yp.is_base]
summary.append(("Total increase", "total", vm.projection.total_increase))

sum_cols = st.columns(2)
summary_slots = []
for i, (label, key, val) in enumerate(summary):
    with sum_cols[i % 2]:
        st.caption(label)
        summary_slots.append((st.empty(), key, val))

# ── 2028 price across the slider range ───────────────────────

st.divider()
st.subheader(f"{vm.years[-1]} price by {vm.years[0]} price")
grid = project_prices(np.arange(MIN_PRICE, MAX_PRICE + 1, 50_000))
curve = grid[[f'price_{vm.years[0]}', f'price_{vm.years[-1]}']].copy()
curve.columns = [str(vm.years[0]), str(vm.years[-1])]
st.line_chart(curve)

# ── Animated counters ────────────────────────────────────────

fields = [
    (price_slot, counter('price', vm.base_price), lambda v: f"### {format_number(v)} kr"),
    (detail_slot, counter('detail_price', detail.price), lambda v: f"## {format_number(v)} NOK"),
]
for slot, key, val in summary_slots:
    if val > 0:
        fields.append((slot, counter(key, val), lambda v: f"**+{format_number(v)} kr**"))
    else:
        counter(key, val)
        slot.markdown("—")


def render(now=None):
    for slot, number, fmt in fields:
        slot.markdown(fmt(number.display(now)))


render()
while any(number.is_animating() for _, number, _ in fields):
    time.sleep(settings.frame_interval)
    render()

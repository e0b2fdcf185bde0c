import pandas as pd
import streamlit as st
from contextlib import contextmanager
from typing import Dict, List, Optional

from market_core.catalog import TREND_METRIC_KEYS, metric_label
from market_core.data import DataLoadError, clear_cache, load_dataset
from market_core.metrics_comparison import compute_comparison
from market_core.metrics_snapshot import NO_DATA_MESSAGE, compute_snapshot, snapshot_table
from market_core.metrics_trend import compute_trend
from market_core.selection import (
    EVENT_TYPES,
    WHOLE_CITY,
    WHOLE_CITY_LABEL,
    DatasetLoaded,
    Selection,
    reduce_selection,
    selection_options,
)
from market_core.settings import configure_logging, load_settings

settings = load_settings()
configure_logging(settings)


# ---------- UI / layout helpers ----------
def inject_base_styles():
    if st.session_state.get("_base_css_injected"):
        return
    st.markdown(
        """
        <style>
        .app-top-bar {padding: 6px 0 4px;border-bottom: 1px solid #e5e7eb;margin-bottom: 10px;}
        .app-top-bar .breadcrumb {color: #6b7280;font-size: 0.9rem;margin-bottom: 2px;}
        .app-top-bar .page-title {font-size: 1.4rem;font-weight: 700;color: #111827;}
        .card {border: 1px solid #e5e7eb;border-radius: 12px;padding: 16px;background: #ffffff;
               box-shadow: 0 1px 2px rgba(0,0,0,0.04); margin-bottom: 12px;}
        .card-header {display: flex;justify-content: space-between;align-items: center;margin-bottom: 8px;}
        .card-title {font-weight: 600;font-size: 1.0rem;color: #003366;}
        .chip-row {display: flex;flex-wrap: wrap;gap: 6px;margin-top: 6px;}
        .chip {background: #f3f4f6;border: 1px solid #e5e7eb;border-radius: 14px;padding: 4px 10px;font-size: 0.85rem;color: #374151;}
        </style>
        """,
        unsafe_allow_html=True,
    )
    st.session_state["_base_css_injected"] = True


@contextmanager
def card(title: str):
    container = st.container()
    container.markdown(
        f"""
        <div class="card">
          <div class="card-header">
            <div class="card-title">{title}</div>
          </div>
        """,
        unsafe_allow_html=True,
    )
    body = container.container()
    with body:
        yield body
    container.markdown("</div>", unsafe_allow_html=True)


def format_selection_summary(sel: Selection) -> str:
    chips = [
        f"Country: {sel.country or '–'}",
        f"City: {sel.city or '–'}",
        f"Period: {sel.period or '–'}",
        f"Submarket: {sel.submarket or WHOLE_CITY_LABEL}",
    ]
    return "".join([f"<span class='chip'>{txt}</span>" for txt in chips])


def render_page_header(title: str, breadcrumb: str, summary_html: str, export_df: Optional[pd.DataFrame] = None, export_name: str = "export.csv"):
    top = st.container()
    c1, c2 = top.columns([8, 2])
    with c1:
        st.markdown(
            f"<div class='app-top-bar'><div class='breadcrumb'>{breadcrumb}</div><div class='page-title'>{title}</div></div>",
            unsafe_allow_html=True,
        )
    with c2:
        if export_df is not None and not export_df.empty:
            st.download_button(
                "Export CSV",
                data=export_df.to_csv(index=False).encode("utf-8"),
                file_name=export_name,
                mime="text/csv",
            )
    st.markdown(f"<div class='chip-row'>{summary_html}</div>", unsafe_allow_html=True)


# ---------- Selection state ----------
def _sync_widgets(prefix: str, sel: Selection) -> None:
    st.session_state[f"{prefix}_country"] = sel.country
    st.session_state[f"{prefix}_city"] = sel.city
    st.session_state[f"{prefix}_period"] = sel.period
    st.session_state[f"{prefix}_submarket"] = sel.submarket


def _dispatch(prefix: str, kind: str) -> None:
    state: Selection = st.session_state[f"{prefix}_selection"]
    event = EVENT_TYPES[kind](st.session_state[f"{prefix}_{kind}"])
    st.session_state[f"{prefix}_selection"] = reduce_selection(dataset, state, event)


def selection_state(prefix: str) -> Selection:
    state = st.session_state.get(f"{prefix}_selection", Selection())
    state = reduce_selection(dataset, state, DatasetLoaded())
    st.session_state[f"{prefix}_selection"] = state
    _sync_widgets(prefix, state)
    return state


def render_selectors(prefix: str, sel: Selection, *, show_period: bool = True, columns: int = 4) -> None:
    options = selection_options(dataset, sel)
    cols = st.columns(columns)
    cols[0].selectbox("Country", options.countries, key=f"{prefix}_country", on_change=_dispatch, args=(prefix, "country"))
    if options.cities:
        cols[1].selectbox("City", options.cities, key=f"{prefix}_city", on_change=_dispatch, args=(prefix, "city"))
    else:
        cols[1].caption("No cities for this country.")
    idx = 2
    if show_period:
        if options.periods:
            cols[idx].selectbox("Period", options.periods, key=f"{prefix}_period", on_change=_dispatch, args=(prefix, "period"))
        elif options.cities:
            cols[idx].caption("No periods for this city.")
        idx += 1
    if options.submarkets:
        cols[idx].selectbox(
            "Submarket",
            [WHOLE_CITY] + options.submarkets,
            key=f"{prefix}_submarket",
            format_func=lambda v: v or WHOLE_CITY_LABEL,
            on_change=_dispatch,
            args=(prefix, "submarket"),
        )


def render_rows(rows: List[Dict[str, object]], empty_message: str) -> None:
    if not rows:
        st.caption(empty_message)
        return
    st.dataframe(snapshot_table(rows), hide_index=True, use_container_width=True)
    ambiguous = [r["label"] for r in rows if r.get("ambiguous")]
    if ambiguous:
        st.caption("Values near 1 may be fractions or whole percentages: " + ", ".join(ambiguous))


# ---------- UI setup ----------
st.set_page_config(page_title="CEE Office Market Explorer", layout="wide")
inject_base_styles()

with st.sidebar:
    st.markdown("### Data")
    st.caption(f"Source: {settings.data_source}")
    if st.button("Reload data"):
        clear_cache()

try:
    dataset = load_dataset(settings.data_source, timeout=settings.request_timeout)
except DataLoadError as exc:
    st.error(f"Error loading data: {exc}")
    st.stop()

if dataset.is_empty():
    st.warning("The market data file contains no countries.")
    st.stop()

selection = selection_state("main")
snapshot = compute_snapshot(dataset, selection)

render_page_header(
    snapshot["title"],
    "Office Market / " + snapshot["subtitle"],
    format_selection_summary(selection),
    export_df=snapshot_table(snapshot["metrics"]),
    export_name="market_metrics.csv",
)

with card("Selection"):
    render_selectors("main", selection)

if not snapshot["has_data"]:
    st.info(NO_DATA_MESSAGE)
else:
    left, right = st.columns(2)
    with left:
        with card("📊 Market Metrics"):
            render_rows(snapshot["metrics"], "No market metrics recorded.")
    with right:
        with card("📝 Leasing Conditions"):
            render_rows(snapshot["leasing"], "No leasing conditions recorded.")

metric_keys = TREND_METRIC_KEYS
default_metric = settings.default_metric if settings.default_metric in metric_keys else metric_keys[0]

with card("📈 Historical Trend"):
    trend_metric = st.selectbox(
        "Metric",
        metric_keys,
        index=metric_keys.index(default_metric),
        format_func=metric_label,
        key="trend_metric",
    )
    trend = compute_trend(dataset, selection, trend_metric)
    if not trend["series"]:
        st.info("No data for this metric.")
    else:
        st.vega_lite_chart(trend["charts"]["trend"], use_container_width=True)

with card("Market Comparison"):
    comp_selection = selection_state("cmp")
    render_selectors("cmp", comp_selection, show_period=False, columns=3)
    comp_metric = st.selectbox(
        "Comparison metric",
        metric_keys,
        index=metric_keys.index(default_metric),
        format_func=metric_label,
        key="cmp_metric",
    )
    comparison = compute_comparison(dataset, selection, comp_selection, comp_metric)
    if not comparison["rows"]:
        st.info("No data for this metric.")
    else:
        st.vega_lite_chart(comparison["charts"]["comparison"], use_container_width=True)

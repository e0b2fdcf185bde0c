from __future__ import annotations

from typing import Any, Dict

import altair as alt
import pandas as pd

from market_core.catalog import METRICS_BY_KEY, metric_label

alt.data_transformers.disable_max_rows()

BASE_COLOR = "#003366"
COMPARISON_COLOR = "#7fb3ff"
COMPARISON_LINE_COLOR = "#e67e22"


def to_vega_spec(chart: alt.Chart) -> Dict[str, Any]:
    """Convert an Altair chart into a Vega-Lite spec dict (JSON-serializable)."""
    return chart.to_dict()


def value_format(metric: str) -> str:
    kind = METRICS_BY_KEY[metric].kind if metric in METRICS_BY_KEY else "count"
    if kind == "money":
        return ",.2f"
    if kind == "percent":
        return ".2f"
    return ",.0f"


def trend_chart(frame: pd.DataFrame, metric: str, *, height: int = 260) -> alt.LayerChart:
    """Bars with a faint dashed line and value labels, one bar per period."""
    fmt = value_format(metric)
    title = metric_label(metric)
    periods = frame["period"].tolist() if not frame.empty else []
    base = alt.Chart(frame).encode(
        x=alt.X("period:N", title="Period", sort=periods, axis=alt.Axis(labelAngle=0)),
    )
    bars = base.mark_bar(color=BASE_COLOR, cornerRadiusTopLeft=4, cornerRadiusTopRight=4).encode(
        y=alt.Y("value:Q", title=title),
        tooltip=[alt.Tooltip("period:N", title="Period"), alt.Tooltip("value:Q", title=title, format=fmt)],
    )
    line = base.mark_line(color="#999999", strokeDash=[4, 4], point=alt.OverlayMarkDef(color="#666666")).encode(
        y="value:Q"
    )
    labels = base.mark_text(dy=-8, color=BASE_COLOR, fontSize=12).encode(
        y="value:Q",
        text=alt.Text("value:Q", format=fmt),
    )
    return alt.layer(bars, line, labels).properties(height=height)


def comparison_chart(frame: pd.DataFrame, metric: str, base_name: str, comparison_name: str, *, height: int = 300) -> alt.LayerChart:
    """Grouped bars plus lines for a base and a comparison series per period."""
    fmt = value_format(metric)
    title = metric_label(metric)
    periods = frame["period"].tolist() if not frame.empty else []
    long_df = frame.melt(id_vars="period", value_vars=["base", "comparison"], var_name="series", value_name="value")
    long_df = long_df.dropna(subset=["value"])
    long_df["series"] = long_df["series"].map({"base": base_name, "comparison": comparison_name})
    color = alt.Color(
        "series:N",
        title="Market",
        scale=alt.Scale(domain=[base_name, comparison_name], range=[BASE_COLOR, COMPARISON_COLOR]),
    )
    base = alt.Chart(long_df).encode(
        x=alt.X("period:N", title="Period", sort=periods, axis=alt.Axis(labelAngle=0)),
    )
    bars = base.mark_bar().encode(
        xOffset="series:N",
        y=alt.Y("value:Q", title=title),
        color=color,
        tooltip=[
            alt.Tooltip("period:N", title="Period"),
            alt.Tooltip("series:N", title="Market"),
            alt.Tooltip("value:Q", title=title, format=fmt),
        ],
    )
    lines = base.mark_line().encode(
        y="value:Q",
        color=alt.Color(
            "series:N",
            scale=alt.Scale(domain=[base_name, comparison_name], range=[BASE_COLOR, COMPARISON_LINE_COLOR]),
            legend=None,
        ),
    )
    return alt.layer(bars, lines).resolve_scale(color="independent").properties(height=height)

from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

import pandas as pd

from market_core.catalog import DEFAULT_TREND_METRIC, METRICS_BY_KEY, metric_label
from market_core.charts import comparison_chart, to_vega_spec
from market_core.model import Dataset
from market_core.selection import Selection
from market_core.trend import build_comparison_frame, build_trend_series


def series_name(selection: Selection) -> str:
    name = selection.city or selection.country or "Market"
    if selection.submarket:
        name += f" — {selection.submarket}"
    return name


def compute_comparison(
    dataset: Optional[Dataset],
    base: Selection,
    comparison: Selection,
    metric: str = DEFAULT_TREND_METRIC,
) -> Dict[str, Any]:
    if metric not in METRICS_BY_KEY:
        metric = DEFAULT_TREND_METRIC

    base_points = build_trend_series(dataset, base.country, base.city, base.submarket, metric)
    comp_points = build_trend_series(dataset, comparison.country, comparison.city, comparison.submarket, metric)

    base_name = series_name(base)
    comp_name = series_name(comparison)
    if comp_name == base_name:
        comp_name += " (comparison)"

    frame = build_comparison_frame(base_points, comp_points)
    charts: Dict[str, Any] = {}
    if not frame.empty:
        charts["comparison"] = to_vega_spec(comparison_chart(frame, metric, base_name, comp_name))

    records = frame.astype(object).where(pd.notna(frame), None).to_dict(orient="records")
    return {
        "base": asdict(base),
        "comparison": asdict(comparison),
        "metric": metric,
        "label": metric_label(metric),
        "series_names": {"base": base_name, "comparison": comp_name},
        "rows": records,
        "charts": charts,
    }

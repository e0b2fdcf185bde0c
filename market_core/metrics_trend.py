from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, Optional

from market_core.catalog import DEFAULT_TREND_METRIC, METRICS_BY_KEY, metric_label
from market_core.charts import to_vega_spec, trend_chart
from market_core.formatting import formatter_for
from market_core.model import Dataset
from market_core.selection import Selection
from market_core.trend import build_trend_series, trend_frame


def compute_trend(dataset: Optional[Dataset], selection: Selection, metric: str = DEFAULT_TREND_METRIC) -> Dict[str, Any]:
    if metric not in METRICS_BY_KEY:
        metric = DEFAULT_TREND_METRIC
    points = build_trend_series(dataset, selection.country, selection.city, selection.submarket, metric)
    fmt = formatter_for(metric)
    series = [{"period": p.period, "value": p.value, "display": fmt(p.value)} for p in points]
    charts: Dict[str, Any] = {}
    if points:
        charts["trend"] = to_vega_spec(trend_chart(trend_frame(points), metric))
    return {
        "selection": asdict(selection),
        "metric": metric,
        "label": metric_label(metric),
        "series": series,
        "charts": charts,
    }

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import List, Optional

import pandas as pd

from market_core.accessor import (
    canonical_field,
    effective_leasing,
    effective_metrics,
    get_city,
    get_field,
    sort_periods,
)
from market_core.formatting import display_value
from market_core.model import LEASING_FIELDS, Dataset


@dataclass(frozen=True)
class TrendPoint:
    period: str
    value: float


def build_trend_series(
    dataset: Optional[Dataset], country: str, city: str, submarket: str, metric: str
) -> List[TrendPoint]:
    """Chronological (period, value) points for ``metric``.

    Values come from the effective record for each period; vacancy rate and
    prime yield are put on the 0-100 scale. Periods without a parseable value
    are skipped.
    """
    city_node = get_city(dataset, country, city)
    if city_node is None:
        return []
    name = canonical_field(metric) or metric
    resolve = effective_leasing if name in LEASING_FIELDS else effective_metrics

    out: List[TrendPoint] = []
    for period in sort_periods(city_node.periods):
        record = resolve(dataset, country, city, period, submarket)
        value = display_value(name, get_field(record, name))
        if value is None:
            continue
        out.append(TrendPoint(period=period, value=float(value)))
    return out


def trend_frame(points: List[TrendPoint]) -> pd.DataFrame:
    if not points:
        return pd.DataFrame(columns=["period", "value"])
    return pd.DataFrame([asdict(p) for p in points])


def build_comparison_frame(base: List[TrendPoint], comparison: List[TrendPoint]) -> pd.DataFrame:
    """Outer-join two series on period, ordered chronologically."""
    base_map = {p.period: p.value for p in base}
    comp_map = {p.period: p.value for p in comparison}
    periods = sort_periods(dict.fromkeys([*base_map, *comp_map]))
    rows = [{"period": p, "base": base_map.get(p), "comparison": comp_map.get(p)} for p in periods]
    if not rows:
        return pd.DataFrame(columns=["period", "base", "comparison"])
    return pd.DataFrame(rows)

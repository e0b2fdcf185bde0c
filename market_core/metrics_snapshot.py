from __future__ import annotations

from dataclasses import asdict
from typing import Any, Dict, List, Optional

import pandas as pd

from market_core.accessor import Record, effective_leasing, effective_metrics, get_field
from market_core.catalog import LEASING_METRICS, MARKET_METRICS, MetricSpec
from market_core.formatting import display_value, format_metric, is_ambiguous_percent
from market_core.model import Dataset
from market_core.selection import Selection, describe_selection, selection_options

NO_DATA_MESSAGE = "No data available for this selection."


def _rows(record: Optional[Record], specs: List[MetricSpec], *, allow_range: bool = False) -> List[Dict[str, Any]]:
    rows = []
    for spec in specs:
        raw = get_field(record, spec.key)
        rows.append(
            {
                "key": spec.key,
                "label": spec.label,
                "raw": raw,
                "value": display_value(spec.key, raw),
                "display": format_metric(spec.key, raw, allow_range=allow_range),
                "ambiguous": spec.kind == "percent" and is_ambiguous_percent(raw),
            }
        )
    return rows


def compute_snapshot(dataset: Optional[Dataset], selection: Selection) -> Dict[str, Any]:
    metrics = effective_metrics(dataset, selection.country, selection.city, selection.period, selection.submarket)
    leasing = effective_leasing(dataset, selection.country, selection.city, selection.period, selection.submarket)
    options = selection_options(dataset, selection)
    return {
        "selection": asdict(selection),
        "options": asdict(options),
        "title": f"{selection.city or 'Market'} Office Market",
        "subtitle": describe_selection(selection),
        "has_data": metrics is not None,
        "message": None if metrics is not None else NO_DATA_MESSAGE,
        "show_submarket_selector": bool(options.submarkets),
        "metrics": _rows(metrics, MARKET_METRICS) if metrics is not None else [],
        "leasing": _rows(leasing, LEASING_METRICS, allow_range=True) if leasing is not None else [],
    }


def snapshot_table(rows: List[Dict[str, Any]]) -> pd.DataFrame:
    """Two-column display table (label, formatted value) for a snapshot section."""
    if not rows:
        return pd.DataFrame(columns=["Metric", "Value"])
    return pd.DataFrame([{"Metric": r["label"], "Value": r["display"]} for r in rows])

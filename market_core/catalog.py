from __future__ import annotations

from dataclasses import dataclass
from typing import Dict, List


@dataclass(frozen=True)
class MetricSpec:
    key: str
    label: str
    kind: str  # "count" | "money" | "percent"
    source: str  # "market" | "leasing"


MARKET_METRICS: List[MetricSpec] = [
    MetricSpec("total_stock", "Total Stock (sqm)", "count", "market"),
    MetricSpec("vacancy", "Vacancy (sqm)", "count", "market"),
    MetricSpec("vacancy_rate", "Vacancy Rate (%)", "percent", "market"),
    MetricSpec("take_up", "Take-up (sqm)", "count", "market"),
    MetricSpec("net_absorption", "Net Absorption (sqm, YTD)", "count", "market"),
    MetricSpec("completions_ytd", "Completed (sqm, YTD)", "count", "market"),
    MetricSpec("under_construction", "Under Construction (sqm)", "count", "market"),
    MetricSpec("prime_rent", "Prime Rent (€/sqm/month)", "money", "market"),
    MetricSpec("average_rent", "Average Rent (€/sqm/month)", "money", "market"),
    MetricSpec("prime_yield", "Prime Yield (%)", "percent", "market"),
]

LEASING_METRICS: List[MetricSpec] = [
    MetricSpec("rent_free", "Typical rent-free period (month/year)", "money", "leasing"),
    MetricSpec("lease_length", "Typical lease length (months)", "count", "leasing"),
    MetricSpec("fit_out", "Fit-out (€/sqm)", "count", "leasing"),
    MetricSpec("service_charge", "Service charge (€/sqm/month)", "money", "leasing"),
]

METRICS_BY_KEY: Dict[str, MetricSpec] = {m.key: m for m in MARKET_METRICS + LEASING_METRICS}

TREND_METRIC_KEYS: List[str] = [
    "total_stock",
    "vacancy",
    "vacancy_rate",
    "prime_rent",
    "average_rent",
    "prime_yield",
    "fit_out",
    "service_charge",
]
TREND_METRICS: List[MetricSpec] = [METRICS_BY_KEY[k] for k in TREND_METRIC_KEYS]

DEFAULT_TREND_METRIC = "prime_rent"


def metric_label(key: str) -> str:
    spec = METRICS_BY_KEY.get(key)
    return spec.label if spec else key

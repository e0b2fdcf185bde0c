from __future__ import annotations

import re
from dataclasses import dataclass, field, fields
from typing import Any, Dict, Mapping, Optional, Tuple


MARKET_COLUMNS = {
    "totalStock": "total_stock",
    "Total Stock (sqm)": "total_stock",
    "vacancy": "vacancy",
    "Vacancy (sqm)": "vacancy",
    "vacancyRate": "vacancy_rate",
    "Vacancy Rate (%)": "vacancy_rate",
    "Vacancy Rate": "vacancy_rate",
    "takeUp": "take_up",
    "YTD Take-Up (sqm)": "take_up",
    "Take-up (sqm)": "take_up",
    "netAbsorption": "net_absorption",
    "Net Absorption (sqm)": "net_absorption",
    "completionsYTD": "completions_ytd",
    "YTD Completions (sqm)": "completions_ytd",
    "underConstruction": "under_construction",
    "Under Construction (sqm)": "under_construction",
    "primeRentEurSqmMonth": "prime_rent",
    "Prime Rent": "prime_rent",
    "averageRentEurSqmMonth": "average_rent",
    "Average Rent": "average_rent",
    "primeYield": "prime_yield",
    "Prime Yield": "prime_yield",
}

LEASING_COLUMNS = {
    "rentFreeMonthPerYear": "rent_free",
    "Rent-free period (month/year)": "rent_free",
    "leaseLengthMonths": "lease_length",
    "Lease length (months)": "lease_length",
    "fitOutEurSqmShellCore": "fit_out",
    "Fit-out contribution (€/sqm) - shell & core": "fit_out",
    "serviceChargeEurSqmMonth": "service_charge",
    "Average service charge (€/sqm/month)": "service_charge",
}

PERIOD_RE = re.compile(r"^\s*Q([1-4])\s+(\d{4})\s*$")


def _resolve_columns(raw: Mapping[str, Any], columns: Dict[str, str], names: Tuple[str, ...]) -> Tuple[Dict[str, Any], Dict[str, Any]]:
    values: Dict[str, Any] = {}
    extras: Dict[str, Any] = {}
    for key, value in raw.items():
        name = key if key in names else columns.get(key)
        if name is None:
            extras[key] = value
        elif values.get(name) is None:
            values[name] = value
    return values, extras


@dataclass(frozen=True)
class MarketRecord:
    total_stock: Any = None
    vacancy: Any = None
    vacancy_rate: Any = None
    take_up: Any = None
    net_absorption: Any = None
    completions_ytd: Any = None
    under_construction: Any = None
    prime_rent: Any = None
    average_rent: Any = None
    prime_yield: Any = None
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_raw(cls, raw: Optional[Mapping[str, Any]]) -> Optional["MarketRecord"]:
        if not isinstance(raw, Mapping):
            return None
        values, extras = _resolve_columns(raw, MARKET_COLUMNS, MARKET_FIELDS)
        return cls(extras=extras, **values)


@dataclass(frozen=True)
class LeasingRecord:
    rent_free: Any = None
    lease_length: Any = None
    fit_out: Any = None
    service_charge: Any = None
    extras: Dict[str, Any] = field(default_factory=dict, compare=False)

    @classmethod
    def from_raw(cls, raw: Optional[Mapping[str, Any]]) -> Optional["LeasingRecord"]:
        if not isinstance(raw, Mapping):
            return None
        values, extras = _resolve_columns(raw, LEASING_COLUMNS, LEASING_FIELDS)
        return cls(extras=extras, **values)


MARKET_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(MarketRecord) if f.name != "extras")
LEASING_FIELDS: Tuple[str, ...] = tuple(f.name for f in fields(LeasingRecord) if f.name != "extras")


@dataclass(frozen=True)
class Submarket:
    metrics: MarketRecord
    leasing: Optional[LeasingRecord] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Submarket":
        raw = dict(raw) if isinstance(raw, Mapping) else {}
        leasing = LeasingRecord.from_raw(raw.pop("leasing", None))
        return cls(metrics=MarketRecord.from_raw(raw) or MarketRecord(), leasing=leasing)


@dataclass(frozen=True)
class Period:
    market: Optional[MarketRecord] = None
    leasing: Optional[LeasingRecord] = None
    submarkets: Dict[str, Submarket] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Period":
        if not isinstance(raw, Mapping):
            return cls()
        market_raw = raw.get("market")
        if market_raw is None:
            market_raw = raw.get("metrics")
        subs = raw.get("subMarkets") or raw.get("submarkets") or {}
        return cls(
            market=MarketRecord.from_raw(market_raw),
            leasing=LeasingRecord.from_raw(raw.get("leasing")),
            submarkets={str(name): Submarket.from_raw(sub) for name, sub in subs.items()} if isinstance(subs, Mapping) else {},
        )


@dataclass(frozen=True)
class City:
    periods: Dict[str, Period] = field(default_factory=dict)
    leasing: Optional[LeasingRecord] = None

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "City":
        if not isinstance(raw, Mapping):
            return cls()
        periods = raw.get("periods") or {}
        if not isinstance(periods, Mapping):
            periods = {}
        return cls(
            periods={str(label): Period.from_raw(p) for label, p in periods.items()},
            leasing=LeasingRecord.from_raw(raw.get("leasing")),
        )


@dataclass(frozen=True)
class Country:
    cities: Dict[str, City] = field(default_factory=dict)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Country":
        if not isinstance(raw, Mapping):
            return cls()
        cities = raw.get("cities") or {}
        if not isinstance(cities, Mapping):
            cities = {}
        return cls(cities={str(name): City.from_raw(c) for name, c in cities.items()})


@dataclass(frozen=True)
class Dataset:
    countries: Dict[str, Country] = field(default_factory=dict)
    raw: Dict[str, Any] = field(default_factory=dict, compare=False, repr=False)

    @classmethod
    def from_raw(cls, raw: Mapping[str, Any]) -> "Dataset":
        countries = raw.get("countries") or {}
        if not isinstance(countries, Mapping):
            countries = {}
        return cls(
            countries={str(name): Country.from_raw(c) for name, c in countries.items()},
            raw=dict(raw),
        )

    def is_empty(self) -> bool:
        return not self.countries


def parse_period(label: str) -> Optional[Tuple[int, int]]:
    """Parse a quarter label like "Q3 2024" -> (2024, 3)."""
    match = PERIOD_RE.match(str(label))
    if not match:
        return None
    return int(match.group(2)), int(match.group(1))

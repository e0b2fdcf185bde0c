from __future__ import annotations

from typing import Any, Dict, Iterable, List, Optional, Tuple, Union

from market_core.model import (
    LEASING_COLUMNS,
    LEASING_FIELDS,
    MARKET_COLUMNS,
    MARKET_FIELDS,
    City,
    Dataset,
    LeasingRecord,
    MarketRecord,
    Period,
    parse_period,
)


Record = Union[MarketRecord, LeasingRecord]


def period_sort_key(label: str) -> Tuple[int, int, int]:
    parsed = parse_period(label)
    if parsed is None:
        return (1, 0, 0)
    year, quarter = parsed
    return (0, year, quarter)


def sort_periods(labels: Iterable[str]) -> List[str]:
    # sorted() is stable, so malformed labels keep document order at the end
    return sorted(labels, key=period_sort_key)


def get_city(dataset: Optional[Dataset], country: str, city: str) -> Optional[City]:
    if dataset is None or not country or not city:
        return None
    country_node = dataset.countries.get(country)
    if country_node is None:
        return None
    return country_node.cities.get(city)


def get_period(dataset: Optional[Dataset], country: str, city: str, period: str) -> Optional[Period]:
    city_node = get_city(dataset, country, city)
    if city_node is None or not period:
        return None
    return city_node.periods.get(period)


def list_countries(dataset: Optional[Dataset]) -> List[str]:
    if dataset is None:
        return []
    return list(dataset.countries)


def list_cities(dataset: Optional[Dataset], country: str) -> List[str]:
    if dataset is None or not country:
        return []
    country_node = dataset.countries.get(country)
    return list(country_node.cities) if country_node is not None else []


def list_periods(dataset: Optional[Dataset], country: str, city: str) -> List[str]:
    city_node = get_city(dataset, country, city)
    if city_node is None:
        return []
    return sort_periods(city_node.periods)


def list_submarkets(dataset: Optional[Dataset], country: str, city: str, period: str) -> List[str]:
    period_node = get_period(dataset, country, city, period)
    if period_node is None:
        return []
    return list(period_node.submarkets)


def _merge_records(records: List[Optional[Record]]) -> Optional[Record]:
    """Field-by-field merge: the first non-null value in ``records`` wins."""
    present = [r for r in records if r is not None]
    if not present:
        return None
    names = MARKET_FIELDS if isinstance(present[0], MarketRecord) else LEASING_FIELDS
    values = {name: next((getattr(r, name) for r in present if getattr(r, name) is not None), None) for name in names}
    extras: Dict[str, Any] = {}
    for record in reversed(present):
        extras.update({k: v for k, v in record.extras.items() if v is not None})
    return type(present[0])(extras=extras, **values)


def effective_metrics(
    dataset: Optional[Dataset], country: str, city: str, period: str, submarket: str = ""
) -> Optional[MarketRecord]:
    """Metrics used for display, per field: the submarket's value, else the period market's."""
    period_node = get_period(dataset, country, city, period)
    if period_node is None:
        return None
    sub = period_node.submarkets.get(submarket) if submarket else None
    return _merge_records([sub.metrics if sub is not None else None, period_node.market])


def effective_leasing(
    dataset: Optional[Dataset], country: str, city: str, period: str, submarket: str = ""
) -> Optional[LeasingRecord]:
    """Leasing used for display, per field: submarket > period > city default."""
    city_node = get_city(dataset, country, city)
    period_node = get_period(dataset, country, city, period)
    if city_node is None or period_node is None:
        return None
    sub = period_node.submarkets.get(submarket) if submarket else None
    return _merge_records([sub.leasing if sub is not None else None, period_node.leasing, city_node.leasing])


def canonical_field(name: str) -> Optional[str]:
    if name in MARKET_FIELDS or name in LEASING_FIELDS:
        return name
    return MARKET_COLUMNS.get(name) or LEASING_COLUMNS.get(name)


def get_field(record: Optional[Record], name: str) -> Any:
    if record is None:
        return None
    key = canonical_field(name)
    if key is None:
        return record.extras.get(name)
    return getattr(record, key, None)

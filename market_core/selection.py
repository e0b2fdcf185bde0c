from __future__ import annotations

import logging
from dataclasses import dataclass, field, replace
from typing import Dict, List, Optional, Union

from market_core.accessor import list_cities, list_countries, list_periods, list_submarkets
from market_core.model import Dataset


logger = logging.getLogger(__name__)

# Submarket value meaning "city total" (no submarket).
WHOLE_CITY = ""
WHOLE_CITY_LABEL = "City total"


@dataclass(frozen=True)
class Selection:
    country: str = ""
    city: str = ""
    period: str = ""
    submarket: str = WHOLE_CITY


@dataclass(frozen=True)
class SelectCountry:
    country: str


@dataclass(frozen=True)
class SelectCity:
    city: str


@dataclass(frozen=True)
class SelectPeriod:
    period: str


@dataclass(frozen=True)
class SelectSubmarket:
    submarket: str


@dataclass(frozen=True)
class DatasetLoaded:
    pass


SelectionEvent = Union[SelectCountry, SelectCity, SelectPeriod, SelectSubmarket, DatasetLoaded]

EVENT_TYPES = {
    "country": SelectCountry,
    "city": SelectCity,
    "period": SelectPeriod,
    "submarket": SelectSubmarket,
}


@dataclass(frozen=True)
class SelectionOptions:
    countries: List[str] = field(default_factory=list)
    cities: List[str] = field(default_factory=list)
    periods: List[str] = field(default_factory=list)
    submarkets: List[str] = field(default_factory=list)


def _first(values: List[str], default: str = "") -> str:
    return values[0] if values else default


def _cascade_from_city(dataset: Optional[Dataset], country: str, city: str) -> Selection:
    period = _first(list_periods(dataset, country, city))
    submarket = _first(list_submarkets(dataset, country, city, period), WHOLE_CITY)
    return Selection(country=country, city=city, period=period, submarket=submarket)


def _cascade_from_country(dataset: Optional[Dataset], country: str) -> Selection:
    city = _first(list_cities(dataset, country))
    return _cascade_from_city(dataset, country, city)


def initial_selection(dataset: Optional[Dataset]) -> Selection:
    country = _first(list_countries(dataset))
    if not country:
        return Selection()
    return _cascade_from_country(dataset, country)


def reconcile(dataset: Optional[Dataset], state: Selection) -> Selection:
    """Replace any key that no longer exists in ``dataset`` with the first valid one."""
    countries = list_countries(dataset)
    if state.country not in countries:
        if state.country:
            logger.debug("Stale country %r, falling back", state.country)
        return initial_selection(dataset)

    cities = list_cities(dataset, state.country)
    if state.city not in cities:
        if state.city:
            logger.debug("Stale city %r in %r, falling back", state.city, state.country)
        return _cascade_from_country(dataset, state.country)

    periods = list_periods(dataset, state.country, state.city)
    if state.period not in periods:
        if state.period:
            logger.debug("Stale period %r for %r, falling back", state.period, state.city)
        return _cascade_from_city(dataset, state.country, state.city)

    submarkets = list_submarkets(dataset, state.country, state.city, state.period)
    if state.submarket != WHOLE_CITY and state.submarket not in submarkets:
        logger.debug("Stale submarket %r for %r %r, falling back", state.submarket, state.city, state.period)
        return replace(state, submarket=_first(submarkets, WHOLE_CITY))
    return state


def reduce_selection(dataset: Optional[Dataset], state: Selection, event: SelectionEvent) -> Selection:
    """Compute the next selection tuple for ``event`` in one step.

    Parent changes cascade to their children (first city, first chronological
    period, first submarket or whole city); the result is always reconciled
    against ``dataset`` so it never points at a missing key.
    """
    if isinstance(event, SelectCountry):
        nxt = _cascade_from_country(dataset, event.country)
    elif isinstance(event, SelectCity):
        nxt = _cascade_from_city(dataset, state.country, event.city)
    elif isinstance(event, SelectPeriod):
        nxt = replace(state, period=event.period)
        submarkets = list_submarkets(dataset, nxt.country, nxt.city, nxt.period)
        if nxt.submarket != WHOLE_CITY and nxt.submarket not in submarkets:
            nxt = replace(nxt, submarket=_first(submarkets, WHOLE_CITY))
    elif isinstance(event, SelectSubmarket):
        nxt = replace(state, submarket=event.submarket)
    elif isinstance(event, DatasetLoaded):
        nxt = state
    else:
        raise TypeError(f"Unknown selection event: {event!r}")
    return reconcile(dataset, nxt)


def event_from_dict(raw: Dict[str, str]) -> SelectionEvent:
    """Build an event from ``{"kind": "city", "value": "Prague"}``."""
    kind = str(raw.get("kind") or "").strip().lower()
    if kind in ("loaded", "dataset_loaded", "reload"):
        return DatasetLoaded()
    event_cls = EVENT_TYPES.get(kind)
    if event_cls is None:
        raise ValueError(f"Unknown selection event kind: {kind!r}")
    return event_cls(str(raw.get("value") or ""))


def selection_options(dataset: Optional[Dataset], state: Selection) -> SelectionOptions:
    return SelectionOptions(
        countries=list_countries(dataset),
        cities=list_cities(dataset, state.country),
        periods=list_periods(dataset, state.country, state.city),
        submarkets=list_submarkets(dataset, state.country, state.city, state.period),
    )


def describe_selection(state: Selection) -> str:
    city = state.city or "Market"
    parts = [city]
    if state.period:
        parts.append(state.period)
    parts.append(state.submarket or WHOLE_CITY_LABEL)
    return " — ".join(parts)

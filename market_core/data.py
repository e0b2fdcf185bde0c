from __future__ import annotations

import json
import logging
from functools import lru_cache
from pathlib import Path
from typing import Any, Dict, Optional, Tuple

import requests

from market_core.model import Dataset


logger = logging.getLogger(__name__)

DATA_DIR = Path(__file__).resolve().parents[1]
DATA_FILE_NAME = "market_data.json"
DEFAULT_DATA_SOURCE = str(DATA_DIR / DATA_FILE_NAME)
DEFAULT_TIMEOUT = 30.0


class DataLoadError(RuntimeError):
    """The market data resource could not be fetched or parsed."""


def is_url(source: str) -> bool:
    return str(source).lower().startswith(("http://", "https://"))


def source_signature(source: str) -> Tuple[str, float]:
    """Cache key for a source: local files are re-read when their mtime changes."""
    if is_url(source):
        return (source, 0.0)
    path = Path(source)
    try:
        return (str(path), path.stat().st_mtime)
    except OSError:
        return (str(path), -1.0)


def fetch_raw(source: str, *, timeout: float = DEFAULT_TIMEOUT) -> Dict[str, Any]:
    if is_url(source):
        try:
            resp = requests.get(source, timeout=timeout)
            resp.raise_for_status()
        except requests.RequestException as exc:
            raise DataLoadError(str(exc)) from exc
        text = resp.text
    else:
        try:
            text = Path(source).read_text(encoding="utf-8")
        except OSError as exc:
            raise DataLoadError(f"Cannot read {source}: {exc.strerror or exc}") from exc

    try:
        raw = json.loads(text)
    except json.JSONDecodeError as exc:
        raise DataLoadError(f"Malformed JSON in {source}: {exc.msg} (line {exc.lineno})") from exc
    if not isinstance(raw, dict):
        raise DataLoadError(f"Expected a JSON object at the top of {source}, got {type(raw).__name__}")
    if "countries" in raw and not isinstance(raw["countries"], dict):
        raise DataLoadError(f"'countries' in {source} must be an object")
    return raw


def parse_dataset(raw: Dict[str, Any]) -> Dataset:
    return Dataset.from_raw(raw)


@lru_cache(maxsize=4)
def _load_dataset_cached(signature: Tuple[str, float], timeout: float) -> Dataset:
    source = signature[0]
    logger.info("Loading market data from %s", source)
    try:
        raw = fetch_raw(source, timeout=timeout)
    except DataLoadError as exc:
        logger.error("Failed to load market data from %s: %s", source, exc)
        raise
    dataset = parse_dataset(raw)
    logger.info("Loaded %d countries from %s", len(dataset.countries), source)
    return dataset


def load_dataset(source: Optional[str] = None, *, timeout: float = DEFAULT_TIMEOUT) -> Dataset:
    return _load_dataset_cached(source_signature(source or DEFAULT_DATA_SOURCE), timeout)


def clear_cache() -> None:
    _load_dataset_cached.cache_clear()

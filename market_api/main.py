from __future__ import annotations

from dataclasses import asdict
import logging
import math

import numpy as np
import pandas as pd
from fastapi import FastAPI, Query
from fastapi.encoders import jsonable_encoder
from fastapi.middleware.cors import CORSMiddleware
from fastapi.responses import JSONResponse, Response

from market_api.schemas import ComparisonRequest, MetaListResponse, SelectionModel, SelectionRequest, TrendRequest
from market_core.accessor import list_cities, list_countries, list_periods, list_submarkets
from market_core.data import DataLoadError, load_dataset
from market_core.metrics_comparison import compute_comparison
from market_core.metrics_snapshot import compute_snapshot, snapshot_table
from market_core.metrics_trend import compute_trend
from market_core.model import Dataset
from market_core.selection import Selection, event_from_dict, reconcile, reduce_selection, selection_options
from market_core.settings import configure_logging, load_settings


settings = load_settings()
configure_logging(settings)

app = FastAPI(title="Office Market Explorer API", version="0.1.0")
logger = logging.getLogger(__name__)

app.add_middleware(
    CORSMiddleware,
    allow_origins=settings.cors_origins,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)


def _dataset() -> Dataset:
    return load_dataset(settings.data_source, timeout=settings.request_timeout)


def _selection_from_model(model: SelectionModel, dataset: Dataset) -> Selection:
    return reconcile(dataset, Selection(**model.model_dump()))


def _json(data: object) -> JSONResponse:
    """Return JSON with safe encoding for pandas/numpy objects."""

    def _safe_float(value: object) -> float | None:
        try:
            out = float(value)  # type: ignore[arg-type]
        except Exception:
            return None
        if math.isnan(out) or math.isinf(out):
            return None
        return out

    return JSONResponse(
        content=jsonable_encoder(
            data,
            custom_encoder={
                type(pd.NA): lambda _: None,
                np.integer: int,
                float: _safe_float,
                np.floating: _safe_float,
                np.bool_: bool,
                np.ndarray: lambda arr: arr.tolist(),
            },
        )
    )


def _error(exc: Exception, name: str) -> JSONResponse:
    if isinstance(exc, DataLoadError):
        return JSONResponse(status_code=503, content={"error": f"Error loading data: {exc}", "type": type(exc).__name__})
    logger.exception("%s failed", name)
    return JSONResponse(status_code=500, content={"error": str(exc), "type": type(exc).__name__})


@app.get("/market_data.json")
def market_data():
    try:
        return _json(_dataset().raw)
    except Exception as exc:
        return _error(exc, "market_data")


@app.get("/meta/countries", response_model=MetaListResponse)
def meta_countries():
    try:
        return _json({"values": list_countries(_dataset())})
    except Exception as exc:
        return _error(exc, "meta_countries")


@app.get("/meta/cities", response_model=MetaListResponse)
def meta_cities(country: str = Query(default="")):
    try:
        return _json({"values": list_cities(_dataset(), country)})
    except Exception as exc:
        return _error(exc, "meta_cities")


@app.get("/meta/periods", response_model=MetaListResponse)
def meta_periods(country: str = Query(default=""), city: str = Query(default="")):
    try:
        return _json({"values": list_periods(_dataset(), country, city)})
    except Exception as exc:
        return _error(exc, "meta_periods")


@app.get("/meta/submarkets", response_model=MetaListResponse)
def meta_submarkets(country: str = Query(default=""), city: str = Query(default=""), period: str = Query(default="")):
    try:
        return _json({"values": list_submarkets(_dataset(), country, city, period)})
    except Exception as exc:
        return _error(exc, "meta_submarkets")


@app.post("/selection")
def selection(request: SelectionRequest):
    try:
        dataset = _dataset()
        try:
            event = event_from_dict(request.event.model_dump())
        except ValueError as exc:
            return JSONResponse(status_code=422, content={"error": str(exc), "type": type(exc).__name__})
        state = Selection(**request.state.model_dump())
        nxt = reduce_selection(dataset, state, event)
        return _json({"selection": asdict(nxt), "options": asdict(selection_options(dataset, nxt))})
    except Exception as exc:
        return _error(exc, "selection")


@app.post("/snapshot")
def snapshot(selection: SelectionModel):
    try:
        dataset = _dataset()
        return _json(compute_snapshot(dataset, _selection_from_model(selection, dataset)))
    except Exception as exc:
        return _error(exc, "snapshot")


@app.post("/trend")
def trend(request: TrendRequest):
    try:
        dataset = _dataset()
        sel = _selection_from_model(request.selection, dataset)
        return _json(compute_trend(dataset, sel, request.metric or settings.default_metric))
    except Exception as exc:
        return _error(exc, "trend")


@app.post("/comparison")
def comparison(request: ComparisonRequest):
    try:
        dataset = _dataset()
        base = _selection_from_model(request.base, dataset)
        comp = _selection_from_model(request.comparison, dataset)
        return _json(compute_comparison(dataset, base, comp, request.metric or settings.default_metric))
    except Exception as exc:
        return _error(exc, "comparison")


@app.post("/export/{table}")
def export_table(table: str, request: TrendRequest):
    try:
        dataset = _dataset()
        sel = _selection_from_model(request.selection, dataset)
    except Exception as exc:
        return _error(exc, "export")

    filename = f"{table}.csv"
    if table == "metrics":
        export_df = snapshot_table(compute_snapshot(dataset, sel)["metrics"])
    elif table == "leasing":
        export_df = snapshot_table(compute_snapshot(dataset, sel)["leasing"])
    elif table == "trend":
        payload = compute_trend(dataset, sel, request.metric or settings.default_metric)
        export_df = pd.DataFrame(payload["series"], columns=["period", "value", "display"])
    else:
        export_df = pd.DataFrame()

    csv_bytes = export_df.to_csv(index=False).encode("utf-8")
    return Response(content=csv_bytes, media_type="text/csv", headers={"Content-Disposition": f"attachment; filename={filename}"})

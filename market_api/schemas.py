from __future__ import annotations

from typing import List, Optional

from pydantic import BaseModel, Field


class SelectionModel(BaseModel):
    country: str = ""
    city: str = ""
    period: str = ""
    submarket: str = ""


class SelectionEventModel(BaseModel):
    kind: str
    value: str = ""


class SelectionRequest(BaseModel):
    state: SelectionModel = Field(default_factory=SelectionModel)
    event: SelectionEventModel


class TrendRequest(BaseModel):
    selection: SelectionModel = Field(default_factory=SelectionModel)
    metric: Optional[str] = None


class ComparisonRequest(BaseModel):
    base: SelectionModel = Field(default_factory=SelectionModel)
    comparison: SelectionModel = Field(default_factory=SelectionModel)
    metric: Optional[str] = None


class MetaListResponse(BaseModel):
    values: List[str]

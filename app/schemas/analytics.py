"""Pydantic schemas for per-crop analytics and the market overview."""

from __future__ import annotations

import uuid

from pydantic import BaseModel, Field

from app.models.enums import MarketDemandEnum, TrendEnum
from app.schemas.crops import CropStatistics, PredictionRead


class SeasonalStats(BaseModel):
	avg_yield: float
	avg_price: float
	avg_demand: float


class CropAnalytics(BaseModel):
	crop_id: uuid.UUID
	basic_stats: CropStatistics
	yield_trend: TrendEnum
	price_trend: TrendEnum
	demand_trend: TrendEnum
	seasonal_analysis: dict[int, SeasonalStats] = Field(default_factory=dict)
	predictions: list[PredictionRead] = Field(default_factory=list)


class TopPerformer(BaseModel):
	name: str
	average_yield: float
	average_price: float
	market_demand: MarketDemandEnum


class PriceRange(BaseModel):
	min: float = 0.0
	max: float = 0.0
	avg: float = 0.0


class MarketOverview(BaseModel):
	total_crops: int
	crop_types: dict[str, int] = Field(default_factory=dict)
	market_demand: dict[str, int] = Field(default_factory=dict)
	top_performing_crops: list[TopPerformer] = Field(default_factory=list)
	average_yields: float = 0.0
	price_ranges: PriceRange = Field(default_factory=PriceRange)

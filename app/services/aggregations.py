"""Market-wide and per-crop aggregations over in-memory crop snapshots.

Every function here is pure: it receives already-loaded ``Crop`` rows (or
anything shaped like them) and never touches the session.  Empty inputs
degrade to zeros, empty dicts and ``stable`` trends.
"""

from __future__ import annotations

from collections import Counter, defaultdict
from collections.abc import Sequence
from typing import Any

from app.schemas.analytics import (
	CropAnalytics,
	MarketOverview,
	PriceRange,
	SeasonalStats,
	TopPerformer,
)
from app.schemas.crops import PredictionRead
from app.services.trends import classify, crop_statistics, demands_of, prices_of, yields_of

TOP_PERFORMERS_LIMIT = 5
RECENT_PREDICTIONS_LIMIT = 5


def _enum_value(value: Any) -> str:
	return getattr(value, "value", value)


def _with_history(crops: Sequence[Any]) -> list[Any]:
	return [crop for crop in crops if crop.observations]


def type_distribution(crops: Sequence[Any]) -> dict[str, int]:
	return dict(Counter(_enum_value(crop.crop_type) for crop in crops))


def demand_distribution(crops: Sequence[Any]) -> dict[str, int]:
	return dict(Counter(_enum_value(crop.market_demand) for crop in crops))


def top_performers(crops: Sequence[Any], limit: int = TOP_PERFORMERS_LIMIT) -> list[TopPerformer]:
	# sorted() is stable, ties keep input order
	ranked = sorted(_with_history(crops), key=lambda crop: crop.average_yield, reverse=True)
	return [
		TopPerformer(
			name=crop.name,
			average_yield=crop.average_yield,
			average_price=crop.average_price,
			market_demand=crop.market_demand,
		)
		for crop in ranked[:limit]
	]


def average_yield_across(crops: Sequence[Any]) -> float:
	measured = _with_history(crops)
	if not measured:
		return 0.0
	return sum(crop.average_yield for crop in measured) / len(measured)


def price_range(crops: Sequence[Any]) -> PriceRange:
	prices = [crop.average_price for crop in _with_history(crops)]
	if not prices:
		return PriceRange()
	return PriceRange(min=min(prices), max=max(prices), avg=sum(prices) / len(prices))


def market_overview(crops: Sequence[Any]) -> MarketOverview:
	return MarketOverview(
		total_crops=len(crops),
		crop_types=type_distribution(crops),
		market_demand=demand_distribution(crops),
		top_performing_crops=top_performers(crops),
		average_yields=average_yield_across(crops),
		price_ranges=price_range(crops),
	)


def seasonal_breakdown(observations: Sequence[Any]) -> dict[int, SeasonalStats]:
	"""Mean yield/price/demand per calendar month, populated months only."""
	by_month: dict[int, list[Any]] = defaultdict(list)
	for item in observations:
		by_month[item.month].append(item)

	breakdown: dict[int, SeasonalStats] = {}
	for month in sorted(by_month):
		rows = by_month[month]
		count = len(rows)
		breakdown[month] = SeasonalStats(
			avg_yield=sum(yields_of(rows)) / count,
			avg_price=sum(prices_of(rows)) / count,
			avg_demand=sum(demands_of(rows)) / count,
		)
	return breakdown


def crop_analytics(crop: Any) -> CropAnalytics:
	observations = list(crop.observations or [])
	predictions = list(crop.predictions or [])
	return CropAnalytics(
		crop_id=crop.id,
		basic_stats=crop_statistics(observations),
		yield_trend=classify(yields_of(observations)),
		price_trend=classify(prices_of(observations)),
		demand_trend=classify(demands_of(observations)),
		seasonal_analysis=seasonal_breakdown(observations),
		predictions=[
			PredictionRead.model_validate(item)
			for item in predictions[-RECENT_PREDICTIONS_LIMIT:]
		],
	)

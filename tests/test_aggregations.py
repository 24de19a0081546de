from __future__ import annotations

from datetime import UTC, datetime
from types import SimpleNamespace
from uuid import uuid4

from app.models.enums import CropTypeEnum, MarketDemandEnum, TrendEnum
from app.services import aggregations


def _obs(month: int, yield_: float, price: float, demand: float = 50.0) -> SimpleNamespace:
	return SimpleNamespace(year=2024, month=month, yield_=yield_, price=price, demand=demand)


def _crop(
	name: str,
	*,
	crop_type: CropTypeEnum = CropTypeEnum.vegetable,
	demand: MarketDemandEnum = MarketDemandEnum.medium,
	observations: list[SimpleNamespace] | None = None,
	predictions: list[SimpleNamespace] | None = None,
) -> SimpleNamespace:
	observations = observations or []
	count = len(observations)
	return SimpleNamespace(
		id=uuid4(),
		name=name,
		crop_type=crop_type,
		market_demand=demand,
		observations=observations,
		predictions=predictions or [],
		average_yield=sum(item.yield_ for item in observations) / count if count else 0.0,
		average_price=sum(item.price for item in observations) / count if count else 0.0,
	)


def test_distributions_count_by_value() -> None:
	crops = [
		_crop("Tomato", demand=MarketDemandEnum.high),
		_crop("Onion", demand=MarketDemandEnum.high),
		_crop("Mango", crop_type=CropTypeEnum.fruit, demand=MarketDemandEnum.low),
	]

	assert aggregations.type_distribution(crops) == {"vegetable": 2, "fruit": 1}
	assert aggregations.demand_distribution(crops) == {"high": 2, "low": 1}


def test_top_performers_skips_crops_without_history_and_keeps_tie_order() -> None:
	crops = [
		_crop("Empty"),
		_crop("Alpha", observations=[_obs(1, 10.0, 2.0)]),
		_crop("Beta", observations=[_obs(1, 30.0, 2.0)]),
		_crop("Gamma", observations=[_obs(1, 10.0, 5.0)]),
	]

	ranked = aggregations.top_performers(crops)

	assert [item.name for item in ranked] == ["Beta", "Alpha", "Gamma"]


def test_top_performers_limited_to_five() -> None:
	crops = [_crop(f"Crop {i}", observations=[_obs(1, float(i), 1.0)]) for i in range(8)]

	ranked = aggregations.top_performers(crops)

	assert len(ranked) == 5
	assert ranked[0].name == "Crop 7"


def test_market_overview_empty_market() -> None:
	overview = aggregations.market_overview([])

	assert overview.total_crops == 0
	assert overview.crop_types == {}
	assert overview.top_performing_crops == []
	assert overview.average_yields == 0.0
	assert overview.price_ranges.model_dump() == {"min": 0.0, "max": 0.0, "avg": 0.0}


def test_market_overview_aggregates_measured_crops_only() -> None:
	crops = [
		_crop("Tomato", observations=[_obs(1, 10.0, 2.0), _obs(2, 20.0, 4.0)]),
		_crop("Wheat", crop_type=CropTypeEnum.grain, observations=[_obs(1, 40.0, 9.0)]),
		_crop("Unmeasured", crop_type=CropTypeEnum.legume),
	]

	overview = aggregations.market_overview(crops)

	assert overview.total_crops == 3
	assert overview.crop_types == {"vegetable": 1, "grain": 1, "legume": 1}
	assert overview.average_yields == 27.5
	assert overview.price_ranges.min == 3.0
	assert overview.price_ranges.max == 9.0
	assert overview.price_ranges.avg == 6.0
	assert overview.top_performing_crops[0].name == "Wheat"


def test_seasonal_breakdown_groups_populated_months() -> None:
	observations = [_obs(3, 10.0, 2.0, 40.0), _obs(3, 20.0, 4.0, 60.0), _obs(7, 5.0, 1.0, 10.0)]

	breakdown = aggregations.seasonal_breakdown(observations)

	assert sorted(breakdown) == [3, 7]
	assert breakdown[3].avg_yield == 15.0
	assert breakdown[3].avg_price == 3.0
	assert breakdown[3].avg_demand == 50.0
	assert breakdown[7].avg_yield == 5.0


def test_crop_analytics_bundle_keeps_last_five_predictions() -> None:
	now = datetime.now(UTC)
	predictions = [
		SimpleNamespace(
			date=now,
			predicted_yield=float(i),
			predicted_price=1.0,
			confidence=80.0,
			factors={"weather": 5.0},
		)
		for i in range(7)
	]
	crop = _crop(
		"Tomato",
		observations=[_obs(1, 10.0, 4.0, 10.0), _obs(2, 10.0, 4.0, 10.0), _obs(3, 10.0, 2.0, 10.0), _obs(4, 20.0, 2.0, 30.0)],
		predictions=predictions,
	)

	analytics = aggregations.crop_analytics(crop)

	assert analytics.crop_id == crop.id
	assert analytics.basic_stats.total_records == 4
	assert analytics.yield_trend == TrendEnum.increasing
	assert analytics.price_trend == TrendEnum.decreasing
	assert analytics.demand_trend == TrendEnum.increasing
	assert [item.predicted_yield for item in analytics.predictions] == [2.0, 3.0, 4.0, 5.0, 6.0]
	assert sorted(analytics.seasonal_analysis) == [1, 2, 3, 4]


def test_crop_analytics_without_history() -> None:
	analytics = aggregations.crop_analytics(_crop("Fresh"))

	assert analytics.basic_stats.total_records == 0
	assert analytics.yield_trend == TrendEnum.stable
	assert analytics.seasonal_analysis == {}
	assert analytics.predictions == []

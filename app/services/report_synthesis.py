"""Chart dataset synthesis for generated reports.

``synthesize`` turns a filtered crop snapshot into the ordered chart list
stored on a completed report:

1. ``line``  Price Trends      (Jan..Jun, first three crops)
2. ``bar``   Yield vs Demand   (first five crops)
3. ``pie``   Market Share      (crop type distribution)
4. ``area``  Profit Analysis   (Jan..Jun, all crops)

``custom`` reports carry no charts.
"""

from __future__ import annotations

import random
from collections.abc import Sequence
from typing import Any

from app.models.enums import ChartTypeEnum, ReportTypeEnum
from app.schemas.reports import ChartDataset
from app.services.aggregations import type_distribution

CHART_MONTHS = ("Jan", "Feb", "Mar", "Apr", "May", "Jun")
PIE_PALETTE = ("#8884d8", "#82ca9d", "#ffc658", "#ff7300", "#00ff00", "#ff00ff")
PRICE_TREND_CROPS = 3
YIELD_DEMAND_CROPS = 5
COST_RATIO = 0.7

_CHARTED_TYPES = {ReportTypeEnum.monthly, ReportTypeEnum.quarterly, ReportTypeEnum.annual}


def _first_in_month(crop: Any, month: int) -> Any | None:
	for item in crop.observations:
		if item.month == month:
			return item
	return None


def price_trend_data(crops: Sequence[Any]) -> list[dict[str, Any]]:
	rows: list[dict[str, Any]] = []
	for index, label in enumerate(CHART_MONTHS, start=1):
		row: dict[str, Any] = {"month": label}
		for crop in crops[:PRICE_TREND_CROPS]:
			observation = _first_in_month(crop, index)
			row[crop.name.lower()] = observation.price if observation is not None else 0
		rows.append(row)
	return rows


def yield_vs_demand_data(crops: Sequence[Any]) -> list[dict[str, Any]]:
	rows = []
	for crop in crops[:YIELD_DEMAND_CROPS]:
		demands = [item.demand for item in crop.observations]
		rows.append(
			{
				"crop": crop.name,
				"yield": crop.average_yield,
				"demand": sum(demands) / len(demands) if demands else 0,
			}
		)
	return rows


def market_share_data(crops: Sequence[Any], rng: random.Random) -> list[dict[str, Any]]:
	return [
		{"name": name, "value": count, "color": rng.choice(PIE_PALETTE)}
		for name, count in type_distribution(crops).items()
	]


def profit_analysis_data(crops: Sequence[Any]) -> list[dict[str, Any]]:
	rows = []
	for index, label in enumerate(CHART_MONTHS, start=1):
		profit = 0.0
		cost = 0.0
		for crop in crops:
			observation = _first_in_month(crop, index)
			if observation is None:
				continue
			profit += observation.price * observation.yield_
			cost += observation.yield_ * COST_RATIO
		rows.append({"month": label, "profit": profit, "cost": cost})
	return rows


def synthesize(
	crops: Sequence[Any],
	report_type: ReportTypeEnum,
	rng: random.Random | None = None,
) -> list[ChartDataset]:
	if ReportTypeEnum(report_type) not in _CHARTED_TYPES:
		return []

	rng = rng or random.Random()
	return [
		ChartDataset(
			chart_type=ChartTypeEnum.line,
			title="Price Trends",
			description="Monthly price changes for key crops",
			data=price_trend_data(crops),
		),
		ChartDataset(
			chart_type=ChartTypeEnum.bar,
			title="Yield vs Demand",
			description="Current yield compared to market demand",
			data=yield_vs_demand_data(crops),
		),
		ChartDataset(
			chart_type=ChartTypeEnum.pie,
			title="Market Share",
			description="Distribution of crops in portfolio",
			data=market_share_data(crops, rng),
		),
		ChartDataset(
			chart_type=ChartTypeEnum.area,
			title="Profit Analysis",
			description="Monthly profit vs cost breakdown",
			data=profit_analysis_data(crops),
		),
	]

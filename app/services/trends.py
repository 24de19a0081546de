"""Trend classification and per-crop summary statistics."""

from __future__ import annotations

from collections.abc import Sequence
from typing import Any

from app.models.enums import TrendEnum
from app.schemas.crops import CropStatistics

TREND_WINDOW = 3
TREND_THRESHOLD_PCT = 5.0


def _mean(values: Sequence[float]) -> float:
	return sum(values) / len(values) if values else 0.0


def classify(series: Sequence[float]) -> TrendEnum:
	"""Compare the mean of the last three samples against the first three.

	With fewer than six samples the two windows overlap.  A zero baseline
	is reported as ``stable``.
	"""
	if len(series) < 2:
		return TrendEnum.stable

	recent_avg = _mean(series[-TREND_WINDOW:])
	older_avg = _mean(series[:TREND_WINDOW])
	if older_avg == 0:
		return TrendEnum.stable

	change_pct = (recent_avg - older_avg) / older_avg * 100
	if change_pct > TREND_THRESHOLD_PCT:
		return TrendEnum.increasing
	if change_pct < -TREND_THRESHOLD_PCT:
		return TrendEnum.decreasing
	return TrendEnum.stable


def yields_of(observations: Sequence[Any]) -> list[float]:
	return [item.yield_ for item in observations]


def prices_of(observations: Sequence[Any]) -> list[float]:
	return [item.price for item in observations]


def demands_of(observations: Sequence[Any]) -> list[float]:
	return [item.demand for item in observations]


def crop_statistics(observations: Sequence[Any]) -> CropStatistics:
	if not observations:
		return CropStatistics()

	yields = yields_of(observations)
	prices = prices_of(observations)
	return CropStatistics(
		total_records=len(observations),
		average_yield=round(_mean(yields), 2),
		average_price=round(_mean(prices), 2),
		average_demand=round(_mean(demands_of(observations)), 2),
		yield_trend=classify(yields),
		price_trend=classify(prices),
	)

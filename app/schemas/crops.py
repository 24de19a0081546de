"""Pydantic request/response schemas for crops, observations and predictions."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Annotated

from pydantic import AliasChoices, BaseModel, ConfigDict, Field, field_validator

from app.models.enums import (
	CropTypeEnum,
	DifficultyEnum,
	MarketDemandEnum,
	SeasonEnum,
	TrendEnum,
	WaterRequirementEnum,
)
from app.schemas.common import Pagination
from app.schemas.users import OwnerRead

Month = Annotated[int, Field(ge=1, le=12)]


# ── Observations / predictions ──────────────────────────────────────────────


class ObservationCreate(BaseModel):
	"""One month's yield/price/demand record.  ``yield`` is the wire name."""

	model_config = ConfigDict(populate_by_name=True)

	year: int = Field(ge=2020, le=2030)
	month: int = Field(ge=1, le=12)
	yield_: float = Field(
		ge=0,
		validation_alias=AliasChoices("yield", "yield_"),
		serialization_alias="yield",
	)
	price: float = Field(ge=0)
	demand: float = Field(ge=0, le=100)
	weather_score: float | None = Field(default=None, ge=0, le=10)
	soil_score: float | None = Field(default=None, ge=0, le=10)


class ObservationRead(BaseModel):
	model_config = ConfigDict(from_attributes=True, populate_by_name=True)

	year: int
	month: int
	yield_: float = Field(
		validation_alias=AliasChoices("yield", "yield_"),
		serialization_alias="yield",
	)
	price: float
	demand: float
	weather_score: float | None = None
	soil_score: float | None = None


class PredictionFactors(BaseModel):
	weather: float | None = Field(default=None, ge=0, le=10)
	market: float | None = Field(default=None, ge=0, le=10)
	historical: float | None = Field(default=None, ge=0, le=10)


class PredictionCreate(BaseModel):
	date: datetime
	predicted_yield: float = Field(ge=0)
	predicted_price: float = Field(ge=0)
	confidence: float = Field(ge=0, le=100)
	factors: PredictionFactors = Field(default_factory=PredictionFactors)


class PredictionRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	date: datetime
	predicted_yield: float
	predicted_price: float
	confidence: float
	factors: PredictionFactors = Field(default_factory=PredictionFactors)

	@field_validator("factors", mode="before")
	@classmethod
	def _default_factors(cls, value: object) -> object:
		return {} if value is None else value


# ── Crops ───────────────────────────────────────────────────────────────────


class NutritionalValue(BaseModel):
	calories: float | None = Field(default=None, ge=0)
	protein: float | None = Field(default=None, ge=0)
	carbs: float | None = Field(default=None, ge=0)
	fiber: float | None = Field(default=None, ge=0)
	vitamins: list[str] = Field(default_factory=list)


class CropCreate(BaseModel):
	name: str = Field(min_length=2, max_length=50)
	crop_type: CropTypeEnum
	variety: str | None = Field(default=None, max_length=100)
	description: str | None = Field(default=None, max_length=500)
	season: SeasonEnum
	planting_months: list[Month] = Field(min_length=1)
	harvest_months: list[Month] = Field(min_length=1)
	market_demand: MarketDemandEnum = MarketDemandEnum.medium
	difficulty: DifficultyEnum = DifficultyEnum.medium
	water_requirement: WaterRequirementEnum = WaterRequirementEnum.medium
	soil_types: list[str] = Field(default_factory=list)
	climate_requirements: list[str] = Field(default_factory=list)
	pests: list[str] = Field(default_factory=list)
	diseases: list[str] = Field(default_factory=list)
	nutritional_value: NutritionalValue | None = None
	location: str | None = Field(default=None, max_length=100)
	observations: list[ObservationCreate] = Field(default_factory=list)

	@field_validator("name")
	@classmethod
	def _strip_name(cls, value: str) -> str:
		value = value.strip()
		if len(value) < 2:
			raise ValueError("Crop name must be between 2 and 50 characters")
		return value


class CropUpdate(BaseModel):
	name: str | None = Field(default=None, min_length=2, max_length=50)
	crop_type: CropTypeEnum | None = None
	variety: str | None = Field(default=None, max_length=100)
	description: str | None = Field(default=None, max_length=500)
	season: SeasonEnum | None = None
	planting_months: list[Month] | None = None
	harvest_months: list[Month] | None = None
	market_demand: MarketDemandEnum | None = None
	difficulty: DifficultyEnum | None = None
	water_requirement: WaterRequirementEnum | None = None
	soil_types: list[str] | None = None
	climate_requirements: list[str] | None = None
	pests: list[str] | None = None
	diseases: list[str] | None = None
	nutritional_value: NutritionalValue | None = None
	location: str | None = Field(default=None, max_length=100)
	is_active: bool | None = None


class CropQuery(BaseModel):
	crop_type: CropTypeEnum | None = None
	season: SeasonEnum | None = None
	market_demand: MarketDemandEnum | None = None
	search: str | None = Field(default=None, min_length=1, max_length=100)


class CropStatistics(BaseModel):
	total_records: int = 0
	average_yield: float = 0.0
	average_price: float = 0.0
	average_demand: float = 0.0
	yield_trend: TrendEnum = TrendEnum.stable
	price_trend: TrendEnum = TrendEnum.stable


class CropRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	id: uuid.UUID
	name: str
	crop_type: CropTypeEnum
	variety: str | None = None
	description: str | None = None
	season: SeasonEnum
	planting_months: list[int] = Field(default_factory=list)
	harvest_months: list[int] = Field(default_factory=list)
	observations: list[ObservationRead] = Field(default_factory=list)
	predictions: list[PredictionRead] = Field(default_factory=list)
	average_yield: float
	average_price: float
	market_demand: MarketDemandEnum
	difficulty: DifficultyEnum
	water_requirement: WaterRequirementEnum
	soil_types: list[str] = Field(default_factory=list)
	climate_requirements: list[str] = Field(default_factory=list)
	pests: list[str] = Field(default_factory=list)
	diseases: list[str] = Field(default_factory=list)
	nutritional_value: NutritionalValue | None = None
	location: str | None = None
	is_active: bool
	owner: OwnerRead | None = None
	statistics: CropStatistics
	created_at: datetime
	updated_at: datetime


class CropListRead(BaseModel):
	items: list[CropRead]
	pagination: Pagination

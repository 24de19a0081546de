"""Pydantic request/response schemas for generated reports."""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import Any

from pydantic import BaseModel, ConfigDict, Field, field_validator, model_validator

from app.models.enums import (
	ChartTypeEnum,
	CropTypeEnum,
	MarketDemandEnum,
	ReportStatusEnum,
	ReportTypeEnum,
)
from app.schemas.common import Pagination
from app.schemas.users import OwnerRead


class DateRange(BaseModel):
	start: datetime
	end: datetime

	@model_validator(mode="after")
	def _ordered(self) -> "DateRange":
		if self.end < self.start:
			raise ValueError("date_range end must not precede start")
		return self


class ReportFilters(BaseModel):
	crop_type: CropTypeEnum | None = None
	market_demand: MarketDemandEnum | None = None
	location: str | None = Field(default=None, max_length=100)
	date_range: DateRange | None = None


class ReportCreate(BaseModel):
	title: str = Field(min_length=3, max_length=100)
	type: ReportTypeEnum
	description: str | None = Field(default=None, max_length=500)
	filters: ReportFilters = Field(default_factory=ReportFilters)

	@field_validator("title")
	@classmethod
	def _strip_title(cls, value: str) -> str:
		value = value.strip()
		if len(value) < 3:
			raise ValueError("Title must be between 3 and 100 characters")
		return value


class ChartDataset(BaseModel):
	chart_type: ChartTypeEnum
	title: str
	description: str | None = None
	data: list[dict[str, Any]] = Field(default_factory=list)


class ReportSummary(BaseModel):
	id: uuid.UUID
	title: str
	type: ReportTypeEnum
	status: ReportStatusEnum
	created_at: datetime


class ReportCreateResponse(BaseModel):
	report: ReportSummary


class ReportRead(BaseModel):
	id: uuid.UUID
	title: str
	type: ReportTypeEnum
	description: str | None = None
	filters: ReportFilters = Field(default_factory=ReportFilters)
	report_data: list[ChartDataset] | None = None
	status: ReportStatusEnum
	owner: OwnerRead | None = None
	download_count: int = 0
	is_public: bool = False
	completed_at: datetime | None = None
	created_at: datetime
	updated_at: datetime


class ReportStatusRead(BaseModel):
	model_config = ConfigDict(from_attributes=True)

	report_id: uuid.UUID
	status: ReportStatusEnum
	created_at: datetime
	completed_at: datetime | None = None
	updated_at: datetime


class ReportDownloadRead(BaseModel):
	report_id: uuid.UUID
	download_count: int


class ReportListRead(BaseModel):
	items: list[ReportRead]
	pagination: Pagination

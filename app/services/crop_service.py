"""Crop CRUD, observation/prediction history and analytics service."""

from __future__ import annotations

import uuid
from typing import Any

from sqlalchemy import Select, func, or_, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.models.crops import Crop, CropObservation, CropPrediction
from app.schemas.analytics import CropAnalytics, MarketOverview
from app.schemas.common import PageQuery
from app.schemas.crops import (
	CropCreate,
	CropQuery,
	CropUpdate,
	ObservationCreate,
	PredictionCreate,
)
from app.services import aggregations


def ensure_owner_or_admin(actor: User, owner_id: uuid.UUID, action: str) -> None:
	if actor.id != owner_id and not actor.is_admin:
		raise PermissionError(f"Not authorized to {action}")


def _observation_from(payload: ObservationCreate) -> CropObservation:
	return CropObservation(
		year=payload.year,
		month=payload.month,
		yield_=payload.yield_,
		price=payload.price,
		demand=payload.demand,
		weather_score=payload.weather_score,
		soil_score=payload.soil_score,
	)


class CropService:
	"""Service for crop records and their append-only histories."""

	def __init__(self, db: AsyncSession):
		self.db = db

	async def list_crops(self, query: CropQuery, page: PageQuery) -> tuple[list[Crop], int]:
		stmt = self._apply_list_filters(select(Crop), query)
		count_stmt = self._apply_list_filters(select(func.count()).select_from(Crop), query)

		total = await self.db.scalar(count_stmt)
		rows = await self.db.execute(
			stmt.order_by(Crop.created_at.desc()).offset(page.offset).limit(page.limit)
		)
		return list(rows.scalars().all()), int(total or 0)

	async def get_crop(self, crop_id: uuid.UUID) -> Crop:
		row = await self.db.execute(select(Crop).where(Crop.id == crop_id))
		crop = row.scalar_one_or_none()
		if crop is None:
			raise LookupError("Crop not found")
		return crop

	async def create_crop(self, actor: User, payload: CropCreate) -> Crop:
		await self._ensure_name_available(payload.name)

		data = payload.model_dump(exclude={"observations", "nutritional_value"})
		crop = Crop(**data, owner_id=actor.id)
		if payload.nutritional_value is not None:
			crop.nutritional_value = payload.nutritional_value.model_dump()
		crop.observations = [_observation_from(item) for item in payload.observations]
		crop.predictions = []
		crop.recompute_averages()

		self.db.add(crop)
		await self.db.flush()
		await self.db.refresh(crop)
		return crop

	async def update_crop(self, actor: User, crop_id: uuid.UUID, payload: CropUpdate) -> Crop:
		crop = await self.get_crop(crop_id)
		ensure_owner_or_admin(actor, crop.owner_id, "update this crop")

		changes = payload.model_dump(exclude_unset=True, exclude={"nutritional_value"})
		if changes.get("name") and changes["name"] != crop.name:
			await self._ensure_name_available(changes["name"])
		for field, value in changes.items():
			if value is None:
				continue
			setattr(crop, field, value)
		if payload.nutritional_value is not None:
			crop.nutritional_value = payload.nutritional_value.model_dump()

		crop.recompute_averages()
		await self.db.flush()
		await self.db.refresh(crop)
		return crop

	async def delete_crop(self, actor: User, crop_id: uuid.UUID) -> None:
		crop = await self.get_crop(crop_id)
		ensure_owner_or_admin(actor, crop.owner_id, "delete this crop")
		await self.db.delete(crop)
		await self.db.flush()

	async def add_observation(
		self,
		actor: User,
		crop_id: uuid.UUID,
		payload: ObservationCreate,
	) -> Crop:
		crop = await self.get_crop(crop_id)
		ensure_owner_or_admin(actor, crop.owner_id, "modify this crop")
		crop.observations.append(_observation_from(payload))
		crop.recompute_averages()
		await self.db.flush()
		await self.db.refresh(crop)
		return crop

	async def add_prediction(
		self,
		actor: User,
		crop_id: uuid.UUID,
		payload: PredictionCreate,
	) -> Crop:
		crop = await self.get_crop(crop_id)
		ensure_owner_or_admin(actor, crop.owner_id, "modify this crop")
		crop.predictions.append(
			CropPrediction(
				date=payload.date,
				predicted_yield=payload.predicted_yield,
				predicted_price=payload.predicted_price,
				confidence=payload.confidence,
				factors=payload.factors.model_dump(exclude_none=True),
			)
		)
		crop.recompute_averages()
		await self.db.flush()
		await self.db.refresh(crop)
		return crop

	async def get_analytics(self, crop_id: uuid.UUID) -> CropAnalytics:
		return aggregations.crop_analytics(await self.get_crop(crop_id))

	async def get_market_overview(self) -> MarketOverview:
		rows = await self.db.execute(
			select(Crop).where(Crop.is_active.is_(True)).order_by(Crop.created_at)
		)
		return aggregations.market_overview(list(rows.scalars().all()))

	async def filter_for_report(self, filters: dict[str, Any]) -> list[Crop]:
		"""Active crops matching a report's stored filter criteria."""
		stmt = select(Crop).where(Crop.is_active.is_(True))
		if filters.get("crop_type"):
			stmt = stmt.where(Crop.crop_type == filters["crop_type"])
		if filters.get("market_demand"):
			stmt = stmt.where(Crop.market_demand == filters["market_demand"])
		if filters.get("location"):
			stmt = stmt.where(Crop.location.icontains(filters["location"], autoescape=True))
		rows = await self.db.execute(stmt.order_by(Crop.created_at))
		return list(rows.scalars().all())

	async def _ensure_name_available(self, name: str) -> None:
		existing = await self.db.scalar(select(Crop.id).where(Crop.name == name))
		if existing is not None:
			raise ValueError("Crop with this name already exists")

	@staticmethod
	def _apply_list_filters(stmt: Select, query: CropQuery) -> Select:
		stmt = stmt.where(Crop.is_active.is_(True))
		if query.crop_type is not None:
			stmt = stmt.where(Crop.crop_type == query.crop_type)
		if query.season is not None:
			stmt = stmt.where(Crop.season == query.season)
		if query.market_demand is not None:
			stmt = stmt.where(Crop.market_demand == query.market_demand)
		if query.search:
			stmt = stmt.where(
				or_(
					Crop.name.icontains(query.search, autoescape=True),
					Crop.description.icontains(query.search, autoescape=True),
				)
			)
		return stmt

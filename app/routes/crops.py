"""Crop CRUD, history and analytics routes."""

from __future__ import annotations

import uuid
from typing import Any

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user, get_optional_user
from app.auth.models import User
from app.database import get_db
from app.models.enums import CropTypeEnum, MarketDemandEnum, SeasonEnum
from app.schemas.analytics import CropAnalytics, MarketOverview
from app.schemas.common import MessageResponse, PageQuery, Pagination
from app.schemas.crops import (
	CropCreate,
	CropListRead,
	CropQuery,
	CropRead,
	CropUpdate,
	NutritionalValue,
	ObservationCreate,
	ObservationRead,
	PredictionCreate,
	PredictionRead,
)
from app.schemas.users import OwnerRead
from app.services.crop_service import CropService
from app.services.trends import crop_statistics

router = APIRouter(prefix="/crops", tags=["crops"])


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, PermissionError):
		return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(
		status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
		detail="Unexpected crop service failure",
	)


def _to_crop_read(crop: Any) -> CropRead:
	observations = list(crop.observations or [])
	return CropRead(
		id=crop.id,
		name=crop.name,
		crop_type=crop.crop_type,
		variety=crop.variety,
		description=crop.description,
		season=crop.season,
		planting_months=list(crop.planting_months or []),
		harvest_months=list(crop.harvest_months or []),
		observations=[ObservationRead.model_validate(item) for item in observations],
		predictions=[PredictionRead.model_validate(item) for item in crop.predictions or []],
		average_yield=crop.average_yield,
		average_price=crop.average_price,
		market_demand=crop.market_demand,
		difficulty=crop.difficulty,
		water_requirement=crop.water_requirement,
		soil_types=list(crop.soil_types or []),
		climate_requirements=list(crop.climate_requirements or []),
		pests=list(crop.pests or []),
		diseases=list(crop.diseases or []),
		nutritional_value=(
			NutritionalValue(**crop.nutritional_value) if crop.nutritional_value else None
		),
		location=crop.location,
		is_active=crop.is_active,
		owner=OwnerRead.model_validate(crop.owner) if crop.owner is not None else None,
		statistics=crop_statistics(observations),
		created_at=crop.created_at,
		updated_at=crop.updated_at,
	)


@router.get("/market-overview", response_model=MarketOverview)
async def get_market_overview(
	db: AsyncSession = Depends(get_db),
	_user: User | None = Depends(get_optional_user),
) -> MarketOverview:
	service = CropService(db)
	try:
		return await service.get_market_overview()
	except Exception as exc:
		raise _map_error(exc) from exc


@router.get("", response_model=CropListRead)
async def list_crops(
	crop_type: CropTypeEnum | None = Query(default=None, alias="type"),
	season: SeasonEnum | None = None,
	market_demand: MarketDemandEnum | None = None,
	search: str | None = Query(default=None, min_length=1, max_length=100),
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=10, ge=1, le=100),
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(get_current_user),
) -> CropListRead:
	service = CropService(db)
	page_query = PageQuery(page=page, limit=limit)
	filters = CropQuery(crop_type=crop_type, season=season, market_demand=market_demand, search=search)
	try:
		crops, total = await service.list_crops(filters, page_query)
	except Exception as exc:
		raise _map_error(exc) from exc
	return CropListRead(
		items=[_to_crop_read(crop) for crop in crops],
		pagination=Pagination.build(page_query, total),
	)


@router.get("/analytics/{crop_id}", response_model=CropAnalytics)
async def get_crop_analytics(
	crop_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(get_current_user),
) -> CropAnalytics:
	service = CropService(db)
	try:
		return await service.get_analytics(crop_id)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.post("", response_model=CropRead, status_code=status.HTTP_201_CREATED)
async def create_crop(
	payload: CropCreate,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> CropRead:
	service = CropService(db)
	try:
		crop = await service.create_crop(user, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_crop_read(crop)


@router.get("/{crop_id}", response_model=CropRead)
async def get_crop(
	crop_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(get_current_user),
) -> CropRead:
	service = CropService(db)
	try:
		crop = await service.get_crop(crop_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_crop_read(crop)


@router.put("/{crop_id}", response_model=CropRead)
async def update_crop(
	crop_id: uuid.UUID,
	payload: CropUpdate,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> CropRead:
	service = CropService(db)
	try:
		crop = await service.update_crop(user, crop_id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_crop_read(crop)


@router.delete("/{crop_id}", response_model=MessageResponse)
async def delete_crop(
	crop_id: uuid.UUID,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> MessageResponse:
	service = CropService(db)
	try:
		await service.delete_crop(user, crop_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return MessageResponse(message="Crop deleted successfully")


@router.post("/{crop_id}/yield-data", response_model=CropRead)
async def add_yield_data(
	crop_id: uuid.UUID,
	payload: ObservationCreate,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> CropRead:
	service = CropService(db)
	try:
		crop = await service.add_observation(user, crop_id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_crop_read(crop)


@router.post("/{crop_id}/predictions", response_model=CropRead)
async def add_prediction(
	crop_id: uuid.UUID,
	payload: PredictionCreate,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> CropRead:
	service = CropService(db)
	try:
		crop = await service.add_prediction(user, crop_id, payload)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_crop_read(crop)

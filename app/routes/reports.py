"""Report generation and access routes."""

from __future__ import annotations

import uuid
from typing import Any

import structlog
from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, Query, Request, status
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.dependencies import get_current_user, require_role
from app.auth.models import User
from app.database import async_session_factory, get_db
from app.models.enums import UserRoleEnum
from app.schemas.common import MessageResponse, PageQuery, Pagination
from app.schemas.reports import (
	ChartDataset,
	ReportCreate,
	ReportCreateResponse,
	ReportDownloadRead,
	ReportFilters,
	ReportListRead,
	ReportRead,
	ReportStatusRead,
	ReportSummary,
)
from app.schemas.users import OwnerRead
from app.services.report_service import ReportService

router = APIRouter(prefix="/reports", tags=["reports"])

logger = structlog.get_logger("marketyield.reports")


def _map_error(exc: Exception) -> HTTPException:
	if isinstance(exc, LookupError):
		return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=str(exc))
	if isinstance(exc, PermissionError):
		return HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=str(exc))
	if isinstance(exc, ValueError):
		return HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc))
	return HTTPException(status_code=status.HTTP_500_INTERNAL_SERVER_ERROR, detail="report failure")


def _to_report_read(report: Any) -> ReportRead:
	return ReportRead(
		id=report.id,
		title=report.title,
		type=report.report_type,
		description=report.description,
		filters=ReportFilters(**(report.filters or {})),
		report_data=(
			[ChartDataset(**item) for item in report.report_data]
			if report.report_data is not None
			else None
		),
		status=report.status,
		owner=OwnerRead.model_validate(report.owner) if report.owner is not None else None,
		download_count=report.download_count,
		is_public=report.is_public,
		completed_at=report.completed_at,
		created_at=report.created_at,
		updated_at=report.updated_at,
	)


async def _run_report_generation(report_id: uuid.UUID, redis_client: object | None) -> None:
	async with async_session_factory() as session:
		service = ReportService(session, redis_client)  # type: ignore[arg-type]
		try:
			await service.execute_generation(report_id)
			await session.commit()
			return
		except Exception as exc:
			logger.error("report_generation_aborted", report_id=str(report_id), error=str(exc))
			await session.rollback()

		try:
			await service.mark_failed(report_id)
			await session.commit()
		except Exception as exc:
			logger.error("report_mark_failed_error", report_id=str(report_id), error=str(exc))
			await session.rollback()


@router.post("/generate", response_model=ReportCreateResponse, status_code=status.HTTP_201_CREATED)
async def generate_report(
	payload: ReportCreate,
	request: Request,
	background_tasks: BackgroundTasks,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> ReportCreateResponse:
	redis_client = getattr(request.app.state, "redis", None)
	service = ReportService(db, redis_client)
	try:
		report = await service.create_report(user, payload)
		# committed before the background session reads it
		await db.commit()
	except Exception as exc:
		raise _map_error(exc) from exc

	background_tasks.add_task(_run_report_generation, report.id, redis_client)
	return ReportCreateResponse(
		report=ReportSummary(
			id=report.id,
			title=report.title,
			type=report.report_type,
			status=report.status,
			created_at=report.created_at,
		)
	)


@router.get("/my-reports", response_model=ReportListRead)
async def list_my_reports(
	request: Request,
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=10, ge=1, le=100),
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> ReportListRead:
	service = ReportService(db, getattr(request.app.state, "redis", None))
	page_query = PageQuery(page=page, limit=limit)
	try:
		reports, total = await service.list_for_user(user, page_query)
	except Exception as exc:
		raise _map_error(exc) from exc
	return ReportListRead(
		items=[_to_report_read(report) for report in reports],
		pagination=Pagination.build(page_query, total),
	)


@router.get("", response_model=ReportListRead)
async def list_all_reports(
	request: Request,
	page: int = Query(default=1, ge=1),
	limit: int = Query(default=10, ge=1, le=100),
	db: AsyncSession = Depends(get_db),
	_user: User = Depends(require_role(UserRoleEnum.admin)),
) -> ReportListRead:
	service = ReportService(db, getattr(request.app.state, "redis", None))
	page_query = PageQuery(page=page, limit=limit)
	try:
		reports, total = await service.list_all(page_query)
	except Exception as exc:
		raise _map_error(exc) from exc
	return ReportListRead(
		items=[_to_report_read(report) for report in reports],
		pagination=Pagination.build(page_query, total),
	)


@router.get("/{report_id}", response_model=ReportRead)
async def get_report(
	report_id: uuid.UUID,
	request: Request,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> ReportRead:
	service = ReportService(db, getattr(request.app.state, "redis", None))
	try:
		report = await service.get_report(user, report_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return _to_report_read(report)


@router.get("/{report_id}/status", response_model=ReportStatusRead)
async def get_report_status(
	report_id: uuid.UUID,
	request: Request,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> ReportStatusRead:
	service = ReportService(db, getattr(request.app.state, "redis", None))
	try:
		return await service.get_status(user, report_id)
	except Exception as exc:
		raise _map_error(exc) from exc


@router.post("/{report_id}/download", response_model=ReportDownloadRead)
async def download_report(
	report_id: uuid.UUID,
	request: Request,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> ReportDownloadRead:
	service = ReportService(db, getattr(request.app.state, "redis", None))
	try:
		report = await service.download(user, report_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return ReportDownloadRead(report_id=report.id, download_count=report.download_count)


@router.delete("/{report_id}", response_model=MessageResponse)
async def delete_report(
	report_id: uuid.UUID,
	request: Request,
	db: AsyncSession = Depends(get_db),
	user: User = Depends(get_current_user),
) -> MessageResponse:
	service = ReportService(db, getattr(request.app.state, "redis", None))
	try:
		await service.delete_report(user, report_id)
	except Exception as exc:
		raise _map_error(exc) from exc
	return MessageResponse(message="Report deleted successfully")

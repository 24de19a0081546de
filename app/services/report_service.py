"""Report lifecycle orchestration: creation, background generation, access."""

from __future__ import annotations

import json
import random
import uuid
from datetime import UTC, datetime

import structlog
from redis.asyncio import Redis
from redis.exceptions import RedisError
from sqlalchemy import func, select
from sqlalchemy.ext.asyncio import AsyncSession

from app.auth.models import User
from app.models.enums import ReportStatusEnum
from app.models.reports import Report
from app.schemas.common import PageQuery
from app.schemas.reports import ReportCreate, ReportStatusRead
from app.services.crop_service import CropService, ensure_owner_or_admin
from app.services.report_synthesis import synthesize

REPORT_STATUS_TTL_SECONDS = 60 * 60 * 24

logger = structlog.get_logger("marketyield.reports")


class ReportService:
	def __init__(
		self,
		db: AsyncSession,
		redis_client: Redis | None = None,
		rng: random.Random | None = None,
	):
		self.db = db
		self.redis_client = redis_client
		self.rng = rng

	async def create_report(self, actor: User, payload: ReportCreate) -> Report:
		report = Report(
			title=payload.title,
			report_type=payload.type,
			description=payload.description,
			filters=payload.filters.model_dump(mode="json", exclude_none=True),
			status=ReportStatusEnum.generating,
			report_data=None,
			download_count=0,
			owner_id=actor.id,
		)
		self.db.add(report)
		await self.db.flush()
		await self.db.refresh(report)
		await self._persist_status(report)
		return report

	async def execute_generation(self, report_id: uuid.UUID) -> Report:
		"""Drive a ``generating`` report to its terminal state.

		Failures never propagate: the report is marked ``failed`` with no
		chart data and the error is logged.
		"""
		report = await self._require_report(report_id)
		if report.is_terminal:
			return report

		log = logger.bind(report_id=str(report.id), report_type=report.report_type.value)
		log.info("report_generation_started")
		try:
			crops = await CropService(self.db).filter_for_report(report.filters or {})
			datasets = synthesize(crops, report.report_type, rng=self.rng)
			report_data = [item.model_dump(mode="json") for item in datasets]
		except Exception as exc:
			report.status = ReportStatusEnum.failed
			report.report_data = None
			log.error("report_generation_failed", error=str(exc), error_type=type(exc).__name__)
		else:
			report.report_data = report_data
			report.status = ReportStatusEnum.completed
			report.completed_at = datetime.now(UTC)
			log.info("report_generation_completed", datasets=len(report_data), crops=len(crops))

		await self.db.flush()
		await self.db.refresh(report)
		await self._persist_status(report)
		return report

	async def mark_failed(self, report_id: uuid.UUID) -> None:
		"""Force a still-generating report to ``failed`` after an aborted run."""
		report = await self._require_report(report_id)
		if report.is_terminal:
			return
		report.status = ReportStatusEnum.failed
		report.report_data = None
		await self.db.flush()
		await self.db.refresh(report)
		await self._persist_status(report)

	async def get_report(self, actor: User, report_id: uuid.UUID) -> Report:
		report = await self._require_report(report_id)
		ensure_owner_or_admin(actor, report.owner_id, "view this report")
		return report

	async def get_status(self, actor: User, report_id: uuid.UUID) -> ReportStatusRead:
		cached = await self._read_cached_status(report_id)
		if cached is not None:
			owner_id, payload = cached
			if owner_id == actor.id or actor.is_admin:
				return payload

		report = await self.get_report(actor, report_id)
		await self._persist_status(report)
		return self._to_status_payload(report)

	async def download(self, actor: User, report_id: uuid.UUID) -> Report:
		report = await self.get_report(actor, report_id)
		report.download_count = (report.download_count or 0) + 1
		await self.db.flush()
		return report

	async def delete_report(self, actor: User, report_id: uuid.UUID) -> None:
		report = await self.get_report(actor, report_id)
		await self.db.delete(report)
		await self.db.flush()
		if self.redis_client is None:
			return
		try:
			await self.redis_client.delete(self._status_key(report_id))
		except RedisError as exc:
			logger.warning("report_status_cache_unavailable", report_id=str(report_id), op="delete", error=str(exc))

	async def list_for_user(self, actor: User, query: PageQuery) -> tuple[list[Report], int]:
		total = await self.db.scalar(
			select(func.count()).select_from(Report).where(Report.owner_id == actor.id)
		)
		rows = await self.db.execute(
			select(Report)
			.where(Report.owner_id == actor.id)
			.order_by(Report.created_at.desc())
			.offset(query.offset)
			.limit(query.limit)
		)
		return list(rows.scalars().all()), int(total or 0)

	async def list_all(self, query: PageQuery) -> tuple[list[Report], int]:
		total = await self.db.scalar(select(func.count()).select_from(Report))
		rows = await self.db.execute(
			select(Report).order_by(Report.created_at.desc()).offset(query.offset).limit(query.limit)
		)
		return list(rows.scalars().all()), int(total or 0)

	async def _require_report(self, report_id: uuid.UUID) -> Report:
		row = await self.db.execute(select(Report).where(Report.id == report_id))
		report = row.scalar_one_or_none()
		if report is None:
			raise LookupError("Report not found")
		return report

	@staticmethod
	def _status_key(report_id: uuid.UUID) -> str:
		return f"report:{report_id}:status"

	async def _persist_status(self, report: Report) -> None:
		if self.redis_client is None:
			return
		payload = {
			"owner_id": str(report.owner_id),
			"status": self._to_status_payload(report).model_dump(mode="json"),
		}
		try:
			await self.redis_client.setex(
				self._status_key(report.id),
				REPORT_STATUS_TTL_SECONDS,
				json.dumps(payload),
			)
		except RedisError as exc:
			logger.warning("report_status_cache_unavailable", report_id=str(report.id), op="write", error=str(exc))

	async def _read_cached_status(
		self,
		report_id: uuid.UUID,
	) -> tuple[uuid.UUID, ReportStatusRead] | None:
		if self.redis_client is None:
			return None
		try:
			value = await self.redis_client.get(self._status_key(report_id))
		except RedisError as exc:
			logger.warning("report_status_cache_unavailable", report_id=str(report_id), op="read", error=str(exc))
			return None
		if value is None:
			return None
		cached = json.loads(value)
		return uuid.UUID(cached["owner_id"]), ReportStatusRead(**cached["status"])

	@staticmethod
	def _to_status_payload(report: Report) -> ReportStatusRead:
		return ReportStatusRead(
			report_id=report.id,
			status=report.status,
			created_at=report.created_at,
			completed_at=report.completed_at,
			updated_at=report.updated_at,
		)

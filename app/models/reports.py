"""Report ORM model: asynchronously generated chart bundles."""

from __future__ import annotations

from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import DateTime, Index, Integer, String, text
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, OwnedMixin, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from app.models.enums import ReportStatusEnum, ReportTypeEnum

if TYPE_CHECKING:
    from app.auth.models import User


class Report(Base, UUIDPrimaryKeyMixin, TimestampMixin, OwnedMixin):
    """A persisted report and its generation lifecycle.

    ``filters`` (JSONB) is the request's filter criteria
    (crop_type, market_demand, location, date_range).  ``report_data``
    (JSONB list of chart datasets) stays NULL until the report reaches
    ``completed`` and is never written for ``failed`` reports.
    """

    __tablename__ = "reports"
    __table_args__ = (
        Index("ix_reports_type", "report_type"),
        Index("ix_reports_status", "status"),
        Index("ix_reports_created_at", "created_at"),
    )

    title: Mapped[str] = mapped_column(String(100), nullable=False)
    report_type: Mapped[ReportTypeEnum] = mapped_column(
        pg_enum(ReportTypeEnum, "report_type"),
        nullable=False,
    )
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    filters: Mapped[dict] = mapped_column(
        JSONB, nullable=False, default=dict, server_default=text("'{}'::jsonb")
    )
    report_data: Mapped[list | None] = mapped_column(JSONB, nullable=True)
    status: Mapped[ReportStatusEnum] = mapped_column(
        pg_enum(ReportStatusEnum, "report_status"),
        nullable=False,
        default=ReportStatusEnum.generating,
        server_default=ReportStatusEnum.generating.value,
    )
    completed_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )
    download_count: Mapped[int] = mapped_column(
        Integer, nullable=False, default=0, server_default=text("0")
    )
    is_public: Mapped[bool] = mapped_column(
        default=False,
        server_default=text("false"),
        nullable=False,
    )

    owner: Mapped[User] = relationship("User", lazy="selectin")

    @property
    def is_terminal(self) -> bool:
        return self.status in {ReportStatusEnum.completed, ReportStatusEnum.failed}

    def __repr__(self) -> str:
        return f"<Report id={self.id} type={self.report_type} status={self.status}>"

"""Crop, CropObservation, CropPrediction ORM models.

A crop owns two append-only child sequences:

``observations``
    One row per recorded month (year, month, yield, price, demand and the
    optional weather/soil quality scores).  Rows are ordered by their
    BIGSERIAL id, so insertion order is chronological order.

``predictions``
    Forecast records (predicted yield/price, confidence and the
    weather/market/historical factor scores).

``average_yield`` / ``average_price`` are denormalized means over
``observations`` and must be refreshed with :meth:`Crop.recompute_averages`
whenever the observation list changes.
"""

from __future__ import annotations

import uuid
from datetime import datetime
from typing import TYPE_CHECKING

from sqlalchemy import (
    BigInteger,
    DateTime,
    Float,
    ForeignKey,
    Index,
    Integer,
    String,
    func,
    text,
)
from sqlalchemy.dialects.postgresql import ARRAY, JSONB, UUID
from sqlalchemy.orm import Mapped, mapped_column, relationship

from app.models.base import Base, OwnedMixin, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from app.models.enums import (
    CropTypeEnum,
    DifficultyEnum,
    MarketDemandEnum,
    SeasonEnum,
    WaterRequirementEnum,
)

if TYPE_CHECKING:
    from app.auth.models import User


class AppendOnlyMixin:
    """BIGSERIAL PK + recording timestamp for append-only child rows.

    The autoincrement id doubles as the ordering key for the parent
    relationship.
    """

    id: Mapped[int] = mapped_column(
        BigInteger,
        primary_key=True,
        autoincrement=True,
    )
    recorded_at: Mapped[datetime] = mapped_column(
        DateTime(timezone=True),
        server_default=func.now(),
        nullable=False,
    )


# ═══════════════════════════════════════════════════════════════════════════
# Crop
# ═══════════════════════════════════════════════════════════════════════════


class Crop(Base, UUIDPrimaryKeyMixin, TimestampMixin, OwnedMixin):
    """A crop record with its observation history and predictions."""

    __tablename__ = "crops"
    __table_args__ = (
        Index("ix_crops_type", "crop_type"),
        Index("ix_crops_season", "season"),
        Index("ix_crops_market_demand", "market_demand"),
        Index("ix_crops_created_at", "created_at"),
    )

    name: Mapped[str] = mapped_column(String(50), unique=True, nullable=False)
    crop_type: Mapped[CropTypeEnum] = mapped_column(
        pg_enum(CropTypeEnum, "crop_type"),
        nullable=False,
    )
    variety: Mapped[str | None] = mapped_column(String(100), nullable=True)
    description: Mapped[str | None] = mapped_column(String(500), nullable=True)
    season: Mapped[SeasonEnum] = mapped_column(
        pg_enum(SeasonEnum, "crop_season"),
        nullable=False,
    )
    planting_months: Mapped[list[int]] = mapped_column(
        ARRAY(Integer), nullable=False, default=list, server_default="{}"
    )
    harvest_months: Mapped[list[int]] = mapped_column(
        ARRAY(Integer), nullable=False, default=list, server_default="{}"
    )
    average_yield: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, server_default=text("0")
    )
    average_price: Mapped[float] = mapped_column(
        Float, nullable=False, default=0.0, server_default=text("0")
    )
    market_demand: Mapped[MarketDemandEnum] = mapped_column(
        pg_enum(MarketDemandEnum, "market_demand"),
        nullable=False,
        default=MarketDemandEnum.medium,
        server_default="medium",
    )
    difficulty: Mapped[DifficultyEnum] = mapped_column(
        pg_enum(DifficultyEnum, "crop_difficulty"),
        nullable=False,
        default=DifficultyEnum.medium,
        server_default="medium",
    )
    water_requirement: Mapped[WaterRequirementEnum] = mapped_column(
        pg_enum(WaterRequirementEnum, "water_requirement"),
        nullable=False,
        default=WaterRequirementEnum.medium,
        server_default="medium",
    )
    soil_types: Mapped[list[str]] = mapped_column(
        ARRAY(String(100)), nullable=False, default=list, server_default="{}"
    )
    climate_requirements: Mapped[list[str]] = mapped_column(
        ARRAY(String(100)), nullable=False, default=list, server_default="{}"
    )
    pests: Mapped[list[str]] = mapped_column(
        ARRAY(String(100)), nullable=False, default=list, server_default="{}"
    )
    diseases: Mapped[list[str]] = mapped_column(
        ARRAY(String(100)), nullable=False, default=list, server_default="{}"
    )
    nutritional_value: Mapped[dict | None] = mapped_column(JSONB, nullable=True)
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        default=True,
        server_default=text("true"),
        nullable=False,
    )

    # ── Relationships ────────────────────────────────────────────────────
    owner: Mapped[User] = relationship("User", lazy="selectin")
    observations: Mapped[list[CropObservation]] = relationship(
        back_populates="crop",
        cascade="all, delete-orphan",
        order_by="CropObservation.id",
        lazy="selectin",
    )
    predictions: Mapped[list[CropPrediction]] = relationship(
        back_populates="crop",
        cascade="all, delete-orphan",
        order_by="CropPrediction.id",
        lazy="selectin",
    )

    def recompute_averages(self) -> None:
        """Refresh the denormalized yield/price means from ``observations``."""
        observations = self.observations or []
        if not observations:
            self.average_yield = 0.0
            self.average_price = 0.0
            return
        count = len(observations)
        self.average_yield = sum(item.yield_ for item in observations) / count
        self.average_price = sum(item.price for item in observations) / count

    def __repr__(self) -> str:
        return f"<Crop id={self.id} name={self.name!r} type={self.crop_type}>"


# ═══════════════════════════════════════════════════════════════════════════
# Observation / Prediction
# ═══════════════════════════════════════════════════════════════════════════


class CropObservation(Base, AppendOnlyMixin):
    """One month's recorded yield/price/demand tuple for a crop."""

    __tablename__ = "crop_observations"
    __table_args__ = (
        Index("ix_crop_observations_crop_period", "crop_id", "year", "month"),
    )

    crop_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("crops.id", ondelete="CASCADE"),
        nullable=False,
    )
    year: Mapped[int] = mapped_column(Integer, nullable=False)
    month: Mapped[int] = mapped_column(Integer, nullable=False)
    yield_: Mapped[float] = mapped_column("yield", Float, nullable=False)
    price: Mapped[float] = mapped_column(Float, nullable=False)
    demand: Mapped[float] = mapped_column(Float, nullable=False)
    weather_score: Mapped[float | None] = mapped_column(Float, nullable=True)
    soil_score: Mapped[float | None] = mapped_column(Float, nullable=True)

    crop: Mapped[Crop] = relationship(back_populates="observations")

    def __repr__(self) -> str:
        return (
            f"<CropObservation crop={self.crop_id} "
            f"period={self.year}-{self.month:02d}>"
        )


class CropPrediction(Base, AppendOnlyMixin):
    """Forecast record attached to a crop.

    ``factors`` (JSONB) holds the 0..10 weather / market / historical
    contribution scores, each optional.
    """

    __tablename__ = "crop_predictions"
    __table_args__ = (Index("ix_crop_predictions_crop_id", "crop_id"),)

    crop_id: Mapped[uuid.UUID] = mapped_column(
        UUID(as_uuid=True),
        ForeignKey("crops.id", ondelete="CASCADE"),
        nullable=False,
    )
    date: Mapped[datetime] = mapped_column(DateTime(timezone=True), nullable=False)
    predicted_yield: Mapped[float] = mapped_column(Float, nullable=False)
    predicted_price: Mapped[float] = mapped_column(Float, nullable=False)
    confidence: Mapped[float] = mapped_column(Float, nullable=False)
    factors: Mapped[dict | None] = mapped_column(JSONB, nullable=True)

    crop: Mapped[Crop] = relationship(back_populates="predictions")

    def __repr__(self) -> str:
        return f"<CropPrediction crop={self.crop_id} date={self.date}>"

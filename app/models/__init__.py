"""ORM model registry: importing this module registers every table on Base.metadata.

Alembic ``env.py`` imports ``Base`` from here (not from ``base.py``) so that
autogenerate sees all tables.  Application code can also do::

    from app.models import Crop, Report, ...

The ``User`` model lives in ``app.auth.models`` (which imports this package
for its base class); it is imported at the bottom of this module so the
string-based ``owner`` relationships always resolve.
"""

# ── Base & Mixins ───────────────────────────────────────────────────────────
from app.models.base import (
    Base,
    OwnedMixin,
    TimestampMixin,
    UUIDPrimaryKeyMixin,
)

# ── Crops ───────────────────────────────────────────────────────────────────
from app.models.crops import Crop, CropObservation, CropPrediction

# ── Enums ───────────────────────────────────────────────────────────────────
from app.models.enums import (
    ChartTypeEnum,
    CropTypeEnum,
    DifficultyEnum,
    ExperienceEnum,
    FarmSizeEnum,
    MarketDemandEnum,
    ReportStatusEnum,
    ReportTypeEnum,
    SeasonEnum,
    TrendEnum,
    UserRoleEnum,
    WaterRequirementEnum,
)

# ── Reports ─────────────────────────────────────────────────────────────────
from app.models.reports import Report

# ── Users (app.auth.models imports app.models.base, so it comes last) ──────
import app.auth.models  # noqa: E402, F401

__all__ = [
    # Base & mixins
    "Base",
    "ChartTypeEnum",
    # Crops
    "Crop",
    "CropObservation",
    "CropPrediction",
    # Enums
    "CropTypeEnum",
    "DifficultyEnum",
    "ExperienceEnum",
    "FarmSizeEnum",
    "MarketDemandEnum",
    "OwnedMixin",
    # Reports
    "Report",
    "ReportStatusEnum",
    "ReportTypeEnum",
    "SeasonEnum",
    "TimestampMixin",
    "TrendEnum",
    "UUIDPrimaryKeyMixin",
    "UserRoleEnum",
    "WaterRequirementEnum",
]

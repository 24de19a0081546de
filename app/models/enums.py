"""PostgreSQL-backed enum types for all ORM models.

Each StrEnum maps 1:1 to a PostgreSQL CREATE TYPE ... AS ENUM.  Request
schemas reuse the same classes, so an out-of-set value is rejected at the
API edge before it reaches a service.
"""

from enum import StrEnum

# ── Crop classification enums ───────────────────────────────────────────────


class CropTypeEnum(StrEnum):
    """Botanical / market grouping of a crop."""

    vegetable = "vegetable"
    fruit = "fruit"
    grain = "grain"
    legume = "legume"
    other = "other"


class SeasonEnum(StrEnum):
    """Main growing season."""

    spring = "spring"
    summer = "summer"
    autumn = "autumn"
    winter = "winter"
    year_round = "year-round"


class MarketDemandEnum(StrEnum):
    """Market demand tier."""

    low = "low"
    medium = "medium"
    high = "high"


class DifficultyEnum(StrEnum):
    easy = "easy"
    medium = "medium"
    hard = "hard"


class WaterRequirementEnum(StrEnum):
    low = "low"
    medium = "medium"
    high = "high"


class TrendEnum(StrEnum):
    """Direction label derived from recent vs. older observation windows."""

    increasing = "increasing"
    decreasing = "decreasing"
    stable = "stable"


# ── Report enums ────────────────────────────────────────────────────────────


class ReportTypeEnum(StrEnum):
    monthly = "monthly"
    quarterly = "quarterly"
    annual = "annual"
    custom = "custom"


class ReportStatusEnum(StrEnum):
    """Report lifecycle: generating → completed | failed (both terminal)."""

    generating = "generating"
    completed = "completed"
    failed = "failed"


class ChartTypeEnum(StrEnum):
    line = "line"
    bar = "bar"
    pie = "pie"
    area = "area"


# ── User enums ──────────────────────────────────────────────────────────────


class UserRoleEnum(StrEnum):
    """User authorization roles for RBAC."""

    farmer = "farmer"
    admin = "admin"
    analyst = "analyst"


class FarmSizeEnum(StrEnum):
    small = "1-2 acres"
    medium = "3-5 acres"
    five = "5 acres"
    large = "10+ acres"


class ExperienceEnum(StrEnum):
    beginner = "Beginner"
    intermediate = "Intermediate"
    experienced = "Experienced"
    expert = "Expert"

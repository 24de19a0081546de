"""initial_schema

Revision ID: 3f9a1c7e2b54
Revises:
Create Date: 2026-10-19 00:00:00.000000

Creates the users, crops, crop_observations, crop_predictions and reports
tables with their PostgreSQL enum types and indexes.  Enables the
uuid-ossp extension used for server-side primary key defaults.
"""

from collections.abc import Sequence

import sqlalchemy as sa
from alembic import op
from sqlalchemy.dialects import postgresql

# revision identifiers, used by Alembic.
revision: str = "3f9a1c7e2b54"
down_revision: str | None = None
branch_labels: str | Sequence[str] | None = None
depends_on: str | Sequence[str] | None = None

# ── Enum type names (PostgreSQL CREATE TYPE) ────────────────────────────────
ENUM_USER_ROLE = postgresql.ENUM(
    "farmer", "admin", "analyst", name="user_role", create_type=False
)
ENUM_FARM_SIZE = postgresql.ENUM(
    "1-2 acres", "3-5 acres", "5 acres", "10+ acres", name="farm_size", create_type=False
)
ENUM_EXPERIENCE = postgresql.ENUM(
    "Beginner",
    "Intermediate",
    "Experienced",
    "Expert",
    name="experience_level",
    create_type=False,
)
ENUM_CROP_TYPE = postgresql.ENUM(
    "vegetable", "fruit", "grain", "legume", "other", name="crop_type", create_type=False
)
ENUM_CROP_SEASON = postgresql.ENUM(
    "spring", "summer", "autumn", "winter", "year-round", name="crop_season", create_type=False
)
ENUM_MARKET_DEMAND = postgresql.ENUM(
    "low", "medium", "high", name="market_demand", create_type=False
)
ENUM_CROP_DIFFICULTY = postgresql.ENUM(
    "easy", "medium", "hard", name="crop_difficulty", create_type=False
)
ENUM_WATER_REQUIREMENT = postgresql.ENUM(
    "low", "medium", "high", name="water_requirement", create_type=False
)
ENUM_REPORT_TYPE = postgresql.ENUM(
    "monthly", "quarterly", "annual", "custom", name="report_type", create_type=False
)
ENUM_REPORT_STATUS = postgresql.ENUM(
    "generating", "completed", "failed", name="report_status", create_type=False
)

_ENUMS = (
    ENUM_USER_ROLE,
    ENUM_FARM_SIZE,
    ENUM_EXPERIENCE,
    ENUM_CROP_TYPE,
    ENUM_CROP_SEASON,
    ENUM_MARKET_DEMAND,
    ENUM_CROP_DIFFICULTY,
    ENUM_WATER_REQUIREMENT,
    ENUM_REPORT_TYPE,
    ENUM_REPORT_STATUS,
)


def _uuid_pk() -> sa.Column:
    return sa.Column(
        "id",
        postgresql.UUID(as_uuid=True),
        server_default=sa.text("uuid_generate_v4()"),
        nullable=False,
    )


def _timestamps() -> list[sa.Column]:
    return [
        sa.Column(
            "created_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.Column(
            "updated_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
    ]


def _string_array(name: str) -> sa.Column:
    return sa.Column(
        name,
        postgresql.ARRAY(sa.String(100)),
        server_default=sa.text("'{}'"),
        nullable=False,
    )


def upgrade() -> None:
    op.execute('CREATE EXTENSION IF NOT EXISTS "uuid-ossp"')

    # ── 1. Create enum types ────────────────────────────────────────────
    for enum_type in _ENUMS:
        enum_type.create(op.get_bind(), checkfirst=True)

    # ── 2. Users ────────────────────────────────────────────────────────
    op.create_table(
        "users",
        _uuid_pk(),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("email", sa.String(320), nullable=False),
        sa.Column("hashed_password", sa.String(128), nullable=False),
        sa.Column("role", ENUM_USER_ROLE, server_default="farmer", nullable=False),
        sa.Column("farm_size", ENUM_FARM_SIZE, server_default="1-2 acres", nullable=False),
        sa.Column("experience", ENUM_EXPERIENCE, server_default="Beginner", nullable=False),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column("phone", sa.String(20), nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean(),
            server_default=sa.text("true"),
            nullable=False,
        ),
        sa.Column("last_login_at", sa.DateTime(timezone=True), nullable=True),
        *_timestamps(),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("email"),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    # ── 3. Crops ────────────────────────────────────────────────────────
    op.create_table(
        "crops",
        _uuid_pk(),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("name", sa.String(50), nullable=False),
        sa.Column("crop_type", ENUM_CROP_TYPE, nullable=False),
        sa.Column("variety", sa.String(100), nullable=True),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column("season", ENUM_CROP_SEASON, nullable=False),
        sa.Column(
            "planting_months",
            postgresql.ARRAY(sa.Integer()),
            server_default=sa.text("'{}'"),
            nullable=False,
        ),
        sa.Column(
            "harvest_months",
            postgresql.ARRAY(sa.Integer()),
            server_default=sa.text("'{}'"),
            nullable=False,
        ),
        sa.Column("average_yield", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("average_price", sa.Float(), server_default=sa.text("0"), nullable=False),
        sa.Column("market_demand", ENUM_MARKET_DEMAND, server_default="medium", nullable=False),
        sa.Column("difficulty", ENUM_CROP_DIFFICULTY, server_default="medium", nullable=False),
        sa.Column(
            "water_requirement",
            ENUM_WATER_REQUIREMENT,
            server_default="medium",
            nullable=False,
        ),
        _string_array("soil_types"),
        _string_array("climate_requirements"),
        _string_array("pests"),
        _string_array("diseases"),
        sa.Column("nutritional_value", postgresql.JSONB(), nullable=True),
        sa.Column("location", sa.String(100), nullable=True),
        sa.Column(
            "is_active",
            sa.Boolean(),
            server_default=sa.text("true"),
            nullable=False,
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("name"),
    )
    op.create_index("ix_crops_owner_id", "crops", ["owner_id"])
    op.create_index("ix_crops_type", "crops", ["crop_type"])
    op.create_index("ix_crops_season", "crops", ["season"])
    op.create_index("ix_crops_market_demand", "crops", ["market_demand"])
    op.create_index("ix_crops_created_at", "crops", ["created_at"])

    # ── 4. Crop history (append-only) ───────────────────────────────────
    op.create_table(
        "crop_observations",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("crop_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("year", sa.Integer(), nullable=False),
        sa.Column("month", sa.Integer(), nullable=False),
        sa.Column("yield", sa.Float(), nullable=False),
        sa.Column("price", sa.Float(), nullable=False),
        sa.Column("demand", sa.Float(), nullable=False),
        sa.Column("weather_score", sa.Float(), nullable=True),
        sa.Column("soil_score", sa.Float(), nullable=True),
        sa.Column(
            "recorded_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["crop_id"], ["crops.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index(
        "ix_crop_observations_crop_period",
        "crop_observations",
        ["crop_id", "year", "month"],
    )

    op.create_table(
        "crop_predictions",
        sa.Column("id", sa.BigInteger(), autoincrement=True, nullable=False),
        sa.Column("crop_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("date", sa.DateTime(timezone=True), nullable=False),
        sa.Column("predicted_yield", sa.Float(), nullable=False),
        sa.Column("predicted_price", sa.Float(), nullable=False),
        sa.Column("confidence", sa.Float(), nullable=False),
        sa.Column("factors", postgresql.JSONB(), nullable=True),
        sa.Column(
            "recorded_at",
            sa.DateTime(timezone=True),
            server_default=sa.text("now()"),
            nullable=False,
        ),
        sa.ForeignKeyConstraint(["crop_id"], ["crops.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_crop_predictions_crop_id", "crop_predictions", ["crop_id"])

    # ── 5. Reports ──────────────────────────────────────────────────────
    op.create_table(
        "reports",
        _uuid_pk(),
        sa.Column("owner_id", postgresql.UUID(as_uuid=True), nullable=False),
        sa.Column("title", sa.String(100), nullable=False),
        sa.Column("report_type", ENUM_REPORT_TYPE, nullable=False),
        sa.Column("description", sa.String(500), nullable=True),
        sa.Column(
            "filters",
            postgresql.JSONB(),
            server_default=sa.text("'{}'::jsonb"),
            nullable=False,
        ),
        sa.Column("report_data", postgresql.JSONB(), nullable=True),
        sa.Column("status", ENUM_REPORT_STATUS, server_default="generating", nullable=False),
        sa.Column("completed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("download_count", sa.Integer(), server_default=sa.text("0"), nullable=False),
        sa.Column(
            "is_public",
            sa.Boolean(),
            server_default=sa.text("false"),
            nullable=False,
        ),
        *_timestamps(),
        sa.ForeignKeyConstraint(["owner_id"], ["users.id"], ondelete="CASCADE"),
        sa.PrimaryKeyConstraint("id"),
    )
    op.create_index("ix_reports_owner_id", "reports", ["owner_id"])
    op.create_index("ix_reports_type", "reports", ["report_type"])
    op.create_index("ix_reports_status", "reports", ["status"])
    op.create_index("ix_reports_created_at", "reports", ["created_at"])


def downgrade() -> None:
    # ── Drop tables in reverse dependency order ─────────────────────────
    op.drop_table("reports")
    op.drop_table("crop_predictions")
    op.drop_table("crop_observations")
    op.drop_table("crops")
    op.drop_table("users")

    # ── Drop enum types ─────────────────────────────────────────────────
    for enum_type in reversed(_ENUMS):
        enum_type.drop(op.get_bind(), checkfirst=True)

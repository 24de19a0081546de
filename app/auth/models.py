"""User ORM model for JWT authentication.

Users authenticate via email/password; the bcrypt hash is stored in
``hashed_password`` and is never part of any read schema.
"""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, String, text
from sqlalchemy.orm import Mapped, mapped_column

from app.models.base import Base, TimestampMixin, UUIDPrimaryKeyMixin, pg_enum
from app.models.enums import ExperienceEnum, FarmSizeEnum, UserRoleEnum


class User(Base, UUIDPrimaryKeyMixin, TimestampMixin):
    """Application user (farmer, analyst or admin)."""

    __tablename__ = "users"

    name: Mapped[str] = mapped_column(String(50), nullable=False)
    email: Mapped[str] = mapped_column(
        String(320), unique=True, nullable=False, index=True
    )
    hashed_password: Mapped[str] = mapped_column(
        String(128), nullable=False
    )
    role: Mapped[UserRoleEnum] = mapped_column(
        pg_enum(UserRoleEnum, "user_role"),
        nullable=False,
        default=UserRoleEnum.farmer,
        server_default="farmer",
    )
    farm_size: Mapped[FarmSizeEnum] = mapped_column(
        pg_enum(FarmSizeEnum, "farm_size"),
        nullable=False,
        default=FarmSizeEnum.small,
        server_default="1-2 acres",
    )
    experience: Mapped[ExperienceEnum] = mapped_column(
        pg_enum(ExperienceEnum, "experience_level"),
        nullable=False,
        default=ExperienceEnum.beginner,
        server_default="Beginner",
    )
    location: Mapped[str | None] = mapped_column(String(100), nullable=True)
    phone: Mapped[str | None] = mapped_column(String(20), nullable=True)
    is_active: Mapped[bool] = mapped_column(
        default=True,
        server_default=text("true"),
        nullable=False,
    )
    last_login_at: Mapped[datetime | None] = mapped_column(
        DateTime(timezone=True), nullable=True
    )

    @property
    def is_admin(self) -> bool:
        return self.role == UserRoleEnum.admin

    def __repr__(self) -> str:
        return f"<User id={self.id} email={self.email!r} role={self.role}>"

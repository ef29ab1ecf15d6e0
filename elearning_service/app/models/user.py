from __future__ import annotations

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Boolean, DateTime, Integer, String, func
from sqlalchemy.orm import Mapped, mapped_column

from common import utcnow

from ..database import Base


class UserRole(str, PyEnum):
	STUDENT = "student"
	ADMIN = "admin"


class User(Base):
	__tablename__ = "users"

	id: Mapped[int] = mapped_column(Integer, primary_key=True)
	name: Mapped[str] = mapped_column(String(100), nullable=False)
	email: Mapped[str] = mapped_column(String(255), unique=True, index=True, nullable=False)
	phone: Mapped[str] = mapped_column(String(15), nullable=False)
	hashed_password: Mapped[str] = mapped_column(String(255), nullable=False)
	role: Mapped[str] = mapped_column(String(16), nullable=False, default=UserRole.STUDENT.value)
	is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
	last_login_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
	created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
	)

	@property
	def is_admin(self) -> bool:
		return self.role == UserRole.ADMIN.value

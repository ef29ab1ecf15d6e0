from __future__ import annotations

from datetime import datetime
from enum import Enum as PyEnum

from sqlalchemy import Boolean, DateTime, Integer, String, Text, func
from sqlalchemy.orm import Mapped, mapped_column

from common import utcnow

from ..database import Base


class CourseLevel(str, PyEnum):
	BEGINNER = "Beginner"
	INTERMEDIATE = "Intermediate"
	ADVANCED = "Advanced"
	ALL_LEVELS = "All Levels"


class Course(Base):
	__tablename__ = "courses"

	id: Mapped[int] = mapped_column(Integer, primary_key=True)
	name: Mapped[str] = mapped_column(String(200), nullable=False, index=True)
	tag: Mapped[str] = mapped_column(String(50), nullable=False)
	thumbnail_url: Mapped[str] = mapped_column(String(1024), nullable=False, default="")
	thumbnail_public_id: Mapped[str] = mapped_column(String(255), nullable=False, default="")
	description: Mapped[str] = mapped_column(Text, nullable=False, default="")
	level: Mapped[str] = mapped_column(String(16), nullable=False, default=CourseLevel.ALL_LEVELS.value)
	is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
	order: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
	created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)
	updated_at: Mapped[datetime] = mapped_column(
		DateTime(timezone=True), default=utcnow, onupdate=utcnow, server_default=func.now(), nullable=False
	)

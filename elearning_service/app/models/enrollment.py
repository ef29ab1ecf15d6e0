from __future__ import annotations

from datetime import datetime

from sqlalchemy import DateTime, ForeignKey, Integer, String, UniqueConstraint, func
from sqlalchemy.orm import Mapped, mapped_column

from common import utcnow

from ..database import Base


class Enrollment(Base):
	__tablename__ = "enrollments"
	__table_args__ = (UniqueConstraint("user_id", "package_id", name="uq_enrollments_user_package"),)

	id: Mapped[int] = mapped_column(Integer, primary_key=True)
	user_id: Mapped[int] = mapped_column(ForeignKey("users.id", ondelete="CASCADE"), nullable=False, index=True)
	package_id: Mapped[int] = mapped_column(Integer, nullable=False)
	package_name: Mapped[str] = mapped_column(String(32), nullable=False)
	amount: Mapped[int] = mapped_column(Integer, nullable=False)
	payment_id: Mapped[str | None] = mapped_column(String(128), nullable=True)
	enrolled_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), default=utcnow, server_default=func.now(), nullable=False)

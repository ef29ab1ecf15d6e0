from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from ..models import Enrollment, User
from ..schemas import EnrolledPackageOut, UserOut


async def build_user_out(db: AsyncSession, user: User) -> UserOut:
	stmt = (
		select(Enrollment)
		.where(Enrollment.user_id == user.id)
		.order_by(Enrollment.enrolled_at, Enrollment.id)
	)
	enrollments = (await db.scalars(stmt)).all()
	return UserOut(
		id=user.id,
		name=user.name,
		email=user.email,
		phone=user.phone,
		role=user.role,
		enrolled_packages=[EnrolledPackageOut.model_validate(item) for item in enrollments],
		created_at=user.created_at,
	)

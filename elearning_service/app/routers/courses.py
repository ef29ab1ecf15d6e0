from __future__ import annotations

from logging import getLogger

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy import func, select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession

from ..catalogue import DEFAULT_COURSES
from ..database import get_db
from ..models import Course
from ..schemas import (
	CourseCreate,
	CourseCreatedResponse,
	CourseEnvelope,
	CourseListResponse,
	CourseOut,
	CourseUpdate,
	MessageResponse,
)
from ..security import require_admin


logger = getLogger(__name__)

router = APIRouter(prefix="/api/courses", tags=["courses"])

COURSE_NOT_FOUND = "Course not found."


def _fallback_courses() -> list[CourseOut]:
	return [CourseOut(order=index, **entry) for index, entry in enumerate(DEFAULT_COURSES)]


async def _seed_default_courses(db: AsyncSession) -> None:
	db.add_all(Course(order=index, **entry) for index, entry in enumerate(DEFAULT_COURSES))
	await db.commit()
	logger.info("Seeded %d default courses", len(DEFAULT_COURSES))


async def _active_courses(db: AsyncSession) -> list[Course]:
	stmt = select(Course).where(Course.is_active.is_(True)).order_by(Course.order, Course.created_at, Course.id)
	return list((await db.scalars(stmt)).all())


async def _get_course_or_404(db: AsyncSession, course_id: int) -> Course:
	course = await db.get(Course, course_id)
	if not course:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=COURSE_NOT_FOUND)
	return course


@router.get("", response_model=CourseListResponse)
@router.get("/", response_model=CourseListResponse, include_in_schema=False)
async def list_courses(db: AsyncSession = Depends(get_db)) -> CourseListResponse:
	try:
		# seed only into a completely empty table so deactivated courses stay deactivated
		total = await db.scalar(select(func.count()).select_from(Course))
		if not total:
			await _seed_default_courses(db)
		courses = await _active_courses(db)
	except SQLAlchemyError:
		logger.exception("Course listing failed, serving default catalogue")
		await db.rollback()
		return CourseListResponse(courses=_fallback_courses(), source="fallback")

	return CourseListResponse(courses=[CourseOut.model_validate(c) for c in courses], source="db")


@router.get("/{course_id}", response_model=CourseEnvelope)
async def get_course(course_id: int, db: AsyncSession = Depends(get_db)) -> CourseEnvelope:
	course = await _get_course_or_404(db, course_id)
	if not course.is_active:
		raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=COURSE_NOT_FOUND)
	return CourseEnvelope(course=CourseOut.model_validate(course))


@router.post("", response_model=CourseCreatedResponse, status_code=status.HTTP_201_CREATED)
@router.post("/", response_model=CourseCreatedResponse, status_code=status.HTTP_201_CREATED, include_in_schema=False)
async def create_course(
	data: CourseCreate,
	db: AsyncSession = Depends(get_db),
	_admin=Depends(require_admin),
) -> CourseCreatedResponse:
	course = Course(**data.model_dump(mode="json"))
	db.add(course)
	await db.commit()
	await db.refresh(course)
	logger.info("Course created id=%s name=%s", course.id, course.name)
	return CourseCreatedResponse(message="Course created.", course=CourseOut.model_validate(course))


@router.put("/{course_id}", response_model=CourseEnvelope)
async def update_course(
	course_id: int,
	data: CourseUpdate,
	db: AsyncSession = Depends(get_db),
	_admin=Depends(require_admin),
) -> CourseEnvelope:
	course = await _get_course_or_404(db, course_id)
	for field, value in data.model_dump(mode="json", exclude_unset=True, exclude_none=True).items():
		setattr(course, field, value)
	await db.commit()
	await db.refresh(course)
	return CourseEnvelope(course=CourseOut.model_validate(course))


@router.delete("/{course_id}", response_model=MessageResponse)
async def deactivate_course(
	course_id: int,
	db: AsyncSession = Depends(get_db),
	_admin=Depends(require_admin),
) -> MessageResponse:
	course = await _get_course_or_404(db, course_id)
	course.is_active = False
	await db.commit()
	logger.info("Course deactivated id=%s", course.id)
	return MessageResponse(message="Course deactivated.")

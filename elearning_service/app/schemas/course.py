from __future__ import annotations

from datetime import datetime
from typing import Literal

from pydantic import BaseModel, ConfigDict, Field

from ..models import CourseLevel


class CourseOut(BaseModel):
	# id and created_at are absent for unsaved fallback entries
	id: int | None = None
	name: str
	tag: str
	thumbnail_url: str = ""
	thumbnail_public_id: str = ""
	description: str = ""
	level: CourseLevel = CourseLevel.ALL_LEVELS
	is_active: bool = True
	order: int = 0
	created_at: datetime | None = None

	model_config = ConfigDict(from_attributes=True)


class CourseCreate(BaseModel):
	name: str = Field(min_length=1, max_length=200)
	tag: str = Field(min_length=1, max_length=50)
	description: str = ""
	level: CourseLevel = CourseLevel.ALL_LEVELS
	thumbnail_url: str = ""
	thumbnail_public_id: str = ""
	order: int = 0


class CourseUpdate(BaseModel):
	name: str | None = Field(default=None, min_length=1, max_length=200)
	tag: str | None = Field(default=None, min_length=1, max_length=50)
	description: str | None = None
	level: CourseLevel | None = None
	thumbnail_url: str | None = None
	thumbnail_public_id: str | None = None
	order: int | None = None
	is_active: bool | None = None


class CourseListResponse(BaseModel):
	courses: list[CourseOut]
	source: Literal["db", "fallback"] = "db"


class CourseEnvelope(BaseModel):
	course: CourseOut


class CourseCreatedResponse(BaseModel):
	message: str
	course: CourseOut


class MessageResponse(BaseModel):
	message: str

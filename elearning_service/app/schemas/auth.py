from __future__ import annotations

from datetime import datetime

from pydantic import BaseModel, ConfigDict, EmailStr, Field, field_validator

PHONE_PATTERN = r"^\d{10,15}$"


def _reject_control_chars(value: str | None) -> str | None:
	if value is not None and any(ord(ch) < 32 or ord(ch) == 127 for ch in value):
		raise ValueError("Name must not contain control characters")
	return value


class UserCreate(BaseModel):
	name: str = Field(min_length=1, max_length=100)
	email: EmailStr
	phone: str = Field(pattern=PHONE_PATTERN, description="10-15 digits, no separators")
	password: str = Field(min_length=6, max_length=128)

	@field_validator("name", "phone", mode="before")
	@classmethod
	def _strip(cls, value):
		return value.strip() if isinstance(value, str) else value

	@field_validator("name")
	@classmethod
	def _single_line_name(cls, value):
		return _reject_control_chars(value)


class LoginInput(BaseModel):
	email: EmailStr
	password: str = Field(min_length=1)


class UserUpdate(BaseModel):
	name: str | None = Field(default=None, min_length=1, max_length=100)
	phone: str | None = Field(default=None, pattern=PHONE_PATTERN)

	@field_validator("name", "phone", mode="before")
	@classmethod
	def _strip(cls, value):
		return value.strip() if isinstance(value, str) else value

	@field_validator("name")
	@classmethod
	def _single_line_name(cls, value):
		return _reject_control_chars(value)


class EnrolledPackageOut(BaseModel):
	package_id: int
	package_name: str
	amount: int
	payment_id: str | None = None
	enrolled_at: datetime

	model_config = ConfigDict(from_attributes=True)


class UserOut(BaseModel):
	id: int
	name: str
	email: EmailStr
	phone: str
	role: str
	enrolled_packages: list[EnrolledPackageOut] = []
	created_at: datetime


class AuthResponse(BaseModel):
	message: str
	access_token: str
	token_type: str = "bearer"
	user: UserOut


class UserEnvelope(BaseModel):
	user: UserOut


class ProfileUpdateResponse(BaseModel):
	message: str
	user: UserOut

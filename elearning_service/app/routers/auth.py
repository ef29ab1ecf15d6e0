from logging import getLogger

from fastapi import APIRouter, BackgroundTasks, Depends, HTTPException, status
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from common import get_password_hash, utcnow, verify_password

from ..database import get_db
from ..mailer import Mailer, get_mailer
from ..models import User, UserRole
from ..rate_limits import auth_rate_limit
from ..schemas import (
	AuthResponse,
	LoginInput,
	ProfileUpdateResponse,
	UserCreate,
	UserEnvelope,
	UserUpdate,
)
from ..security import create_access_token, get_current_user
from ..services import build_user_out


logger = getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["auth"], dependencies=[Depends(auth_rate_limit)])

EMAIL_TAKEN = "Email already registered. Please log in."
INVALID_CREDENTIALS = "Invalid email or password."


@router.post("/register", response_model=AuthResponse, status_code=status.HTTP_201_CREATED)
async def register(
	user_in: UserCreate,
	background_tasks: BackgroundTasks,
	db: AsyncSession = Depends(get_db),
	mailer: Mailer = Depends(get_mailer),
) -> AuthResponse:
	email = user_in.email.lower()

	existing = await db.scalar(select(User.id).where(User.email == email))
	if existing:
		raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=EMAIL_TAKEN)

	user = User(
		name=user_in.name,
		email=email,
		phone=user_in.phone,
		hashed_password=get_password_hash(user_in.password),
		role=UserRole.STUDENT.value,
	)
	db.add(user)
	try:
		await db.commit()
	except IntegrityError:
		await db.rollback()
		raise HTTPException(status_code=status.HTTP_409_CONFLICT, detail=EMAIL_TAKEN)
	await db.refresh(user)

	logger.info("User registered id=%s", user.id)
	background_tasks.add_task(mailer.send_welcome_email, user.name, user.email)

	return AuthResponse(
		message="Account created successfully.",
		access_token=create_access_token(user.id),
		user=await build_user_out(db, user),
	)


@router.post("/login", response_model=AuthResponse)
async def login(data: LoginInput, db: AsyncSession = Depends(get_db)) -> AuthResponse:
	user = await db.scalar(select(User).where(User.email == data.email.lower()))
	if not user or not user.is_active or not verify_password(data.password, user.hashed_password):
		raise HTTPException(status_code=status.HTTP_401_UNAUTHORIZED, detail=INVALID_CREDENTIALS)

	user.last_login_at = utcnow()
	await db.commit()
	await db.refresh(user)

	return AuthResponse(
		message="Login successful.",
		access_token=create_access_token(user.id),
		user=await build_user_out(db, user),
	)


@router.get("/me", response_model=UserEnvelope)
async def me(
	current_user: User = Depends(get_current_user),
	db: AsyncSession = Depends(get_db),
) -> UserEnvelope:
	return UserEnvelope(user=await build_user_out(db, current_user))


@router.put("/me", response_model=ProfileUpdateResponse)
async def update_me(
	data: UserUpdate,
	current_user: User = Depends(get_current_user),
	db: AsyncSession = Depends(get_db),
) -> ProfileUpdateResponse:
	changes = data.model_dump(exclude_unset=True, exclude_none=True)
	for field, value in changes.items():
		setattr(current_user, field, value)
	if changes:
		await db.commit()
		await db.refresh(current_user)

	return ProfileUpdateResponse(message="Profile updated.", user=await build_user_out(db, current_user))

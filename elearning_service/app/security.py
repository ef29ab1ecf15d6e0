from datetime import timedelta

from fastapi import Depends, HTTPException, status
from fastapi.security import HTTPAuthorizationCredentials
from sqlalchemy.ext.asyncio import AsyncSession

from common import bearer_scheme, decode_access_token, unauthorized
from common import create_access_token as _encode_access_token
from common.security import NOT_AUTHENTICATED

from .config import get_settings
from .database import get_db
from .models import User

INACTIVE_USER = "User no longer exists or is inactive."
ADMINS_ONLY = "Access denied. Admins only."


def create_access_token(user_id: int) -> str:
	settings = get_settings()
	return _encode_access_token(
		str(user_id),
		settings.jwt_secret,
		settings.jwt_algorithm,
		expires_delta=timedelta(minutes=settings.access_token_expire_minutes),
	)


async def get_current_user(
	credentials: HTTPAuthorizationCredentials | None = Depends(bearer_scheme),
	db: AsyncSession = Depends(get_db),
) -> User:
	if credentials is None or not credentials.credentials:
		raise unauthorized(NOT_AUTHENTICATED)

	settings = get_settings()
	user_id = decode_access_token(credentials.credentials, settings.jwt_secret, settings.jwt_algorithm)

	user = await db.get(User, user_id)
	if not user or not user.is_active:
		raise unauthorized(INACTIVE_USER)
	return user


async def require_admin(current_user: User = Depends(get_current_user)) -> User:
	if not current_user.is_admin:
		raise HTTPException(status_code=status.HTTP_403_FORBIDDEN, detail=ADMINS_ONLY)
	return current_user

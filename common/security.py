"""Token and password helpers shared by the platform services."""
from datetime import datetime, timedelta, timezone

from fastapi import HTTPException, status
from fastapi.security import HTTPBearer
from jose import ExpiredSignatureError, JWTError, jwt
from passlib.context import CryptContext


# auto_error is off so a missing header gets the same 401 body as a bad token
bearer_scheme = HTTPBearer(auto_error=False)

pwd_context = CryptContext(schemes=["argon2"], deprecated="auto")

NOT_AUTHENTICATED = "Not authenticated. Please log in."
SESSION_EXPIRED = "Session expired. Please log in again."
INVALID_TOKEN = "Invalid token. Please log in again."


def verify_password(plain_password: str, hashed_password: str) -> bool:
	return pwd_context.verify(plain_password, hashed_password)


def get_password_hash(password: str) -> str:
	return pwd_context.hash(password)


def unauthorized(detail: str) -> HTTPException:
	return HTTPException(
		status_code=status.HTTP_401_UNAUTHORIZED,
		detail=detail,
		headers={"WWW-Authenticate": "Bearer"},
	)


def create_access_token(
	subject: str,
	jwt_secret: str,
	jwt_algorithm: str = "HS256",
	*,
	expires_delta: timedelta,
) -> str:
	"""
	Issue a signed access token.

	Args:
		subject: Token subject (user id)
		jwt_secret: Signing key
		jwt_algorithm: Signing algorithm
		expires_delta: Token lifetime

	Returns:
		Encoded JWT with ``sub``, ``type`` and ``exp`` claims
	"""
	expire = datetime.now(timezone.utc) + expires_delta
	payload = {"sub": subject, "type": "access", "exp": int(expire.timestamp())}
	return jwt.encode(payload, jwt_secret, algorithm=jwt_algorithm)


def decode_access_token(
	token: str,
	jwt_secret: str,
	jwt_algorithm: str = "HS256",
) -> int:
	"""
	Decode and validate an access token.

	Args:
		token: JWT from the Authorization header
		jwt_secret: Signing key
		jwt_algorithm: Signing algorithm

	Returns:
		The user id stored in the ``sub`` claim

	Raises:
		HTTPException: 401 if the token is expired, malformed or of the wrong type
	"""
	try:
		payload = jwt.decode(token, jwt_secret, algorithms=[jwt_algorithm])
	except ExpiredSignatureError:
		raise unauthorized(SESSION_EXPIRED)
	except JWTError:
		raise unauthorized(INVALID_TOKEN)

	if payload.get("type") != "access":
		raise unauthorized(INVALID_TOKEN)

	try:
		return int(payload.get("sub"))
	except (TypeError, ValueError):
		raise unauthorized(INVALID_TOKEN)

from datetime import datetime, timedelta, timezone
import logging
import uuid

from fastapi import Depends, Request, HTTPException, status
from jose import jwt, JWTError
import bcrypt

from config import JWT_SECRET, JWT_ALGORITHM, JWT_EXPIRY_HOURS
from dependencies import get_identity

logger = logging.getLogger(__name__)


def hash_password(password: str) -> str:
    """Hash a plain-text password using bcrypt."""
    # Ensure it doesn't exceed 72 bytes to prevent bcrypt ValueError
    pw_bytes = password.encode('utf-8')[:72]
    hashed = bcrypt.hashpw(pw_bytes, bcrypt.gensalt())
    return hashed.decode('utf-8')


def verify_password(plain_password: str, hashed_password: str) -> bool:
    """Verify a plain-text password against a bcrypt hash."""
    try:
        pw_bytes = plain_password.encode('utf-8')[:72]
        hash_bytes = hashed_password.encode('utf-8')
        return bcrypt.checkpw(pw_bytes, hash_bytes)
    except ValueError as e:
        logger.warning(f"Bcrypt verification error: {e}")
        return False


def create_token(data: dict, secret: str = JWT_SECRET) -> str:
    """Create a JWT token with an expiry claim and a unique JTI."""
    to_encode = data.copy()
    expire = datetime.now(timezone.utc) + timedelta(hours=JWT_EXPIRY_HOURS)
    jti = str(uuid.uuid4())
    to_encode.update({"exp": expire, "jti": jti})
    return jwt.encode(to_encode, secret, algorithm=JWT_ALGORITHM)


def verify_token(token: str, secret: str = JWT_SECRET) -> dict | None:
    """Decode and verify a JWT token. Returns the payload or None on failure."""
    try:
        # Supabase tokens carry aud="authenticated"; the signature is what we trust
        return jwt.decode(token, secret, algorithms=[JWT_ALGORITHM], options={"verify_aud": False})
    except JWTError:
        return None


def _unauthorized(detail: str) -> HTTPException:
    return HTTPException(
        status_code=status.HTTP_401_UNAUTHORIZED,
        detail=detail,
        headers={"WWW-Authenticate": "Bearer"},
    )


def get_bearer_token(request: Request) -> str:
    """Extract the Bearer token from the Authorization header or raise 401."""
    auth_header = request.headers.get("Authorization")
    if not auth_header or not auth_header.startswith("Bearer "):
        raise _unauthorized("Missing or invalid Authorization header")
    return auth_header.split(" ", 1)[1]


async def get_current_user(request: Request, identity=Depends(get_identity)) -> dict:
    """
    FastAPI dependency — resolves the Bearer token through the identity
    provider and returns the user ({"id", "email"}).
    Raises HTTP 401 if the token is missing, invalid or signed out.
    """
    token = get_bearer_token(request)
    user = await identity.get_user(token)
    if user is None:
        raise _unauthorized("Invalid or expired token")
    return user

"""
identity_service.py — Sign-up, sign-in and token resolution.

Two providers share one async interface: Supabase Auth for production and a
local bcrypt/JWT provider for development and tests. Failures come back in
AuthResult.error; nothing here raises into the route layer.
"""

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass

import supabase_client
from auth import hash_password, verify_password, create_token, verify_token
from services.table_service import Table, TableError

logger = logging.getLogger(__name__)

MIN_PASSWORD_LENGTH = 6


@dataclass
class AuthResult:
    user: dict | None = None
    access_token: str | None = None
    error: str | None = None

    @property
    def ok(self) -> bool:
        return self.error is None


class IdentityProvider(ABC):
    """Abstract base class for identity providers."""

    @property
    @abstractmethod
    def name(self) -> str:
        ...

    @property
    @abstractmethod
    def ready(self) -> bool:
        """True once the provider can serve sign-in requests."""
        ...

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthResult:
        ...

    @abstractmethod
    async def sign_up(self, email: str, password: str) -> AuthResult:
        ...

    @abstractmethod
    async def sign_out(self, access_token: str) -> None:
        ...

    @abstractmethod
    async def get_user(self, access_token: str) -> dict | None:
        """Resolve a bearer token to {"id", "email"}, or None."""
        ...


class SupabaseIdentity(IdentityProvider):
    """Supabase Auth. Tokens are verified locally when the JWT secret is known."""

    def __init__(self, jwt_secret: str = ""):
        self.jwt_secret = jwt_secret

    @property
    def name(self) -> str:
        return "supabase"

    @property
    def ready(self) -> bool:
        return supabase_client.is_supabase_configured()

    @staticmethod
    def _user(user) -> dict:
        return {"id": str(user.id), "email": user.email}

    @staticmethod
    def _message(error: Exception) -> str:
        return getattr(error, "message", None) or str(error)

    async def sign_in(self, email, password):
        try:
            res = await supabase_client.sign_in_user(email, password)
        except Exception as e:
            logger.info(f"Sign-in failed for {email}: {e}")
            return AuthResult(error=self._message(e))
        token = res.session.access_token if res.session else None
        return AuthResult(user=self._user(res.user), access_token=token)

    async def sign_up(self, email, password):
        try:
            res = await supabase_client.sign_up_user(email, password)
        except Exception as e:
            logger.info(f"Sign-up failed for {email}: {e}")
            return AuthResult(error=self._message(e))
        if res.user is None:
            return AuthResult(error="Sign-up did not return a user")
        # No session until the address is confirmed, when confirmation is enabled
        token = res.session.access_token if res.session else None
        return AuthResult(user=self._user(res.user), access_token=token)

    async def sign_out(self, access_token):
        try:
            await supabase_client.sign_out_user(access_token)
        except Exception as e:
            logger.warning(f"Sign-out failed: {e}")

    async def get_user(self, access_token):
        if self.jwt_secret:
            payload = verify_token(access_token, secret=self.jwt_secret)
            if not payload or not payload.get("sub"):
                return None
            return {"id": payload["sub"], "email": payload.get("email")}

        try:
            res = await supabase_client.get_user_from_token(access_token)
        except Exception as e:
            logger.info(f"Token lookup failed: {e}")
            return None
        if not res or not res.user:
            return None
        return self._user(res.user)


class LocalIdentity(IdentityProvider):
    """Users in a local table, bcrypt hashes, HS256 tokens revocable by jti."""

    def __init__(self, users: Table):
        self.users = users
        self._revoked: set[str] = set()

    @property
    def name(self) -> str:
        return "local"

    @property
    def ready(self) -> bool:
        return True

    @staticmethod
    def _session_for(row: dict) -> AuthResult:
        user = {"id": row["id"], "email": row["email"]}
        token = create_token({"sub": user["id"], "email": user["email"]})
        return AuthResult(user=user, access_token=token)

    async def sign_up(self, email, password):
        email = (email or "").strip().lower()
        if not email or not password:
            return AuthResult(error="Email and password are required")
        if len(password) < MIN_PASSWORD_LENGTH:
            return AuthResult(error=f"Password should be at least {MIN_PASSWORD_LENGTH} characters")
        try:
            if self.users.select(filters={"email": email}):
                return AuthResult(error="User already registered")
            row = self.users.insert({"email": email, "hashed_password": hash_password(password)})
        except TableError as e:
            logger.error(f"Sign-up failed for {email}: {e}")
            return AuthResult(error=str(e))
        return self._session_for(row)

    async def sign_in(self, email, password):
        email = (email or "").strip().lower()
        try:
            rows = self.users.select(filters={"email": email})
        except TableError as e:
            logger.error(f"Sign-in lookup failed for {email}: {e}")
            return AuthResult(error=str(e))
        if not rows or not verify_password(password or "", rows[0]["hashed_password"]):
            logger.info(f"Invalid credentials for {email}")
            return AuthResult(error="Invalid login credentials")
        return self._session_for(rows[0])

    async def sign_out(self, access_token):
        payload = verify_token(access_token)
        if payload and payload.get("jti"):
            self._revoked.add(payload["jti"])

    async def get_user(self, access_token):
        payload = verify_token(access_token)
        if payload is None or payload.get("jti") in self._revoked:
            return None
        try:
            rows = self.users.select(filters={"id": payload.get("sub")})
        except TableError as e:
            logger.error(f"User lookup failed: {e}")
            return None
        if not rows:
            return None
        return {"id": rows[0]["id"], "email": rows[0]["email"]}

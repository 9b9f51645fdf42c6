# ---------- routes/auth_routes.py ----------
"""
Auth routes. The configured identity provider (Supabase Auth or the local
bcrypt/JWT provider) does the work; errors come back as user-facing messages.
"""
from fastapi import APIRouter, Depends, HTTPException, Request
from pydantic import BaseModel

from auth import get_current_user, get_bearer_token
from dependencies import get_identity, get_sessions

router = APIRouter(prefix="/api/v1/auth", tags=["Auth"])


# ── Pydantic schemas ──────────────────────────────────────────────
class AuthRequest(BaseModel):
    email: str
    password: str


def _session_payload(result) -> dict:
    return {
        "status": "success",
        "data": {"token": result.access_token, "user": result.user},
    }


# ── Routes ────────────────────────────────────────────────────────
@router.get("/status")
async def auth_status(identity=Depends(get_identity)):
    """Whether the identity provider is ready to take sign-ins."""
    return {"status": "success", "data": {"provider": identity.name, "ready": identity.ready}}


@router.post("/signup")
async def signup(body: AuthRequest, identity=Depends(get_identity)):
    result = await identity.sign_up(body.email, body.password)
    if not result.ok:
        raise HTTPException(status_code=400, detail=result.error)
    return _session_payload(result)


@router.post("/login")
async def login(body: AuthRequest, identity=Depends(get_identity)):
    """Authenticate with email + password."""
    result = await identity.sign_in(body.email, body.password)
    if not result.ok:
        raise HTTPException(status_code=401, detail=result.error)
    return _session_payload(result)


@router.get("/me")
async def me(user: dict = Depends(get_current_user)):
    """Return the current user from the token."""
    return {"status": "success", "data": user}


@router.post("/logout")
async def logout(
    request: Request,
    user: dict = Depends(get_current_user),
    identity=Depends(get_identity),
    sessions=Depends(get_sessions),
):
    """Sign out and forget the in-memory reading list for this user."""
    await identity.sign_out(get_bearer_token(request))
    sessions.drop(user["id"])
    return {"status": "success", "data": {"message": "Logged out"}}

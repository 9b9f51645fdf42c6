# supabase_client.py — Supabase client initialization and Auth helpers

from supabase import create_client, Client
from config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, SUPABASE_ANON_KEY

# Global Supabase client instances
_supabase_admin: Client = None
_supabase_client: Client = None

def get_supabase_admin() -> Client:
    """
    Get Supabase client with service role key (admin privileges).
    Used for sign-out, which revokes a user's refresh tokens.
    """
    global _supabase_admin

    if _supabase_admin is None:
        if not SUPABASE_URL or not SUPABASE_SERVICE_ROLE_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY must be set in environment variables")

        _supabase_admin = create_client(SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY)

    return _supabase_admin

def get_supabase_client() -> Client:
    """
    Get Supabase client with anonymous key (limited permissions).
    Used for password sign-in/sign-up on behalf of a user.
    """
    global _supabase_client

    if _supabase_client is None:
        if not SUPABASE_URL or not SUPABASE_ANON_KEY:
            raise ValueError("SUPABASE_URL and SUPABASE_ANON_KEY must be set in environment variables")

        _supabase_client = create_client(SUPABASE_URL, SUPABASE_ANON_KEY)

    return _supabase_client

def is_supabase_configured() -> bool:
    """Check if Supabase is properly configured with required environment variables."""
    return bool(SUPABASE_URL and SUPABASE_SERVICE_ROLE_KEY and SUPABASE_ANON_KEY)

# Authentication helpers
async def sign_up_user(email: str, password: str, metadata: dict = None):
    """Register a new user with Supabase Auth."""
    supabase = get_supabase_client()
    return supabase.auth.sign_up({
        "email": email,
        "password": password,
        "options": {
            "data": metadata or {}
        }
    })

async def sign_in_user(email: str, password: str):
    """Sign in a user with Supabase Auth."""
    supabase = get_supabase_client()
    return supabase.auth.sign_in_with_password({
        "email": email,
        "password": password
    })

async def sign_out_user(access_token: str):
    """Sign out a user by revoking the sessions behind the access token."""
    supabase = get_supabase_admin()
    return supabase.auth.admin.sign_out(access_token)

async def get_user_from_token(access_token: str):
    """Get user information from JWT token."""
    supabase = get_supabase_client()
    return supabase.auth.get_user(access_token)

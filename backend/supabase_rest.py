"""
supabase_rest.py — HTTP-based table client using Supabase's PostgREST API.
Every call is a single request; failures surface as httpx errors.
"""
import httpx
from urllib.parse import quote

from config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, REQUEST_TIMEOUT


def _headers():
    return {
        "apikey": SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}",
        "Content-Type": "application/json",
        "Prefer": "return=representation",
    }


def _eq_filters(filters: dict | None) -> str:
    if not filters:
        return ""
    return "".join(f"&{key}=eq.{quote(str(value))}" for key, value in filters.items())


def sb_select(table: str, filters: dict = None, columns: str = "*", order: str = None) -> list:
    """Select rows with optional equality filters, e.g. order="created_at.desc"."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?select={columns}{_eq_filters(filters)}"
    if order:
        url += f"&order={order}"

    with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
        resp = client.get(url, headers=_headers())
        resp.raise_for_status()
        return resp.json()


def sb_insert(table: str, data: dict) -> dict:
    """Insert a row and return the created record."""
    url = f"{SUPABASE_URL}/rest/v1/{table}"
    with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
        resp = client.post(url, json=data, headers=_headers())
        resp.raise_for_status()
        result = resp.json()
        return result[0] if isinstance(result, list) and result else {}


def sb_update(table: str, filter_col: str, filter_val, data: dict, filters: dict = None) -> dict:
    """Update rows where filter_col = filter_val (and any extra equality filters)."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?{filter_col}=eq.{quote(str(filter_val))}{_eq_filters(filters)}"
    with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
        resp = client.patch(url, json=data, headers=_headers())
        resp.raise_for_status()
        result = resp.json()
        return result[0] if isinstance(result, list) and result else {}


def sb_delete(table: str, filter_col: str, filter_val, filters: dict = None) -> int:
    """Delete rows where filter_col = filter_val. Returns the number of rows removed."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?{filter_col}=eq.{quote(str(filter_val))}{_eq_filters(filters)}"
    with httpx.Client(timeout=REQUEST_TIMEOUT) as client:
        resp = client.delete(url, headers=_headers())
        resp.raise_for_status()
        if not resp.content:
            return 0
        result = resp.json()
        return len(result) if isinstance(result, list) else 0

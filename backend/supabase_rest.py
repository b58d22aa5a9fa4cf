"""
supabase_rest.py — HTTP-based database client using Supabase's PostgREST API.
Async httpx calls; each helper opens its own client unless one is passed in.
"""
import httpx
from urllib.parse import quote

from config import SUPABASE_URL, SUPABASE_SERVICE_ROLE_KEY, REQUEST_TIMEOUT


def _headers(prefer: str = "return=representation"):
    return {
        "apikey": SUPABASE_SERVICE_ROLE_KEY,
        "Authorization": f"Bearer {SUPABASE_SERVICE_ROLE_KEY}",
        "Content-Type": "application/json",
        "Prefer": prefer,
    }


def _eq_filters(filters: dict | None) -> str:
    if not filters:
        return ""
    return "".join(f"&{key}=eq.{quote(str(value))}" for key, value in filters.items())


async def _send(method: str, url: str, client: httpx.AsyncClient | None = None, **kwargs) -> httpx.Response:
    if client is not None:
        resp = await client.request(method, url, **kwargs)
    else:
        async with httpx.AsyncClient(timeout=REQUEST_TIMEOUT) as c:
            resp = await c.request(method, url, **kwargs)
    resp.raise_for_status()
    return resp


def _first(result) -> dict:
    return result[0] if isinstance(result, list) and result else {}


async def sb_select(table: str, filters: dict = None, columns: str = "*", order: str = None,
                    client: httpx.AsyncClient = None) -> list:
    """Select rows from a table with optional equality filters and ordering (e.g. "date.desc")."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?select={columns}{_eq_filters(filters)}"
    if order:
        url += f"&order={order}"
    resp = await _send("GET", url, client, headers=_headers())
    return resp.json()


async def sb_insert(table: str, data: dict, client: httpx.AsyncClient = None) -> dict:
    """Insert a row and return the created record."""
    url = f"{SUPABASE_URL}/rest/v1/{table}"
    resp = await _send("POST", url, client, json=data, headers=_headers())
    return _first(resp.json())


async def sb_update(table: str, filters: dict, data: dict, client: httpx.AsyncClient = None) -> dict:
    """Update rows matching all equality filters and return the first updated record."""
    url = f"{SUPABASE_URL}/rest/v1/{table}?{_eq_filters(filters).lstrip('&')}"
    resp = await _send("PATCH", url, client, json=data, headers=_headers())
    return _first(resp.json())

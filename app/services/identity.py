# app/services/identity.py
"""
Player Identity Resolution

Turns a free-text player query into a canonical hyphenated UUID. Lookups run
in order: the query itself (already a UUID), the LiteBans history table
(newest matching name), then the Mojang profile API.
"""

import asyncio
import logging
import re
from typing import Optional
from urllib.parse import quote

import httpx
from sqlalchemy import column, select, table
from sqlalchemy.exc import SQLAlchemyError

from app.core import config
from app.core.database import Database

logger = logging.getLogger(__name__)

UUID_LIKE_PATTERN = re.compile(r"^[0-9a-fA-F-]{32,36}$")
MOJANG_ID_PATTERN = re.compile(r"^[0-9a-fA-F]{32}$")


class IdentityResolutionError(Exception):
    """A lookup step failed outright (as opposed to finding nothing)."""


class HistoryLookupError(IdentityResolutionError):
    pass


class DirectoryLookupError(IdentityResolutionError):
    pass


def looks_like_uuid(query: str) -> bool:
    return bool(UUID_LIKE_PATTERN.match(query or ""))


def format_uuid(raw_id: str) -> str:
    """Insert hyphens into a 32-digit hex id: 8-4-4-4-12."""
    return f"{raw_id[:8]}-{raw_id[8:12]}-{raw_id[12:16]}-{raw_id[16:20]}-{raw_id[20:]}"


def _history_table():
    return table(config.T_HISTORY, column("id"), column("uuid"), column("name"))


def _find_uuid_in_history_sync(db: Database, name: str) -> Optional[str]:
    history = _history_table()
    stmt = (
        select(history.c.uuid)
        .where(history.c.name.icontains(name, autoescape=True))
        .order_by(history.c.id.desc())
        .limit(1)
    )
    with db.connect() as conn:
        row = conn.execute(stmt).first()
    return row[0] if row else None


async def find_uuid_in_history(db: Database, name: str) -> Optional[str]:
    """Most recent UUID whose recorded name contains ``name`` (case-insensitive)."""
    try:
        return await asyncio.to_thread(_find_uuid_in_history_sync, db, name)
    except SQLAlchemyError as e:
        logger.warning(f"[Identity] History lookup failed for {name!r}: {e}")
        raise HistoryLookupError("history lookup failed") from e


def _directory_client() -> httpx.AsyncClient:
    return httpx.AsyncClient(timeout=config.MOJANG_TIMEOUT_SECONDS)


async def fetch_mojang_uuid(name: str) -> Optional[str]:
    """Ask the Mojang profile API for ``name``. Returns a hyphenated UUID or None."""
    url = config.MOJANG_PROFILE_URL + quote(name, safe="")
    try:
        async with _directory_client() as client:
            response = await client.get(url)
    except httpx.HTTPError as e:
        logger.warning(f"[Identity] Mojang lookup failed for {name!r}: {e}")
        raise DirectoryLookupError("directory lookup failed") from e

    if response.status_code != 200:
        logger.info(f"[Identity] Mojang has no profile for {name!r} ({response.status_code})")
        return None

    try:
        data = response.json()
    except ValueError:
        logger.warning(f"[Identity] Mojang returned a non-JSON body for {name!r}")
        return None

    raw_id = data.get("id") if isinstance(data, dict) else None
    if not isinstance(raw_id, str) or not MOJANG_ID_PATTERN.match(raw_id):
        return None
    return format_uuid(raw_id)


async def resolve_uuid(db: Database, query: str) -> Optional[str]:
    """
    Resolve a player query to a canonical UUID.

    Returns None when the name is unknown both locally and to Mojang.
    Raises IdentityResolutionError when a lookup could not be performed.
    """
    if looks_like_uuid(query):
        return query

    uuid = await find_uuid_in_history(db, query)
    if uuid:
        return uuid

    return await fetch_mojang_uuid(query)

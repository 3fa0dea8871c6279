# app/routers/punishments.py
"""
LiteBans Punishment Routes

Paginated, newest-first listings of bans, mutes and kicks, plus table counts.
All endpoints require a staff token.
"""

from typing import Dict, Optional

from fastapi import APIRouter, Depends, HTTPException, Query, Request

from app.core.auth import require_staff
from app.core.database import Database, get_database
from app.services import identity
from app.services import litebans
from app.services.litebans import RecordKind

router = APIRouter()

QUERY_FAILED = "Query failed. Adjust COL_* env to match your LiteBans schema."
RESOLVE_FAILED = "Failed to resolve name"
STATS_FAILED = "Failed to query stats. Check table names in env."


def get_record_kinds(request: Request) -> Dict[str, RecordKind]:
    return request.app.state.record_kinds


@router.get("/stats")
async def punishment_stats(
    user_info: dict = Depends(require_staff),
    db: Database = Depends(get_database),
    kinds: Dict[str, RecordKind] = Depends(get_record_kinds),
):
    try:
        return await litebans.collect_stats(db, kinds)
    except litebans.StatsQueryError:
        raise HTTPException(status_code=500, detail=STATS_FAILED)


async def _list_kind(
    kind_name: str,
    kinds: Dict[str, RecordKind],
    db: Database,
    q: Optional[str],
    limit: Optional[str],
    offset: Optional[str],
) -> dict:
    kind = kinds[kind_name]
    try:
        rows = await litebans.list_records(db, kind, query=q or "", limit=limit, offset=offset)
    except identity.IdentityResolutionError:
        raise HTTPException(status_code=500, detail=RESOLVE_FAILED)
    except litebans.RecordQueryError:
        raise HTTPException(status_code=500, detail=QUERY_FAILED)
    return {"rows": rows}


# limit/offset stay strings here: out-of-range or junk values are clamped, not rejected.

@router.get("/bans")
async def list_bans(
    q: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    offset: Optional[str] = Query(default=None),
    user_info: dict = Depends(require_staff),
    db: Database = Depends(get_database),
    kinds: Dict[str, RecordKind] = Depends(get_record_kinds),
):
    return await _list_kind("bans", kinds, db, q, limit, offset)


@router.get("/mutes")
async def list_mutes(
    q: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    offset: Optional[str] = Query(default=None),
    user_info: dict = Depends(require_staff),
    db: Database = Depends(get_database),
    kinds: Dict[str, RecordKind] = Depends(get_record_kinds),
):
    return await _list_kind("mutes", kinds, db, q, limit, offset)


@router.get("/kicks")
async def list_kicks(
    q: Optional[str] = Query(default=None),
    limit: Optional[str] = Query(default=None),
    offset: Optional[str] = Query(default=None),
    user_info: dict = Depends(require_staff),
    db: Database = Depends(get_database),
    kinds: Dict[str, RecordKind] = Depends(get_record_kinds),
):
    return await _list_kind("kicks", kinds, db, q, limit, offset)

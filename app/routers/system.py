"""Liveness route; unauthenticated."""

import asyncio
import logging

from fastapi import APIRouter, Depends
from fastapi.responses import JSONResponse
from sqlalchemy.exc import SQLAlchemyError

from app.core.database import Database, get_database

logger = logging.getLogger(__name__)

router = APIRouter()


@router.get("/health")
async def health(db: Database = Depends(get_database)):
    try:
        await asyncio.to_thread(db.ping)
    except SQLAlchemyError as e:
        logger.warning(f"[Health] Database ping failed: {e}")
        return JSONResponse({"ok": False, "error": "db"}, status_code=500)
    return {"ok": True}

# app/routers/auth.py
"""
Staff Authentication Routes

Password login for the single staff account and a token introspection endpoint.
"""

import logging

from fastapi import APIRouter, Depends, HTTPException, Request

from app.core.auth import authenticate, create_access_token, require_staff
from app.services.audit_log import AUDIT_LOGGER_NAME, audit_event

router = APIRouter(prefix="/auth")

audit_logger = logging.getLogger(AUDIT_LOGGER_NAME)


@router.post("/login")
async def login(request: Request):
    try:
        body = await request.json()
    except ValueError:
        body = {}
    if not isinstance(body, dict):
        body = {}

    username = body.get("username")
    password = body.get("password")
    client = request.client.host if request.client else ""

    if not authenticate(username, password):
        actor = username[:64] if isinstance(username, str) else ""
        audit_event(logger=audit_logger, actor=actor, action="login", result="rejected", client=client)
        raise HTTPException(status_code=401, detail="Bad credentials")

    audit_event(logger=audit_logger, actor=username, action="login", result="success", client=client)
    return {"token": create_access_token(username)}


@router.get("/me")
async def me(user_info: dict = Depends(require_staff)):
    return {"ok": True, "user": user_info}

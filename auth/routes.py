"""
Auth API routes — register, login, current user.

Route prefix: {API_PREFIX}/auth
"""

from __future__ import annotations

from typing import Any, Dict

from fastapi import APIRouter, Depends, status
from pydantic import BaseModel

from auth.dependencies import get_auth_service, get_current_user
from auth.models import PublicUser
from auth.service import AuthService

router = APIRouter(tags=["auth"])


# ── Request schemas ────────────────────────────────────────────────────
# Shape only; field rules live in auth.service.


class RegisterRequest(BaseModel):
    name: str
    email: str
    password: str


class LoginRequest(BaseModel):
    email: str
    password: str


# ── Endpoints ──────────────────────────────────────────────────────────


@router.post("/register", status_code=status.HTTP_201_CREATED)
async def register(
    req: RegisterRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Register a new user."""
    result = await service.register(req.name, req.email, req.password)
    return {"success": True, "data": result.model_dump()}


@router.post("/login")
async def login(
    req: LoginRequest,
    service: AuthService = Depends(get_auth_service),
) -> Dict[str, Any]:
    """Login with email + password."""
    result = await service.login(req.email, req.password)
    return {"success": True, "data": result.model_dump()}


@router.get("/user")
async def current_user(
    user: PublicUser = Depends(get_current_user),
) -> Dict[str, Any]:
    """Return the user identified by the bearer token."""
    return {"success": True, "data": {"user": user.model_dump()}}

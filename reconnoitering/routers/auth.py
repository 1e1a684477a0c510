from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request

from ..auth.dependencies import get_db, get_settings, require_user
from ..auth.models import ForgotPasswordRequest, LoginRequest, RegisterRequest, ResetPasswordRequest
from ..auth.passwords import request_reset, reset_password, token_is_valid
from ..auth.users import authenticate, create_user, public_user
from ..config import Settings
from ..search.service import envelope
from ..store.base import Database

router = APIRouter(prefix="/auth", tags=["auth"])


@router.post("/register", status_code=201)
def register(
    body: RegisterRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    user = create_user(db, str(body.email), body.password, body.name, rounds=settings.bcrypt_rounds)
    return envelope(public_user(user))


@router.post("/login")
def login(body: LoginRequest, request: Request, db: Database = Depends(get_db)) -> dict:
    user = authenticate(db, str(body.email), body.password)
    if not user:
        raise HTTPException(status_code=401, detail="Invalid credentials")
    request.session["user"] = user
    return envelope(user)


@router.post("/logout")
def logout(request: Request) -> dict:
    request.session.clear()
    return {"success": True}


@router.get("/me")
def auth_me(user: dict = Depends(require_user)) -> dict:
    return envelope(user)


@router.post("/forgot-password")
def forgot_password(
    body: ForgotPasswordRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    request_reset(db, str(body.email), settings.public_base_url, settings.reset_token_ttl_hours)
    return {
        "success": True,
        "message": "If an account exists for this email, a reset link has been sent.",
    }


@router.get("/reset-password")
def check_reset_token(token: str, db: Database = Depends(get_db)) -> dict:
    return envelope({"valid": token_is_valid(db, token)})


@router.post("/reset-password")
def complete_reset(
    body: ResetPasswordRequest,
    db: Database = Depends(get_db),
    settings: Settings = Depends(get_settings),
) -> dict:
    reset_password(db, body.token, body.password, rounds=settings.bcrypt_rounds)
    return {"success": True, "message": "Password has been reset"}

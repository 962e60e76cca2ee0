from typing import Optional

from fastapi import APIRouter, Depends, Header, HTTPException
from sqlalchemy import func, select
from sqlalchemy.orm import Session

from salon_api.core.api_docs import error_responses
from salon_api.core.config import settings
from salon_api.core.deps import get_db
from salon_api.core.observability import log_event
from salon_api.core.security import verify_password
from salon_api.models.user import User
from salon_api.schemas.auth import LoginIn, LoginOut, LoginUserOut, MeOut

router = APIRouter(prefix="/auth", tags=["auth"])

ADMIN_ID = "admin"
ADMIN_NAME = "Administrateur"


@router.post(
    "/login",
    response_model=LoginOut,
    response_model_exclude_none=True,
    summary="Check credentials",
    description=(
        "Admin credentials come from configuration. Hairdressers log in with their "
        "email as username and their phone number as password. The phone number is "
        "stored as a bcrypt hash and checked against it, never compared in plain text. "
        "No token is issued."
    ),
    responses=error_responses(401, 500),
)
def login(payload: LoginIn, db: Session = Depends(get_db)):
    if payload.username == settings.admin_username and payload.password == settings.admin_password:
        log_event("auth.login", user_id=ADMIN_ID, role="admin")
        return LoginOut(
            success=True,
            user=LoginUserOut(id=ADMIN_ID, role="admin", name=ADMIN_NAME, username=settings.admin_username),
        )

    user = db.execute(
        select(User).where(
            func.lower(User.username) == payload.username.strip().lower(),
            User.is_active.is_(True),
        )
    ).scalar_one_or_none()
    if not user or not verify_password(payload.password, user.password_hash):
        log_event("auth.login_failed", username=payload.username)
        raise HTTPException(status_code=401, detail="Identifiants incorrects")

    log_event("auth.login", user_id=user.id, role=user.role)
    return LoginOut(
        success=True,
        user=LoginUserOut(
            id=user.id,
            role=user.role,
            name=user.name,
            email=user.email,
            hairdresserId=user.hairdresser_id,
        ),
    )


@router.get("/me", response_model=MeOut, response_model_exclude_none=True, summary="Current user", responses=error_responses(401, 404, 500))
def me(
    x_user_id: Optional[str] = Header(default=None),
    db: Session = Depends(get_db),
):
    if not x_user_id:
        raise HTTPException(status_code=401, detail="Non authentifié")
    if x_user_id == ADMIN_ID:
        return MeOut(id=ADMIN_ID, role="admin", name=ADMIN_NAME)

    user = db.get(User, x_user_id)
    if not user:
        raise HTTPException(status_code=404, detail="Utilisateur non trouvé")
    return MeOut(
        id=user.id,
        username=user.username,
        role=user.role,
        name=user.name,
        email=user.email,
        hairdresser_id=user.hairdresser_id,
    )

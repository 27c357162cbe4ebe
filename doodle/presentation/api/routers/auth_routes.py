import logging
import re

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.orm import Session

from doodle.infrastructure.constants import ROLES
from doodle.infrastructure.repositories.user_repository import (
    create_user,
    get_user_by_email,
    get_user_by_id,
    update_profile,
)
from doodle.infrastructure.security.jwt_service import create_access_token
from doodle.infrastructure.security.password_service import hash_password, verify_password
from doodle.presentation.dependencies import get_current_user, get_db
from doodle.presentation.errors import ServiceError
from doodle.presentation.schemas.user_schema import (
    LoginRequest,
    ProfileUpdateRequest,
    RegisterRequest,
    UserOut,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/auth", tags=["Authentication"])

EMAIL_PATTERN = re.compile(r"^[^\s@]+@[^\s@]+\.[^\s@]+$")
MIN_PASSWORD_LENGTH = 6


def _token_for(user) -> str:
    return create_access_token(user_id=user.id, email=user.email, role=user.role)


@router.post("/register", status_code=status.HTTP_201_CREATED)
def register(payload: RegisterRequest, db: Session = Depends(get_db)):
    if not EMAIL_PATTERN.match(payload.email or ""):
        raise HTTPException(status_code=400, detail="Invalid email format")
    if len(payload.password or "") < MIN_PASSWORD_LENGTH:
        raise HTTPException(status_code=400, detail="Password must be at least 6 characters")
    if payload.role not in ROLES:
        raise HTTPException(status_code=400, detail="Role must be either instructor or student")

    try:
        user = create_user(
            db,
            email=payload.email,
            password_hash=hash_password(payload.password),
            role=payload.role,
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
    except ValueError as e:
        raise HTTPException(status_code=400, detail=str(e))
    except Exception as e:
        logger.error(f"Registration failed for {payload.email}: {e}", exc_info=True)
        raise ServiceError("Failed to register user", e)

    return {
        "message": "User registered successfully",
        "token": _token_for(user),
        "user": UserOut.model_validate(user),
    }


@router.post("/login")
def login(payload: LoginRequest, db: Session = Depends(get_db)):
    user = get_user_by_email(db, payload.email)
    if not user or not verify_password(payload.password, user.password_hash):
        logger.warning(f"Failed login attempt for {payload.email}")
        raise HTTPException(status_code=401, detail="Invalid email or password")

    logger.info(f"User {user.id} logged in")
    return {
        "message": "Login successful",
        "token": _token_for(user),
        "user": UserOut.model_validate(user),
    }


@router.get("/me")
def me(current_user: dict = Depends(get_current_user), db: Session = Depends(get_db)):
    user = get_user_by_id(db, current_user["user_id"])
    if not user:
        raise HTTPException(status_code=404, detail="User not found")
    return {"user": UserOut.model_validate(user)}


@router.put("/profile")
def edit_profile(
    payload: ProfileUpdateRequest,
    current_user: dict = Depends(get_current_user),
    db: Session = Depends(get_db),
):
    try:
        user = update_profile(
            db,
            current_user["user_id"],
            first_name=payload.first_name,
            last_name=payload.last_name,
        )
        return {"message": "Profile updated successfully", "user": UserOut.model_validate(user)}
    except ValueError as e:
        raise HTTPException(status_code=404, detail=str(e))
    except Exception as e:
        logger.error(f"Profile update failed for user {current_user['user_id']}: {e}", exc_info=True)
        raise ServiceError("Failed to update profile", e)

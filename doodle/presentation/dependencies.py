import logging

import jwt
from fastapi import Depends, HTTPException, status
from fastapi.security import OAuth2PasswordBearer
from sqlalchemy.orm import Session

from doodle.infrastructure import settings
from doodle.infrastructure.ai.ai_service import CourseAIService
from doodle.infrastructure.ai.llm_client import create_llm_client
from doodle.infrastructure.constants import ROLE_INSTRUCTOR, ROLE_STUDENT
from doodle.infrastructure.db.models.user_model import UserModel
from doodle.infrastructure.db.session import SessionLocal
from doodle.infrastructure.search.search_service import CourseSearchService
from doodle.infrastructure.security.jwt_service import decode_access_token
from doodle.infrastructure.storage.file_storage import FileStorageService

logger = logging.getLogger(__name__)

# auto_error=False so a missing token gets our own 401 message
oauth2_scheme = OAuth2PasswordBearer(tokenUrl="/api/auth/login", auto_error=False)

_storage = FileStorageService(settings.UPLOAD_DIR, settings.PUBLIC_BASE_URL)
_search = CourseSearchService()
_llm_client = create_llm_client()


def get_db():
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_current_user(
    token: str = Depends(oauth2_scheme),
    db: Session = Depends(get_db),
) -> dict:
    if not token:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="Authentication token required",
        )

    try:
        payload = decode_access_token(token)
    except jwt.InvalidTokenError as e:
        logger.warning(f"Token validation failed: {e}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Invalid or expired token",
        )

    user = db.query(UserModel).filter(UserModel.id == payload["id"]).first()
    if not user:
        raise HTTPException(
            status_code=status.HTTP_401_UNAUTHORIZED,
            detail="User not found",
        )

    return {
        "user_id": user.id,
        "email": user.email,
        "role": user.role,
    }


def instructor_required(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user.get("role") != ROLE_INSTRUCTOR:
        logger.warning(f"Instructor access denied for user_id: {current_user.get('user_id')}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Instructor access required",
        )
    return current_user


def student_required(current_user: dict = Depends(get_current_user)) -> dict:
    if current_user.get("role") != ROLE_STUDENT:
        logger.warning(f"Student access denied for user_id: {current_user.get('user_id')}")
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="Student access required",
        )
    return current_user


def get_ai_service() -> CourseAIService:
    return CourseAIService(_llm_client)


def get_storage() -> FileStorageService:
    return _storage


def get_search_service() -> CourseSearchService:
    return _search

import logging
from typing import Optional

from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from doodle.infrastructure.db.models.user_model import UserModel

logger = logging.getLogger(__name__)


def get_user_by_email(db: Session, email: str) -> Optional[UserModel]:
    return db.query(UserModel).filter(UserModel.email == email).first()


def get_user_by_id(db: Session, user_id: int) -> Optional[UserModel]:
    return db.query(UserModel).filter(UserModel.id == user_id).first()


def create_user(
    db: Session,
    *,
    email: str,
    password_hash: str,
    role: str,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> UserModel:
    """Create a new user"""
    try:
        if get_user_by_email(db, email):
            logger.warning(f"Attempt to register duplicate email: {email}")
            raise ValueError("User with this email already exists")

        user = UserModel(
            email=email,
            password_hash=password_hash,
            role=role,
            first_name=first_name,
            last_name=last_name,
        )
        db.add(user)
        db.commit()
        db.refresh(user)
        logger.info(f"Created user {user.id} with role {role}")
        return user

    except IntegrityError as e:
        db.rollback()
        logger.error(f"Database integrity error creating user: {e}")
        raise ValueError("User with this email already exists")
    except ValueError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error creating user: {e}", exc_info=True)
        raise


def update_profile(
    db: Session,
    user_id: int,
    *,
    first_name: Optional[str] = None,
    last_name: Optional[str] = None,
) -> UserModel:
    """Update first/last name; fields left as None are unchanged"""
    try:
        user = get_user_by_id(db, user_id)
        if not user:
            raise ValueError("User not found")

        if first_name is not None:
            user.first_name = first_name
        if last_name is not None:
            user.last_name = last_name
        db.commit()
        db.refresh(user)
        logger.info(f"Updated profile for user {user_id}")
        return user

    except ValueError:
        raise
    except Exception as e:
        db.rollback()
        logger.error(f"Unexpected error updating user {user_id}: {e}", exc_info=True)
        raise

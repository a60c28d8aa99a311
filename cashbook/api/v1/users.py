"""User administration endpoints (ADMIN only). The seeded test account cannot be deleted."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cashbook.api.v1.auth import INTERNAL_ERROR_MESSAGE, require_admin
from cashbook.core.database import get_db
from cashbook.models import User
from cashbook.models.user import is_test_user_email
from cashbook.schemas.auth import CurrentUser
from cashbook.schemas.users import (
    DeletedUser,
    UserDeleteRequest,
    UserDeleteResponse,
    UserInput,
    UserOut,
    UserUpdateInput,
)

logger = logging.getLogger(__name__)

router = APIRouter(dependencies=[Depends(require_admin)])

NOT_FOUND_MESSAGE = "Usuario no encontrado"


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to %s user", action)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE) from e


@router.get("", response_model=list[UserOut])
def list_users(db: Annotated[Session, Depends(get_db)]) -> list[User]:
    """All users, newest first."""
    return db.query(User).order_by(User.created_at.desc()).all()


@router.post("", response_model=UserOut, status_code=status.HTTP_201_CREATED)
def create_user(
    body: UserInput,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    if db.query(User).filter(User.email == body.email).first() is not None:
        raise HTTPException(
            status_code=status.HTTP_400_BAD_REQUEST,
            detail="El email ya está registrado",
        )
    user = User(name=body.name, email=body.email, role=body.role, email_verified=False)
    db.add(user)
    _commit(db, "create")
    db.refresh(user)
    logger.info("User created: id=%s role=%s by user_id=%s", user.id, user.role, admin.id)
    return user


@router.put("/{user_id}", response_model=UserOut)
def update_user(
    user_id: str,
    body: UserUpdateInput,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> User:
    user = db.query(User).filter(User.id == user_id).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    if body.email != user.email:
        taken = db.query(User).filter(User.email == body.email).first()
        if taken is not None:
            raise HTTPException(
                status_code=status.HTTP_400_BAD_REQUEST,
                detail="El email ya está registrado por otro usuario",
            )
    user.name = body.name
    user.email = body.email
    if body.role is not None:
        user.role = body.role
    _commit(db, "update")
    db.refresh(user)
    logger.info("User updated: id=%s role=%s by user_id=%s", user.id, user.role, admin.id)
    return user


@router.delete("", response_model=UserDeleteResponse)
def delete_user(
    body: UserDeleteRequest,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> UserDeleteResponse:
    user = db.query(User).filter(User.id == body.userId).first()
    if user is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    if is_test_user_email(user.email):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail={
                "error": "No se puede eliminar el usuario de pruebas",
                "userEmail": user.email,
            },
        )
    deleted = DeletedUser(id=user.id, email=user.email)
    db.delete(user)
    _commit(db, "delete")
    logger.info("User deleted: id=%s by user_id=%s", deleted.id, admin.id)
    return UserDeleteResponse(message="Usuario eliminado exitosamente", deletedUser=deleted)

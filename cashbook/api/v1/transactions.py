"""Transactions endpoint: readable by any authenticated user, writable only by ADMIN."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException, status
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from cashbook.api.v1.auth import INTERNAL_ERROR_MESSAGE, get_current_user, require_admin
from cashbook.core.database import get_db
from cashbook.models import Transaction
from cashbook.schemas.auth import CurrentUser
from cashbook.schemas.transactions import MessageResponse, TransactionInput, TransactionOut

logger = logging.getLogger(__name__)

router = APIRouter()

NOT_FOUND_MESSAGE = "Transacción no encontrada"


def _get_or_404(db: Session, transaction_id: str) -> Transaction:
    transaction = db.query(Transaction).filter(Transaction.id == transaction_id).first()
    if transaction is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=NOT_FOUND_MESSAGE)
    return transaction


def _commit(db: Session, action: str) -> None:
    try:
        db.commit()
    except SQLAlchemyError as e:
        db.rollback()
        logger.exception("Failed to %s transaction", action)
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE) from e


@router.get("", response_model=list[TransactionOut])
def list_transactions(
    _user: Annotated[CurrentUser, Depends(get_current_user)],
    db: Annotated[Session, Depends(get_db)],
) -> list[Transaction]:
    """All transactions, newest first, with owner name and email. Any authenticated user."""
    return (
        db.query(Transaction)
        .options(joinedload(Transaction.user))
        .order_by(Transaction.date.desc())
        .all()
    )


@router.post("", response_model=TransactionOut, status_code=status.HTTP_201_CREATED)
def create_transaction(
    body: TransactionInput,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> Transaction:
    """Create a transaction owned by the calling admin."""
    transaction = Transaction(
        amount=body.amount,
        concept=body.concept,
        type=body.type,
        date=body.date,
        user_id=admin.id,
    )
    db.add(transaction)
    _commit(db, "create")
    db.refresh(transaction)
    logger.info("Transaction created: id=%s by user_id=%s", transaction.id, admin.id)
    return transaction


@router.put("/{transaction_id}", response_model=TransactionOut)
def update_transaction(
    transaction_id: str,
    body: TransactionInput,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> Transaction:
    transaction = _get_or_404(db, transaction_id)
    transaction.amount = body.amount
    transaction.concept = body.concept
    transaction.type = body.type
    transaction.date = body.date
    _commit(db, "update")
    db.refresh(transaction)
    logger.info("Transaction updated: id=%s by user_id=%s", transaction.id, admin.id)
    return transaction


@router.delete("/{transaction_id}", response_model=MessageResponse)
def delete_transaction(
    transaction_id: str,
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> MessageResponse:
    transaction = _get_or_404(db, transaction_id)
    db.delete(transaction)
    _commit(db, "delete")
    logger.info("Transaction deleted: id=%s by user_id=%s", transaction_id, admin.id)
    return MessageResponse(message="Transacción eliminada exitosamente")

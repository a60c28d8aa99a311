"""Reports endpoints: aggregated totals and the CSV export over all transactions (ADMIN only)."""

import logging
from typing import Annotated

from fastapi import APIRouter, Depends, HTTPException
from fastapi.responses import Response
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session, joinedload

from cashbook.api.v1.auth import INTERNAL_ERROR_MESSAGE, require_admin
from cashbook.core.database import get_db
from cashbook.models import Transaction
from cashbook.schemas.auth import CurrentUser
from cashbook.schemas.reports import ReportSummary
from cashbook.services.reports import summarize, transactions_csv

logger = logging.getLogger(__name__)

router = APIRouter()

CSV_FILENAME = "reporte-transacciones.csv"


@router.get("/summary", response_model=ReportSummary)
def get_summary(
    _admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> ReportSummary:
    """Income, expenses, balance and their percentages across every transaction."""
    return summarize(db.query(Transaction).all())


@router.get("/csv", response_class=Response)
def export_csv(
    admin: Annotated[CurrentUser, Depends(require_admin)],
    db: Annotated[Session, Depends(get_db)],
) -> Response:
    """Download every transaction, newest first, with its owner's name."""
    try:
        transactions = (
            db.query(Transaction)
            .options(joinedload(Transaction.user))
            .order_by(Transaction.date.desc())
            .all()
        )
    except SQLAlchemyError as e:
        logger.exception("CSV export query failed")
        raise HTTPException(status_code=500, detail=INTERNAL_ERROR_MESSAGE) from e
    logger.info("CSV export: rows=%s by user_id=%s", len(transactions), admin.id)
    return Response(
        content=transactions_csv(transactions),
        media_type="text/csv",
        headers={"Content-Disposition": f'attachment; filename="{CSV_FILENAME}"'},
    )

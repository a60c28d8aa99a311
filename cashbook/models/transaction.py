"""ORM model for income/expense records."""

from typing import Literal

from sqlalchemy import CheckConstraint, Column, DateTime, ForeignKey, Numeric, String, func
from sqlalchemy.orm import relationship

from cashbook.models.base import Base, new_id

TransactionType = Literal["INCOME", "EXPENSE"]

TYPE_INCOME: TransactionType = "INCOME"
TYPE_EXPENSE: TransactionType = "EXPENSE"
TRANSACTION_TYPE_VALUES: frozenset[str] = frozenset({TYPE_INCOME, TYPE_EXPENSE})


class Transaction(Base):
    """
    One income or expense. Belongs to exactly one user, visible to every
    authenticated user; only ADMIN may create, edit or delete.
    """

    __tablename__ = "transactions"
    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transactions_amount_positive"),
        CheckConstraint("type IN ('INCOME', 'EXPENSE')", name="ck_transactions_type"),
    )

    id = Column(String(64), primary_key=True, default=new_id)
    amount = Column(Numeric(14, 2), nullable=False)
    concept = Column(String(255), nullable=False)
    type = Column(String(16), nullable=False, index=True)
    date = Column(DateTime(timezone=True), nullable=False, index=True)
    user_id = Column(
        String(64),
        ForeignKey("users.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    created_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
    )
    updated_at = Column(
        DateTime(timezone=True),
        nullable=False,
        server_default=func.now(),
        onupdate=func.now(),
    )

    user = relationship("User", back_populates="transactions")

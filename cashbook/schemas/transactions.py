"""Pydantic schemas for transactions: input validation and API output."""

from datetime import datetime
from decimal import Decimal

from pydantic import BaseModel, Field, field_validator

from cashbook.models.transaction import TransactionType

CONCEPT_MIN_LEN = 3
CONCEPT_MAX_LEN = 255


class TransactionInput(BaseModel):
    """Body for creating or updating a transaction."""

    amount: Decimal = Field(..., description="Positive amount", max_digits=14, decimal_places=2)
    concept: str = Field(..., max_length=CONCEPT_MAX_LEN, description="What the money was for")
    type: TransactionType = Field(..., description="INCOME or EXPENSE")
    date: datetime = Field(..., description="Date of the transaction (ISO 8601)")

    @field_validator("amount")
    @classmethod
    def validate_amount(cls, v: Decimal) -> Decimal:
        if v <= 0:
            raise ValueError("El monto debe ser mayor a 0")
        return v

    @field_validator("concept")
    @classmethod
    def validate_concept(cls, v: str) -> str:
        s = (v or "").strip()
        if len(s) < CONCEPT_MIN_LEN:
            raise ValueError(
                f"El concepto debe tener al menos {CONCEPT_MIN_LEN} caracteres"
            )
        return s


class TransactionOwner(BaseModel):
    name: str
    email: str

    model_config = {"from_attributes": True}


class TransactionOut(BaseModel):
    """Transaction with its owner's name and email."""

    id: str
    amount: float
    concept: str
    type: TransactionType
    date: datetime
    userId: str = Field(validation_alias="user_id")
    createdAt: datetime = Field(validation_alias="created_at")
    user: TransactionOwner | None = None

    model_config = {"from_attributes": True, "populate_by_name": True}


class MessageResponse(BaseModel):
    message: str

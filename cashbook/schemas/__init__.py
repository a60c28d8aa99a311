"""Pydantic request/response schemas."""

from cashbook.schemas.auth import CurrentUser, SessionInfo, SessionStatusResponse
from cashbook.schemas.health import HealthResponse
from cashbook.schemas.reports import ReportSummary
from cashbook.schemas.transactions import TransactionInput, TransactionOut
from cashbook.schemas.users import UserInput, UserOut, UserUpdateInput

__all__ = [
    "CurrentUser",
    "HealthResponse",
    "ReportSummary",
    "SessionInfo",
    "SessionStatusResponse",
    "TransactionInput",
    "TransactionOut",
    "UserInput",
    "UserOut",
    "UserUpdateInput",
]

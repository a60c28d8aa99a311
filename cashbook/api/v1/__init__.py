"""API v1 routes."""

from fastapi import APIRouter

from cashbook.api.v1 import auth, health, reports, transactions, users

router = APIRouter()
router.include_router(health.router, prefix="/health", tags=["health"])
router.include_router(auth.router, prefix="/auth", tags=["auth"])
router.include_router(transactions.router, prefix="/transactions", tags=["transactions"])
router.include_router(users.router, prefix="/users", tags=["users"])
router.include_router(reports.router, prefix="/reports", tags=["reports"])

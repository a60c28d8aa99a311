"""
Seed demo data: an admin, two users, the test account and a few transactions.
Users are inserted when their email is free; transactions are only added when the table is empty.

  python -m cashbook.scripts.seed
"""
import logging
import sys
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from cashbook.core.config import get_settings
from cashbook.core.database import SessionLocal
from cashbook.models import Transaction, User
from cashbook.services.session_issuer import TestSessionIssuer
from cashbook.services.session_store import AuthInfraError, SessionStore

logging.basicConfig(
    level=logging.INFO,
    format="%(asctime)s %(levelname)s %(name)s %(message)s",
    datefmt="%Y-%m-%dT%H:%M:%SZ",
)
logger = logging.getLogger(__name__)

DEMO_USERS = [
    {"id": "1", "name": "Administrador Demo", "email": "admin@example.com", "role": "ADMIN", "phone": "+1234567890"},
    {"id": "2", "name": "Usuario Demo 1", "email": "user1@example.com", "role": "USER", "phone": "+0987654321"},
    {"id": "3", "name": "Usuario Demo 2", "email": "user2@example.com", "role": "USER", "phone": "+1122334455"},
]

# Owners are referenced by email: an existing demo user may carry a different id.
DEMO_TRANSACTIONS = [
    (Decimal("1500.00"), "Salario mensual", "INCOME", "2024-01-15", "admin@example.com"),
    (Decimal("250.00"), "Supermercado", "EXPENSE", "2024-01-16", "admin@example.com"),
    (Decimal("800.00"), "Freelance proyecto", "INCOME", "2024-01-17", "user1@example.com"),
    (Decimal("120.00"), "Gasolina", "EXPENSE", "2024-01-18", "admin@example.com"),
    (Decimal("300.00"), "Restaurante", "EXPENSE", "2024-01-19", "user1@example.com"),
]


def ensure_demo_users(db: Session) -> None:
    """Insert each demo user whose email is not taken yet."""
    for data in DEMO_USERS:
        if db.query(User).filter(User.email == data["email"]).first() is not None:
            continue
        if db.get(User, data["id"]) is not None:
            # Demo id already used by another account: let the model assign one.
            data = {key: value for key, value in data.items() if key != "id"}
        db.add(User(email_verified=True, **data))
    db.commit()
    logger.info("Demo users ensured: %s", len(DEMO_USERS))


def seed_demo_transactions(db: Session) -> int:
    """Add the demo transactions when the table is empty. Returns how many were added."""
    if db.query(Transaction).count() > 0:
        logger.info("Transactions table not empty; skipping demo transactions")
        return 0
    emails = {email for *_, email in DEMO_TRANSACTIONS}
    owner_ids = dict(db.query(User.email, User.id).filter(User.email.in_(emails)).all())
    added = 0
    for amount, concept, kind, day, email in DEMO_TRANSACTIONS:
        owner_id = owner_ids.get(email)
        if owner_id is None:
            logger.warning("Demo owner %s missing; skipping transaction %r", email, concept)
            continue
        db.add(
            Transaction(
                amount=amount,
                concept=concept,
                type=kind,
                date=datetime.fromisoformat(day).replace(tzinfo=UTC),
                user_id=owner_id,
            )
        )
        added += 1
    db.commit()
    logger.info("Demo transactions created: %s", added)
    return added


def main() -> int:
    settings = get_settings()
    db = SessionLocal()
    try:
        ensure_demo_users(db)

        issuer = TestSessionIssuer(
            SessionStore(db),
            expires_in=timedelta(days=settings.SESSION_EXPIRE_DAYS),
            password=settings.TEST_USER_PASSWORD.get_secret_value(),
        )
        issuer.ensure_test_user()
        logger.info("Test account ensured")

        seed_demo_transactions(db)
        return 0
    except (SQLAlchemyError, AuthInfraError) as e:
        db.rollback()
        logger.exception("Seed failed: %s", e)
        return 1
    finally:
        db.close()


if __name__ == "__main__":
    sys.exit(main())

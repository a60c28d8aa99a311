"""Shared helpers for tests that need a real database: in-memory SQLite and a TestClient bound to it."""

from collections.abc import Generator
from datetime import UTC, datetime, timedelta
from decimal import Decimal

from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

from cashbook.core.database import get_db
from cashbook.models import AuthSession, Base, Transaction, User


def make_session_factory() -> sessionmaker:
    """Fresh in-memory SQLite database with every table created."""
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


def bind_app(app: FastAPI, factory: sessionmaker) -> TestClient:
    """Point the app's get_db at factory and return a client that does not follow redirects."""

    def _get_db() -> Generator[Session, None, None]:
        db = factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = _get_db
    return TestClient(app, follow_redirects=False)


def add_user(
    db: Session,
    user_id: str,
    email: str,
    role: str = "USER",
    name: str = "Test Person",
) -> User:
    user = User(id=user_id, email=email, name=name, role=role, email_verified=True)
    db.add(user)
    db.commit()
    return user


def add_session(
    db: Session,
    user_id: str,
    token: str,
    expires_in: timedelta = timedelta(days=1),
) -> AuthSession:
    """Session expiring expires_in from now (negative for an already expired one)."""
    now = datetime.now(UTC)
    session = AuthSession(
        id=f"session-{token}",
        token=token,
        user_id=user_id,
        created_at=now,
        updated_at=now,
        expires_at=now + expires_in,
    )
    db.add(session)
    db.commit()
    return session


def add_transaction(
    db: Session,
    transaction_id: str,
    user_id: str,
    amount: str = "100.00",
    kind: str = "INCOME",
    concept: str = "Salario mensual",
    day: str = "2024-01-15",
) -> Transaction:
    transaction = Transaction(
        id=transaction_id,
        amount=Decimal(amount),
        concept=concept,
        type=kind,
        date=datetime.fromisoformat(day).replace(tzinfo=UTC),
        user_id=user_id,
    )
    db.add(transaction)
    db.commit()
    return transaction

"""ORM model for login sessions (opaque token mapped to a user, with expiry)."""

from sqlalchemy import Column, DateTime, ForeignKey, String, func
from sqlalchemy.orm import relationship

from cashbook.models.base import Base, new_id


class AuthSession(Base):
    """
    Server-side session row. Valid only while now < expires_at.

    token is a bearer credential; never log it.
    """

    __tablename__ = "sessions"

    id = Column(String(64), primary_key=True, default=new_id)
    token = Column(String(255), nullable=False, unique=True, index=True)
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
    expires_at = Column(DateTime(timezone=True), nullable=False, index=True)

    user = relationship("User", back_populates="sessions")

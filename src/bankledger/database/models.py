"""SQLAlchemy models for bankledger database."""

import uuid
from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Boolean,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Profile(Base):
    """Portal user model."""

    __tablename__ = "profiles"

    id = Column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    email = Column(String, unique=True, nullable=False)
    first_name = Column(String, nullable=False)
    last_name = Column(String, nullable=False)
    is_admin = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    accounts = relationship("Account", back_populates="owner")


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    account_number = Column(String, unique=True, nullable=False)
    account_type = Column(String, default="checking", nullable=False)
    balance = Column(Numeric(12, 2), default=0, nullable=False)
    is_frozen = Column(Boolean, default=False, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    version = Column(Integer, default=0, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    owner = relationship("Profile", back_populates="accounts")


class Transaction(Base):
    """Transaction model.

    account_id is a weak reference: deleting a transaction never touches the
    account, and no cascade runs the other way either.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    transaction_type = Column(String, nullable=False)
    description = Column(String, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Card(Base):
    """Payment card model."""

    __tablename__ = "cards"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    card_number = Column(String(16), nullable=False)
    card_type = Column(String, nullable=False)
    expiry_date = Column(String(5), nullable=False)
    cvv = Column(String(3), nullable=False)
    card_holder_name = Column(String, nullable=False)
    is_active = Column(Boolean, default=True, nullable=False)
    daily_limit = Column(Numeric(12, 2), nullable=True)
    transaction_limit = Column(Numeric(12, 2), nullable=True)
    is_frozen = Column(Boolean, default=False, nullable=False)
    freeze_until = Column(Date, nullable=True)
    notifications_enabled = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Notification(Base):
    """Notification model."""

    __tablename__ = "notifications"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    title = Column(String, nullable=False)
    message = Column(String, nullable=False)
    type = Column(String, nullable=True)
    is_read = Column(Boolean, default=False, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class FinancialGoal(Base):
    """Financial goal model."""

    __tablename__ = "financial_goals"

    id = Column(Integer, primary_key=True)
    user_id = Column(String(36), ForeignKey("profiles.id"), nullable=False)
    title = Column(String, nullable=False)
    target_amount = Column(Numeric(12, 2), nullable=False)
    current_amount = Column(Numeric(12, 2), default=0, nullable=False)
    deadline = Column(Date, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

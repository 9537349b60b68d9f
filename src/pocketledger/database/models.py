"""SQLAlchemy models for pocketledger database."""

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
    CheckConstraint,
    UniqueConstraint,
    create_engine,
)
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Account model. Credit card columns are null for other account types."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    account_type = Column(String, nullable=False)
    currency = Column(String, nullable=False, default="INR")
    initial_balance = Column(Numeric(12, 2), nullable=False, default=0)
    current_balance = Column(Numeric(12, 2), nullable=False, default=0)
    status = Column(String, nullable=False, default="active")
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    bill_generation_day = Column(Integer, nullable=True)
    bill_due_day = Column(Integer, nullable=True)
    interest_rate = Column(Numeric(6, 4), nullable=True)
    minimum_payment_percentage = Column(Numeric(6, 4), nullable=True)
    credit_limit = Column(Numeric(12, 2), nullable=True)

    __table_args__ = (UniqueConstraint("owner_id", "name", name="uq_account_owner_name"),)

    bills = relationship("CreditCardBill", back_populates="account")


class Category(Base):
    """Category model."""

    __tablename__ = "categories"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_category_owner_name"),
        UniqueConstraint("owner_id", "display_name", name="uq_category_owner_display_name"),
    )


class Payee(Base):
    """Payee model."""

    __tablename__ = "payees"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False, index=True)
    name = Column(String, nullable=False)
    display_name = Column(String, nullable=False)
    description = Column(String, nullable=True)
    category_hint = Column(String, nullable=True)
    is_active = Column(Boolean, default=True, nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("owner_id", "name", name="uq_payee_owner_name"),
        UniqueConstraint("owner_id", "display_name", name="uq_payee_owner_display_name"),
    )


class Transaction(Base):
    """Transaction model.

    Deposits and withdrawals use ``account_id`` (plus optional payee and
    category); transfers use ``from_account_id`` and ``to_account_id``.
    """

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False, index=True)
    type = Column(String, nullable=False)
    date = Column(Date, nullable=False, index=True)
    status = Column(String, nullable=False, default="completed")
    amount = Column(Numeric(12, 2), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    payee_id = Column(Integer, ForeignKey("payees.id"), nullable=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=True)
    from_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    to_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_transaction_amount_positive"),
        CheckConstraint(
            "(type = 'transfer' AND account_id IS NULL AND payee_id IS NULL "
            "AND category_id IS NULL AND from_account_id IS NOT NULL "
            "AND to_account_id IS NOT NULL) OR "
            "(type IN ('deposit', 'withdrawal') AND account_id IS NOT NULL "
            "AND from_account_id IS NULL AND to_account_id IS NULL)",
            name="ck_transaction_shape",
        ),
    )


class CreditCardBill(Base):
    """Credit card bill model. Status is derived on read, not stored."""

    __tablename__ = "credit_card_bills"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False, index=True)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    billing_period_start = Column(Date, nullable=False)
    billing_period_end = Column(Date, nullable=False)
    bill_generation_date = Column(Date, nullable=False)
    bill_due_date = Column(Date, nullable=False)
    bill_amount = Column(Numeric(12, 2), nullable=False)
    transaction_count = Column(Integer, nullable=False, default=0)
    interest_rate = Column(Numeric(6, 4), nullable=False, default=0)
    minimum_payment_percentage = Column(Numeric(6, 4), nullable=False, default=0)
    is_paid = Column(Boolean, default=False, nullable=False)
    paid_amount = Column(Numeric(12, 2), nullable=True)
    paid_date = Column(Date, nullable=True)
    previous_balance = Column(Numeric(12, 2), nullable=False, default=0)
    late_fee = Column(Numeric(12, 2), nullable=False, default=0)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint(
            "account_id",
            "billing_period_start",
            "billing_period_end",
            name="uq_bill_account_period",
        ),
    )

    account = relationship("Account", back_populates="bills")


class Budget(Base):
    """Monthly budget per category."""

    __tablename__ = "budgets"

    id = Column(Integer, primary_key=True)
    owner_id = Column(Integer, nullable=False, index=True)
    category_id = Column(Integer, ForeignKey("categories.id"), nullable=False)
    month = Column(Date, nullable=False)
    amount = Column(Numeric(12, 2), nullable=False)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    __table_args__ = (
        UniqueConstraint("owner_id", "category_id", "month", name="uq_budget_owner_category_month"),
    )


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine = create_engine(database_url, echo=False)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

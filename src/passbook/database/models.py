"""SQLAlchemy models for passbook database."""

from datetime import datetime, UTC
from sqlalchemy import (
    Column,
    Integer,
    String,
    ForeignKey,
    DateTime,
    Date,
    Numeric,
    Index,
    create_engine,
    event,
)
from sqlalchemy.engine import Engine
from sqlalchemy.orm import declarative_base, relationship, sessionmaker, Session

Base = declarative_base()


def _utcnow() -> datetime:
    return datetime.now(UTC)


class Account(Base):
    """Bank account model."""

    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True)
    name = Column(String, unique=True, nullable=False)
    account_type = Column(String, nullable=False)
    bank_name = Column(String, nullable=True)
    account_number = Column(String, unique=True, nullable=True)
    notes = Column(String, nullable=True)
    opening_balance = Column(Numeric(14, 2), nullable=False, default=0)
    current_balance = Column(Numeric(14, 2), nullable=False, default=0)
    # Bumped on every balance write; guards compare-and-set updates
    version = Column(Integer, nullable=False, default=0)
    created_at = Column(DateTime, default=_utcnow, nullable=False)

    # Relationships
    transactions = relationship(
        "Transaction", back_populates="account", foreign_keys="Transaction.account_id"
    )


class Recipient(Base):
    """Counterparty model. ACCOUNT recipients are unscoped and point at ``linked_account_id``."""

    __tablename__ = "recipients"

    id = Column(Integer, primary_key=True)
    name = Column(String, nullable=False)
    recipient_type = Column(String, nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    linked_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True, unique=True)
    bank_account_no = Column(String, nullable=True)
    ifsc_code = Column(String, nullable=True)
    contact_person = Column(String, nullable=True)
    phone = Column(String, nullable=True)
    email = Column(String, nullable=True)
    address = Column(String, nullable=True)
    gst_number = Column(String, unique=True, nullable=True)
    notes = Column(String, nullable=True)
    created_at = Column(DateTime, default=_utcnow, nullable=False)


class Transaction(Base):
    """Transaction model."""

    __tablename__ = "transactions"

    id = Column(Integer, primary_key=True)
    transaction_type = Column(String, nullable=False)
    amount = Column(Numeric(14, 2), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)
    recipient_id = Column(Integer, ForeignKey("recipients.id"), nullable=True)
    to_account_id = Column(Integer, ForeignKey("accounts.id"), nullable=True)
    status = Column(String, nullable=False)
    transaction_date = Column(Date, nullable=False)
    description = Column(String, nullable=True)
    parent_transaction_id = Column(
        Integer, ForeignKey("transactions.id", ondelete="CASCADE"), nullable=True, unique=True
    )
    created_at = Column(DateTime, default=_utcnow, nullable=False)
    updated_at = Column(DateTime, default=_utcnow, onupdate=_utcnow, nullable=False)

    __table_args__ = (
        Index("ix_transactions_account_date", "account_id", "transaction_date"),
        Index("ix_transactions_type_status", "transaction_type", "status"),
    )

    # Relationships
    account = relationship("Account", back_populates="transactions", foreign_keys=[account_id])
    cash_deposit_details = relationship(
        "CashDepositDetails", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    cheque_details = relationship(
        "ChequeDetails", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    bank_transfer_details = relationship(
        "BankTransferDetails", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    online_transfer_details = relationship(
        "OnlineTransferDetails", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    upi_settlement_details = relationship(
        "UpiSettlementDetails", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    account_transfer_details = relationship(
        "AccountTransferDetails", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )
    bank_charge_details = relationship(
        "BankChargeDetails", uselist=False, cascade="all, delete-orphan", passive_deletes=True
    )


def _transaction_fk() -> Column:
    return Column(
        Integer,
        ForeignKey("transactions.id", ondelete="CASCADE"),
        nullable=False,
        unique=True,
    )


class CashDepositDetails(Base):
    __tablename__ = "cash_deposit_details"

    id = Column(Integer, primary_key=True)
    transaction_id = _transaction_fk()
    deposit_date = Column(Date, nullable=True)
    notes = Column(String, nullable=True)


class ChequeDetails(Base):
    __tablename__ = "cheque_details"

    id = Column(Integer, primary_key=True)
    transaction_id = _transaction_fk()
    # Globally unique across received and given cheques
    cheque_number = Column(String, nullable=False, unique=True)
    issue_date = Column(Date, nullable=True)
    due_date = Column(Date, nullable=True)
    submitted_date = Column(Date, nullable=True)
    cleared_date = Column(Date, nullable=True)
    bounce_charge = Column(Numeric(14, 2), nullable=True)
    bank_name = Column(String, nullable=True)
    notes = Column(String, nullable=True)


class BankTransferDetails(Base):
    __tablename__ = "bank_transfer_details"

    id = Column(Integer, primary_key=True)
    transaction_id = _transaction_fk()
    transfer_date = Column(Date, nullable=True)
    settlement_date = Column(Date, nullable=True)
    transfer_mode = Column(String, nullable=True)
    reference_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)


class OnlineTransferDetails(Base):
    __tablename__ = "online_transfer_details"

    id = Column(Integer, primary_key=True)
    transaction_id = _transaction_fk()
    transfer_date = Column(Date, nullable=True)
    utr_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)


class UpiSettlementDetails(Base):
    __tablename__ = "upi_settlement_details"

    id = Column(Integer, primary_key=True)
    transaction_id = _transaction_fk()
    settlement_date = Column(Date, nullable=True)
    upi_reference = Column(String, nullable=True)
    batch_number = Column(String, nullable=True)
    notes = Column(String, nullable=True)


class AccountTransferDetails(Base):
    __tablename__ = "account_transfer_details"

    id = Column(Integer, primary_key=True)
    transaction_id = _transaction_fk()
    transfer_date = Column(Date, nullable=True)
    transfer_reference = Column(String, nullable=True)
    purpose = Column(String, nullable=True)
    notes = Column(String, nullable=True)


class BankChargeDetails(Base):
    __tablename__ = "bank_charge_details"

    id = Column(Integer, primary_key=True)
    transaction_id = _transaction_fk()
    charge_type = Column(String, nullable=True)
    debit_date = Column(Date, nullable=True)
    charge_amount = Column(Numeric(14, 2), nullable=True)
    narration = Column(String, nullable=True)


def _enable_sqlite_foreign_keys(dbapi_connection, connection_record) -> None:
    cursor = dbapi_connection.cursor()
    cursor.execute("PRAGMA foreign_keys=ON")
    cursor.close()


def create_session_factory(database_url: str) -> sessionmaker[Session]:
    """Create a SQLAlchemy session factory."""
    engine: Engine = create_engine(database_url, echo=False)
    if engine.dialect.name == "sqlite":
        event.listen(engine, "connect", _enable_sqlite_foreign_keys)
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine)

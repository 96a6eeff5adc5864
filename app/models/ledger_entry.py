from sqlalchemy import Column, Integer, String, Numeric, DateTime, ForeignKey, Enum, Index, CheckConstraint
import enum
from app.database import Base


class EntryType(str, enum.Enum):
    """Ledger Entry Types"""
    SEND = "send"        # Sender's view of a transfer
    RECEIVE = "receive"  # Recipient's view of the same transfer
    CHARGE = "charge"    # Card top-up


class EntryStatus(str, enum.Enum):
    """Ledger Entry Status"""
    COMPLETED = "completed"
    PENDING = "pending"
    FAILED = "failed"


class LedgerEntry(Base):
    """Ledger Entry Model

    Append-only, one entry per participant view. A send writes a SEND entry
    owned by the sender and a RECEIVE entry owned by the recipient; both share
    transfer_id, amount, parties, description and created_at.
    Rows are never updated or deleted.
    """
    __tablename__ = "ledger_entries"

    id = Column(Integer, primary_key=True, index=True)
    entry_id = Column(String(36), unique=True, nullable=False, index=True)
    transfer_id = Column(String(36), nullable=False)
    account_id = Column(Integer, ForeignKey("accounts.id"), nullable=False)

    entry_type = Column(
        Enum(EntryType, name="entrytype", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
    )
    status = Column(
        Enum(EntryStatus, name="entrystatus", values_callable=lambda e: [m.value for m in e]),
        nullable=False,
        default=EntryStatus.COMPLETED,
    )

    amount = Column(Numeric(precision=20, scale=2), nullable=False)
    sender_email = Column(String(255))
    recipient_email = Column(String(255))
    description = Column(String(500))

    balance_after = Column(Numeric(precision=20, scale=2), nullable=False)

    created_at = Column(DateTime(timezone=True), nullable=False)

    __table_args__ = (
        CheckConstraint("amount > 0", name="ck_ledger_amount_positive"),
        Index("idx_ledger_account_created", "account_id", "created_at"),
        Index("idx_ledger_sender_email", "sender_email"),
        Index("idx_ledger_recipient_email", "recipient_email"),
        Index("idx_ledger_transfer", "transfer_id"),
    )

    def __repr__(self):
        return f"<LedgerEntry(id={self.entry_id}, account_id={self.account_id}, type={self.entry_type}, amount={self.amount})>"

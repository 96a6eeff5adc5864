"""Account Model - A user's durable cash balance"""
from sqlalchemy import Column, Integer, String, Numeric, DateTime, CheckConstraint
from sqlalchemy.sql import func
from app.database import Base


class Account(Base):
    """Account Model

    One row per user. The integer id is the stable user id carried in
    bearer tokens; email is unique and stored normalized (trimmed, lower-case).
    Balance only changes through AccountStore.apply_delta.
    """
    __tablename__ = "accounts"

    id = Column(Integer, primary_key=True, index=True)
    email = Column(String(255), unique=True, nullable=False, index=True)
    name = Column(String(100), nullable=False)
    balance = Column(Numeric(precision=20, scale=2), default=0, nullable=False)
    created_at = Column(DateTime(timezone=True), server_default=func.now(), nullable=False)
    updated_at = Column(DateTime(timezone=True), server_default=func.now(), onupdate=func.now(), nullable=False)

    __table_args__ = (
        CheckConstraint("balance >= 0", name="ck_account_balance_non_negative"),
    )

    def __repr__(self):
        return f"<Account(id={self.id}, email='{self.email}', balance={self.balance})>"

from sqlalchemy.ext.asyncio import AsyncSession
from sqlalchemy import select, delete, and_
from sqlalchemy.exc import DBAPIError, IntegrityError
from dataclasses import dataclass, field
from decimal import Decimal, InvalidOperation
from datetime import datetime, timedelta, timezone
import json
import logging
import uuid
from typing import Optional, Tuple, Union

from app.config import settings, Settings
from app.models import LedgerEntry, EntryType, EntryStatus, IdempotencyLog
from app.schemas.transfer import SendRequest, ChargeRequest
from app.services.account_store import AccountStore
from app.services.ledger import TransactionLedger
from app.services.errors import (
    LedgerServiceError,
    UnauthenticatedError,
    InvalidAmountError,
    RecipientNotFoundError,
    SelfTransferError,
    InsufficientBalanceError,
    StoreUnavailableError,
    IdempotencyKeyReusedError,
)
from app.utils.emails import normalize_email
from app.utils.idempotency import scope_idempotency_key, fingerprint_request

logger = logging.getLogger(__name__)

TRANSFER_PATH = "/api/v1/transactions"
CENT = Decimal("0.01")


@dataclass
class TransferResult:
    """Outcome of a committed transfer, from the actor's point of view"""
    transfer_id: str
    entry_ids: Tuple[str, ...]
    balance: Decimal
    replayed: bool = field(default=False)

    def to_dict(self) -> dict:
        return {
            "transfer_id": self.transfer_id,
            "entry_ids": list(self.entry_ids),
            "balance": str(self.balance),
        }

    @classmethod
    def from_dict(cls, data: dict, replayed: bool = False) -> "TransferResult":
        return cls(
            transfer_id=data["transfer_id"],
            entry_ids=tuple(data["entry_ids"]),
            balance=Decimal(data["balance"]),
            replayed=replayed,
        )


class TransferService:
    """Transfer Engine - validates, moves balances and writes the ledger as one unit

    Every call to execute_transfer is a single database transaction: it
    either commits balance changes, ledger entries and (optionally) the
    idempotency log together, or rolls all of them back.
    """

    def __init__(self, db: AsyncSession, config: Settings = settings):
        self.db = db
        self.config = config
        self.accounts = AccountStore(db)
        self.ledger = TransactionLedger(db)

    async def execute_transfer(
        self,
        actor_id: int,
        request: Union[SendRequest, ChargeRequest],
        idempotency_key: Optional[str] = None
    ) -> TransferResult:
        """
        Run a send or charge for the authenticated actor.

        With an idempotency key, a request already committed under the same
        key (for this actor) returns the stored result without moving money.

        Raises one of the LedgerServiceError subclasses. StoreUnavailableError
        means the transaction was rolled back; when the failure happened
        during commit only the idempotency key makes a retry safe.
        """
        scoped_key = scope_idempotency_key(actor_id, idempotency_key) if idempotency_key else None
        request_hash = self._fingerprint(request) if scoped_key else None

        try:
            if scoped_key:
                cached = await self._check_idempotency(scoped_key, request_hash)
                if cached:
                    await self.db.rollback()
                    logger.info(f"Replaying transfer {cached.transfer_id} for account {actor_id}")
                    return cached

            if isinstance(request, SendRequest):
                result = await self._send(actor_id, request)
            elif isinstance(request, ChargeRequest):
                result = await self._charge(actor_id, request)
            else:
                raise TypeError(f"Unsupported transfer request: {type(request).__name__}")

            if scoped_key:
                await self._save_idempotency_log(scoped_key, request_hash, result)

            await self.db.commit()

        except LedgerServiceError as e:
            await self.db.rollback()
            logger.warning(f"Transfer rejected for account {actor_id}: {e.code} - {e.message}")
            raise
        except IntegrityError:
            await self.db.rollback()
            if scoped_key:
                # Lost the race against a concurrent request with the same key
                cached = await self._check_idempotency(scoped_key, request_hash)
                if cached:
                    await self.db.rollback()
                    return cached
            logger.error(f"Transfer for account {actor_id} violated a constraint", exc_info=True)
            raise
        except DBAPIError as e:
            await self.db.rollback()
            logger.error(f"Store unavailable during transfer for account {actor_id}: {e}", exc_info=True)
            raise StoreUnavailableError() from e

        logger.info(
            f"Transfer {result.transfer_id} completed for account {actor_id} ({request.type} {request.amount})"
        )
        return result

    def _validate_amount(self, amount) -> Decimal:
        """Amount must be positive, within the ceiling and in whole cents"""
        try:
            amount = amount if isinstance(amount, Decimal) else Decimal(str(amount))
        except InvalidOperation:
            raise InvalidAmountError("Amount must be a number")

        if not amount.is_finite() or amount <= 0:
            raise InvalidAmountError("Amount must be greater than 0")

        ceiling = self.config.MAX_TRANSFER_AMOUNT
        if amount > ceiling:
            raise InvalidAmountError(f"Amount cannot exceed {ceiling}")

        if amount != amount.quantize(CENT):
            raise InvalidAmountError("Amount cannot have more than 2 decimal places")

        return amount.quantize(CENT)

    async def _send(self, actor_id: int, request: SendRequest) -> TransferResult:
        """Debit the sender, credit the recipient and write the send/receive pair"""
        sender = await self.accounts.get(actor_id)
        if not sender:
            raise UnauthenticatedError("User not found")

        amount = self._validate_amount(request.amount)

        recipient_email = normalize_email(request.recipient_email)
        recipient = await self.accounts.find_by_email(recipient_email)
        if not recipient:
            raise RecipientNotFoundError(f"Recipient not found: {recipient_email}")

        if recipient_email == sender.email:
            raise SelfTransferError()

        # CRITICAL: the balance check below must see the locked row, not the
        # value read before the lock
        await self.accounts.lock_accounts([sender.id, recipient.id])

        available = await self.accounts.get_balance(sender.id)
        if available < amount:
            raise InsufficientBalanceError(
                f"Insufficient balance. Available: {available}, Required: {amount}"
            )

        sender_balance = await self.accounts.apply_delta(sender.id, -amount)
        recipient_balance = await self.accounts.apply_delta(recipient.id, amount)

        transfer_id = str(uuid.uuid4())
        created_at = datetime.now(timezone.utc)

        send_entry = LedgerEntry(
            transfer_id=transfer_id,
            account_id=sender.id,
            entry_type=EntryType.SEND,
            status=EntryStatus.COMPLETED,
            amount=amount,
            sender_email=sender.email,
            recipient_email=recipient.email,
            description=request.description,
            balance_after=sender_balance,
            created_at=created_at,
        )
        receive_entry = LedgerEntry(
            transfer_id=transfer_id,
            account_id=recipient.id,
            entry_type=EntryType.RECEIVE,
            status=EntryStatus.COMPLETED,
            amount=amount,
            sender_email=sender.email,
            recipient_email=recipient.email,
            description=request.description,
            balance_after=recipient_balance,
            created_at=created_at,
        )

        entry_ids = await self.ledger.append_pair(send_entry, receive_entry)

        return TransferResult(transfer_id=transfer_id, entry_ids=entry_ids, balance=sender_balance)

    async def _charge(self, actor_id: int, request: ChargeRequest) -> TransferResult:
        """Credit the actor's own balance; no card network is involved"""
        actor = await self.accounts.get(actor_id)
        if not actor:
            raise UnauthenticatedError("User not found")

        amount = self._validate_amount(request.amount)

        await self.accounts.lock_accounts([actor.id])
        balance = await self.accounts.apply_delta(actor.id, amount)

        transfer_id = str(uuid.uuid4())
        entry = LedgerEntry(
            transfer_id=transfer_id,
            account_id=actor.id,
            entry_type=EntryType.CHARGE,
            status=EntryStatus.COMPLETED,
            amount=amount,
            sender_email=actor.email,
            description=request.description or self.config.DEFAULT_CHARGE_DESCRIPTION,
            balance_after=balance,
            created_at=datetime.now(timezone.utc),
        )

        entry_id = await self.ledger.append(entry)

        return TransferResult(transfer_id=transfer_id, entry_ids=(entry_id,), balance=balance)

    def _fingerprint(self, request: Union[SendRequest, ChargeRequest]) -> str:
        """Hash of what the request asks for; 30 and 30.00 hash the same"""
        fields = {
            "type": request.type,
            "amount": f"{Decimal(str(request.amount)).normalize():f}",
            "description": request.description or "",
        }
        if isinstance(request, SendRequest):
            fields["recipient_email"] = normalize_email(request.recipient_email)
        return fingerprint_request(fields)

    async def _check_idempotency(self, scoped_key: str, request_hash: str) -> Optional[TransferResult]:
        """
        Check if a transfer with this key was already committed
        Returns the stored result if found, None otherwise

        Raises IdempotencyKeyReusedError when the key was committed for a
        different request.
        """
        stmt = select(IdempotencyLog).where(
            and_(
                IdempotencyLog.idempotency_key == scoped_key,
                IdempotencyLog.expires_at > datetime.now(timezone.utc)
            )
        )
        result = await self.db.execute(stmt)
        log = result.scalar_one_or_none()

        if log and log.request_hash != request_hash:
            raise IdempotencyKeyReusedError()

        if log and log.response_body:
            return TransferResult.from_dict(json.loads(log.response_body), replayed=True)

        return None

    async def _save_idempotency_log(self, scoped_key: str, request_hash: str, result: TransferResult):
        """Record the result under the key, inside the transfer's own transaction"""
        now = datetime.now(timezone.utc)

        # An expired log with the same key would block the unique index
        await self.db.execute(
            delete(IdempotencyLog).where(
                and_(
                    IdempotencyLog.idempotency_key == scoped_key,
                    IdempotencyLog.expires_at <= now
                )
            )
        )

        log = IdempotencyLog(
            idempotency_key=scoped_key,
            request_path=TRANSFER_PATH,
            request_method="POST",
            request_hash=request_hash,
            response_status=201,
            response_body=json.dumps(result.to_dict()),
            expires_at=now + timedelta(hours=self.config.IDEMPOTENCY_TTL_HOURS)
        )

        self.db.add(log)
        await self.db.flush()

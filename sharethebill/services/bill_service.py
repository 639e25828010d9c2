from __future__ import annotations

import logging
from collections.abc import Callable
from datetime import date, datetime
from decimal import Decimal
from typing import Any, TypeVar

from sharethebill.constants import AMOUNT_EPSILON, METADATA_FIELDS, UTC
from sharethebill.errors import (
    ConflictError,
    NotFoundError,
    PartiallyAppliedError,
    StorageError,
    UnauthorizedError,
    ValidationError,
)
from sharethebill.models import format_amount, to_cents
from sharethebill.models.bill import (
    TERMINAL_BILL_STATUSES,
    Bill,
    BillCreate,
    BillStatus,
    BillSummary,
    Participant,
    ParticipantPayment,
    ParticipantStatus,
    PaymentStatus,
)
from sharethebill.repositories.base import BillRepository
from sharethebill.services.notification_service import NotificationService
from sharethebill.services.profile_service import WalletResolver
from sharethebill.services.split_service import compute_shares
from sharethebill.settings import settings

logger = logging.getLogger(__name__)

T = TypeVar("T")


def _now() -> datetime:
    return datetime.now(UTC)


def _clean_metadata(fields: dict[str, Any]) -> dict[str, Any]:
    """Keep only editable metadata fields and normalize their values."""
    cleaned: dict[str, Any] = {}
    for name in METADATA_FIELDS:
        if name not in fields:
            continue
        value = fields[name]
        if name == "title":
            title = str(value or "").strip()
            if not title:
                raise ValidationError("Title must not be empty")
            cleaned[name] = title
        elif name == "description":
            cleaned[name] = str(value) if value is not None else None
        elif name == "status":
            if value != BillStatus.CANCELLED.value:
                raise ValidationError("Status can only be changed to 'cancelled'")
            cleaned[name] = BillStatus.CANCELLED
        elif name == "due_date":
            if value is None or value == "":
                cleaned[name] = None
            elif isinstance(value, date):
                cleaned[name] = value
            else:
                try:
                    cleaned[name] = date.fromisoformat(str(value))
                except ValueError as exc:
                    raise ValidationError(f"Invalid due date: {value!r}") from exc
        elif name == "tags":
            if not isinstance(value, (list, tuple)):
                raise ValidationError("Tags must be a list")
            cleaned[name] = [str(tag) for tag in value]
    return cleaned


class BillService:
    """The bill ledger: creation, payment recording and lifecycle of bills.

    Writes to an existing bill are read-modify-write cycles guarded by the
    document version. A cycle that loses a race re-reads the bill and runs
    again, up to ``max_write_retries`` times.
    """

    def __init__(
        self,
        bill_repo: BillRepository,
        wallet_resolver: WalletResolver,
        notifications: NotificationService,
        max_write_retries: int | None = None,
    ) -> None:
        self.bill_repo = bill_repo
        self.wallet_resolver = wallet_resolver
        self.notifications = notifications
        if max_write_retries is None:
            max_write_retries = settings.max_write_retries
        if max_write_retries < 1:
            raise ValueError(f"max_write_retries must be at least 1, got {max_write_retries}")
        self.max_write_retries = max_write_retries

    def _require(self, bill_id: str) -> Bill:
        bill = self.bill_repo.get_by_id(bill_id)
        if bill is None:
            logger.warning("Bill not found: id=%s", bill_id)
            raise NotFoundError(f"Bill {bill_id} not found")
        return bill

    def _mutate(self, bill_id: str, change: Callable[[Bill], T]) -> tuple[Bill, T]:
        """Apply ``change`` to the latest copy of a bill and save it with compare-and-set.

        ``change`` raises to abort; nothing is written in that case.
        """
        for attempt in range(1, self.max_write_retries + 1):
            bill = self._require(bill_id)
            result = change(bill)
            if self.bill_repo.save(bill):
                return bill, result
            logger.warning(
                "Concurrent update on bill %s (attempt %d/%d), retrying",
                bill_id,
                attempt,
                self.max_write_retries,
            )
        raise ConflictError(f"Bill {bill_id} is being modified concurrently, try again")

    # ---- Creation and lookup ----

    def create_bill(self, request: BillCreate) -> Bill:
        title = request.title.strip()
        if not title:
            raise ValidationError("Missing required field: title")
        try:
            total = to_cents(request.total_amount)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc
        if total <= 0:
            raise ValidationError("Total amount must be greater than 0")
        if not request.participants:
            raise ValidationError("Missing required field: participants")

        wallet_address = self.wallet_resolver.resolve_wallet_address(request.creator_fid)
        if not wallet_address:
            logger.warning("Bill create rejected: creator fid=%s has no wallet address", request.creator_fid)
            raise ValidationError("Bill creator must have a verified wallet address. Please update your profile.")

        amounts = compute_shares(total, request.split_type, request.participants)

        bill = Bill(
            title=title,
            description=request.description,
            total_amount=total,
            currency=request.currency,
            split_type=request.split_type,
            creator_fid=request.creator_fid,
            creator_username=request.creator_username,
            creator_wallet_address=wallet_address,
            participants=[
                Participant(
                    fid=share.fid,
                    username=share.username,
                    display_name=share.display_name,
                    amount_owed=amount,
                )
                for share, amount in zip(request.participants, amounts)
            ],
            status=BillStatus.PENDING,
            due_date=request.due_date,
            tags=list(request.tags),
            receipt_image_url=request.receipt_image_url,
        )
        bill = self.bill_repo.create(bill)
        logger.info(
            "Bill created: id=%s, creator=%s, split=%s, total=%d, participants=%d",
            bill.id,
            bill.creator_fid,
            bill.split_type.value,
            bill.total_amount,
            len(bill.participants),
        )

        self.notifications.bill_created(bill)
        return bill

    def get_bill(self, bill_id: str) -> Bill:
        bill = self._require(bill_id)
        logger.debug("get_bill id=%s status=%s", bill_id, bill.status.value)
        return bill

    def list_bills_for_user(self, fid: int) -> list[BillSummary]:
        summaries: list[BillSummary] = []
        for bill in self.bill_repo.list_for_user(fid):
            participant = bill.get_participant(fid)
            summaries.append(
                BillSummary(
                    id=bill.id,
                    title=bill.title,
                    total_amount=bill.total_amount,
                    your_share=participant.amount_owed if participant else 0,
                    status=bill.status,
                    created_at=bill.created_at,
                    participant_count=len(bill.participants),
                    is_creator=bill.creator_fid == fid,
                )
            )
        epoch = datetime.min.replace(tzinfo=UTC)
        summaries.sort(key=lambda s: s.created_at or epoch, reverse=True)
        logger.debug("Listed %d bills for fid=%s", len(summaries), fid)
        return summaries

    # ---- Metadata and cancellation ----

    def update_bill_metadata(self, bill_id: str, fields: dict[str, Any], requestor_fid: int | None = None) -> Bill:
        cleaned = _clean_metadata(fields)
        dropped = sorted(set(fields) - set(cleaned))
        if dropped:
            logger.debug("Ignoring non-editable fields for bill %s: %s", bill_id, dropped)
        if not cleaned:
            return self._require(bill_id)

        cancelling = cleaned.get("status") == BillStatus.CANCELLED

        def apply(bill: Bill) -> BillStatus:
            previous = bill.status
            if cancelling:
                if requestor_fid is not None and requestor_fid != bill.creator_fid:
                    logger.warning("Cancel rejected: fid=%s is not the creator of bill %s", requestor_fid, bill.id)
                    raise UnauthorizedError("Only the bill creator can cancel the bill")
                if bill.status in TERMINAL_BILL_STATUSES:
                    raise ConflictError(f"Bill is already {bill.status.value}")
            for name, value in cleaned.items():
                setattr(bill, name, value)
            return previous

        bill, previous = self._mutate(bill_id, apply)
        logger.info("Bill %s metadata updated: %s", bill.id, sorted(cleaned))

        if cancelling and previous != BillStatus.CANCELLED:
            logger.info("Bill %s cancelled", bill.id)
            self.notifications.bill_cancelled(bill)
        return bill

    def cancel_bill(self, bill_id: str, requestor_fid: int) -> Bill:
        return self.update_bill_metadata(bill_id, {"status": BillStatus.CANCELLED.value}, requestor_fid)

    # ---- Payments ----

    def record_payment(
        self,
        bill_id: str,
        participant_fid: int,
        amount: Decimal | int | str,
        transaction_ref: str,
    ) -> Bill:
        """Mark a participant as paid after the caller confirmed the transfer."""
        transaction_ref = (transaction_ref or "").strip()
        if not transaction_ref:
            raise ValidationError("Missing required field: transaction reference")
        try:
            paid = to_cents(amount)
        except ValueError as exc:
            raise ValidationError(str(exc)) from exc

        def apply(bill: Bill) -> tuple[Participant, BillStatus]:
            if bill.status == BillStatus.CANCELLED:
                raise ConflictError("Cannot pay a cancelled bill")
            participant = bill.get_participant(participant_fid)
            if participant is None:
                raise NotFoundError(f"Participant {participant_fid} not found in bill {bill.id}")
            if participant.status == ParticipantStatus.PAID:
                logger.warning("Duplicate payment: bill=%s fid=%s", bill.id, participant_fid)
                raise ConflictError("Payment already completed for this participant")
            if abs(paid - participant.amount_owed) > AMOUNT_EPSILON:
                raise ValidationError(
                    f"Payment amount ({format_amount(paid)}) doesn't match "
                    f"amount owed ({format_amount(participant.amount_owed)})"
                )
            previous = bill.status
            participant.status = ParticipantStatus.PAID
            participant.paid_at = _now()
            participant.payment_hash = transaction_ref
            participant.failure_reason = None
            bill.recompute_status()
            return participant, previous

        bill, (participant, previous) = self._mutate(bill_id, apply)
        logger.info(
            "Payment recorded: bill=%s fid=%s amount=%d status %s -> %s",
            bill.id,
            participant_fid,
            participant.amount_owed,
            previous.value,
            bill.status.value,
        )

        self.notifications.payment_received(bill, participant)
        if bill.status == BillStatus.COMPLETED and previous != BillStatus.COMPLETED:
            self.notifications.bill_completed(bill)
        return bill

    def record_payment_failure(self, bill_id: str, participant_fid: int, reason: str = "") -> Bill:
        def apply(bill: Bill) -> Participant:
            if bill.status == BillStatus.CANCELLED:
                raise ConflictError("Cannot record payments on a cancelled bill")
            participant = bill.get_participant(participant_fid)
            if participant is None:
                raise NotFoundError(f"Participant {participant_fid} not found in bill {bill.id}")
            if participant.status == ParticipantStatus.PAID:
                raise ConflictError("Payment already completed for this participant")
            participant.status = ParticipantStatus.FAILED
            participant.failure_reason = reason or None
            bill.recompute_status()
            return participant

        bill, participant = self._mutate(bill_id, apply)
        logger.info("Payment failure recorded: bill=%s fid=%s reason=%r", bill.id, participant_fid, reason)

        self.notifications.payment_failed(bill, participant)
        return bill

    def get_payment_status(
        self, bill_id: str, participant_fid: int | None = None
    ) -> PaymentStatus | ParticipantPayment:
        bill = self._require(bill_id)

        def _row(p: Participant) -> ParticipantPayment:
            return ParticipantPayment(
                bill_id=bill.id,
                bill_title=bill.title,
                participant_fid=p.fid,
                amount_owed=p.amount_owed,
                currency=bill.currency,
                status=p.status,
                paid_at=p.paid_at,
                payment_hash=p.payment_hash,
                creator_fid=bill.creator_fid,
            )

        if participant_fid is not None:
            participant = bill.get_participant(participant_fid)
            if participant is None:
                raise NotFoundError(f"Participant {participant_fid} not found in bill {bill.id}")
            return _row(participant)

        paid = [p for p in bill.participants if p.status == ParticipantStatus.PAID]
        return PaymentStatus(
            bill_id=bill.id,
            bill_title=bill.title,
            total_amount=bill.total_amount,
            total_paid=sum(p.amount_owed for p in paid),
            total_pending=sum(p.amount_owed for p in bill.participants if p.status != ParticipantStatus.PAID),
            currency=bill.currency,
            status=bill.status,
            participant_count=len(bill.participants),
            paid_count=len(paid),
            participants=[_row(p) for p in bill.participants],
        )

    # ---- Reminders ----

    def send_payment_reminders(self, bill_id: str, requestor_fid: int | None = None) -> int:
        bill = self._require(bill_id)
        if requestor_fid is not None and requestor_fid != bill.creator_fid:
            raise UnauthorizedError("Only the bill creator can send reminders")
        if bill.status == BillStatus.CANCELLED:
            raise ConflictError("Cannot send reminders for a cancelled bill")
        sent = self.notifications.payment_reminders(bill)
        logger.info("Sent %d payment reminder(s) for bill %s", sent, bill.id)
        return sent

    def send_due_date_reminders(self, fid: int, today: date | None = None) -> int:
        """Remind unpaid participants of the user's open bills due within a day or overdue."""
        today = today or _now().date()
        sent = 0
        for bill in self.bill_repo.list_for_user(fid):
            if bill.creator_fid != fid or bill.status in TERMINAL_BILL_STATUSES:
                continue
            sent += self.notifications.due_date_reminders(bill, today)
        logger.info("Sent %d due-date reminder(s) for bills of fid=%s", sent, fid)
        return sent

    # ---- Deletion ----

    def delete_bill(self, bill_id: str, requestor_fid: int) -> None:
        def apply(bill: Bill) -> None:
            if bill.has_payments:
                logger.warning("Delete rejected: bill %s has payments", bill.id)
                raise ConflictError("Cannot delete bill with completed payments")
            if requestor_fid != bill.creator_fid:
                logger.warning("Delete rejected: fid=%s is not the creator of bill %s", requestor_fid, bill.id)
                raise UnauthorizedError("Only the bill creator can delete the bill")
            # Claim the current version so a payment racing with the delete fails its write.
            bill.status = BillStatus.CANCELLED

        bill, _ = self._mutate(bill_id, apply)
        try:
            self.bill_repo.delete(bill)
        except PartiallyAppliedError:
            raise
        except StorageError as exc:
            raise PartiallyAppliedError(f"Bill {bill_id} was cancelled but could not be deleted: {exc}") from exc
        logger.info("Bill %s deleted by fid=%s", bill_id, requestor_fid)

from __future__ import annotations

from datetime import date, datetime
from decimal import Decimal
from enum import Enum

from pydantic import BaseModel, Field


class Currency(str, Enum):
    USDC = "USDC"
    ETH = "ETH"


class SplitType(str, Enum):
    EQUAL = "equal"
    CUSTOM = "custom"
    PERCENTAGE = "percentage"


class BillStatus(str, Enum):
    DRAFT = "draft"
    PENDING = "pending"
    COLLECTING = "collecting"
    COMPLETED = "completed"
    CANCELLED = "cancelled"


class ParticipantStatus(str, Enum):
    PENDING = "pending"
    PAID = "paid"
    FAILED = "failed"


TERMINAL_BILL_STATUSES = {BillStatus.COMPLETED, BillStatus.CANCELLED}


class Participant(BaseModel):
    fid: int
    username: str | None = None
    display_name: str | None = None
    amount_owed: int = 0  # minor units
    status: ParticipantStatus = ParticipantStatus.PENDING
    paid_at: datetime | None = None
    payment_hash: str | None = None
    failure_reason: str | None = None

    @property
    def label(self) -> str:
        return self.display_name or self.username or f"User {self.fid}"


class Bill(BaseModel):
    id: str = ""
    title: str
    description: str | None = None
    total_amount: int  # minor units
    currency: Currency = Currency.USDC
    split_type: SplitType = SplitType.EQUAL
    creator_fid: int
    creator_username: str | None = None
    creator_wallet_address: str
    participants: list[Participant] = []
    status: BillStatus = BillStatus.PENDING
    created_at: datetime | None = None
    updated_at: datetime | None = None
    due_date: date | None = None
    tags: list[str] = []
    receipt_image_url: str | None = None
    # Store version the document was read at; never serialized into the document.
    version: int = Field(default=0, exclude=True)

    def get_participant(self, fid: int) -> Participant | None:
        for participant in self.participants:
            if participant.fid == fid:
                return participant
        return None

    @property
    def has_payments(self) -> bool:
        return any(p.status == ParticipantStatus.PAID for p in self.participants)

    @property
    def all_paid(self) -> bool:
        return bool(self.participants) and all(p.status == ParticipantStatus.PAID for p in self.participants)

    @property
    def member_fids(self) -> list[int]:
        """Creator plus participants, without duplicates, creator first."""
        fids = [self.creator_fid]
        for participant in self.participants:
            if participant.fid not in fids:
                fids.append(participant.fid)
        return fids

    def recompute_status(self) -> BillStatus:
        """Derive the bill status from participant states. Cancelled is sticky."""
        if self.status == BillStatus.CANCELLED:
            return self.status
        if self.all_paid:
            self.status = BillStatus.COMPLETED
        elif self.has_payments:
            self.status = BillStatus.COLLECTING
        else:
            self.status = BillStatus.PENDING
        return self.status


class ParticipantShare(BaseModel):
    """One participant entry of a bill creation request."""

    fid: int
    username: str | None = None
    display_name: str | None = None
    amount: Decimal | None = None
    percentage: Decimal | None = None


class BillCreate(BaseModel):
    title: str = ""
    description: str | None = None
    total_amount: Decimal = Decimal("0")
    currency: Currency = Currency.USDC
    split_type: SplitType = SplitType.EQUAL
    creator_fid: int
    creator_username: str | None = None
    participants: list[ParticipantShare] = []
    due_date: date | None = None
    tags: list[str] = []
    receipt_image_url: str | None = None


class BillSummary(BaseModel):
    id: str
    title: str
    total_amount: int
    your_share: int
    status: BillStatus
    created_at: datetime | None = None
    participant_count: int
    is_creator: bool


class ParticipantPayment(BaseModel):
    bill_id: str
    bill_title: str
    participant_fid: int
    amount_owed: int
    currency: Currency
    status: ParticipantStatus
    paid_at: datetime | None = None
    payment_hash: str | None = None
    creator_fid: int


class PaymentStatus(BaseModel):
    bill_id: str
    bill_title: str
    total_amount: int
    total_paid: int
    total_pending: int
    currency: Currency
    status: BillStatus
    participant_count: int
    paid_count: int
    participants: list[ParticipantPayment] = []

"""Serializers that convert ledger models to JSON-ready dicts.

Amounts are stored in minor units and rendered as decimal strings ("33.34").
Datetime fields are converted to ISO 8601 strings.
"""

from __future__ import annotations

from datetime import date, datetime

from sharethebill.models import from_cents
from sharethebill.models.bill import Bill, BillSummary, Participant, ParticipantPayment, PaymentStatus
from sharethebill.models.profile import UserProfile


def _dt(val: datetime | date | None) -> str | None:
    """Convert datetime/date to ISO string, or None."""
    if val is None:
        return None
    return val.isoformat()


def _amount(cents: int) -> str:
    return str(from_cents(cents))


def serialize_participant(participant: Participant) -> dict:
    return {
        "fid": participant.fid,
        "username": participant.username,
        "display_name": participant.display_name,
        "amount_owed": _amount(participant.amount_owed),
        "status": participant.status.value,
        "paid_at": _dt(participant.paid_at),
        "payment_hash": participant.payment_hash,
        "failure_reason": participant.failure_reason,
    }


def serialize_bill(bill: Bill) -> dict:
    return {
        "id": bill.id,
        "title": bill.title,
        "description": bill.description,
        "total_amount": _amount(bill.total_amount),
        "currency": bill.currency.value,
        "split_type": bill.split_type.value,
        "creator_fid": bill.creator_fid,
        "creator_username": bill.creator_username,
        "creator_wallet_address": bill.creator_wallet_address,
        "participants": [serialize_participant(p) for p in bill.participants],
        "status": bill.status.value,
        "created_at": _dt(bill.created_at),
        "updated_at": _dt(bill.updated_at),
        "due_date": _dt(bill.due_date),
        "tags": list(bill.tags),
        "receipt_image_url": bill.receipt_image_url,
    }


def serialize_summary(summary: BillSummary) -> dict:
    return {
        "id": summary.id,
        "title": summary.title,
        "total_amount": _amount(summary.total_amount),
        "your_share": _amount(summary.your_share),
        "status": summary.status.value,
        "created_at": _dt(summary.created_at),
        "participant_count": summary.participant_count,
        "is_creator": summary.is_creator,
    }


def serialize_participant_payment(payment: ParticipantPayment) -> dict:
    return {
        "bill_id": payment.bill_id,
        "bill_title": payment.bill_title,
        "participant_fid": payment.participant_fid,
        "amount_owed": _amount(payment.amount_owed),
        "currency": payment.currency.value,
        "status": payment.status.value,
        "paid_at": _dt(payment.paid_at),
        "payment_hash": payment.payment_hash,
        "creator_fid": payment.creator_fid,
    }


def serialize_payment_status(status: PaymentStatus) -> dict:
    return {
        "bill_id": status.bill_id,
        "bill_title": status.bill_title,
        "total_amount": _amount(status.total_amount),
        "total_paid": _amount(status.total_paid),
        "total_pending": _amount(status.total_pending),
        "currency": status.currency.value,
        "status": status.status.value,
        "participant_count": status.participant_count,
        "paid_count": status.paid_count,
        "participants": [serialize_participant_payment(p) for p in status.participants],
    }


def serialize_profile(profile: UserProfile) -> dict:
    return {
        "fid": profile.fid,
        "username": profile.username,
        "display_name": profile.display_name,
        "wallet_address": profile.wallet_address,
        "created_at": _dt(profile.created_at),
        "updated_at": _dt(profile.updated_at),
    }

from __future__ import annotations

import logging
from datetime import date

from sharethebill.models import format_amount
from sharethebill.models.bill import Bill, Participant, ParticipantStatus
from sharethebill.models.notification import Notification, NotificationType
from sharethebill.notify.base import NotificationSink
from sharethebill.settings import settings

logger = logging.getLogger(__name__)


def _bill_url(bill: Bill) -> str:
    return f"{settings.app_base_url.rstrip('/')}/bills/{bill.id}"


class NotificationService:
    """Composes bill lifecycle messages and hands them to a sink.

    Delivery is best effort: every failure is logged and swallowed so it can
    never undo the ledger change that triggered it.
    """

    def __init__(self, sink: NotificationSink) -> None:
        self.sink = sink

    def _message(self, fid: int, kind: NotificationType, bill: Bill, title: str, body: str) -> Notification:
        return Notification(fid=fid, type=kind, bill_id=bill.id, title=title, body=body, action_url=_bill_url(bill))

    def _dispatch(self, notifications: list[Notification]) -> int:
        """Send each notification; return how many were delivered."""
        delivered = 0
        for notification in notifications:
            try:
                self.sink.notify(notification)
                delivered += 1
            except Exception:
                logger.exception(
                    "Failed to deliver %s notification to fid=%s for bill %s",
                    notification.type.value,
                    notification.fid,
                    notification.bill_id,
                )
        logger.debug("Dispatched %d/%d notification(s)", delivered, len(notifications))
        return delivered

    def bill_created(self, bill: Bill) -> int:
        creator = bill.creator_username or "Someone"
        return self._dispatch(
            [
                self._message(
                    p.fid,
                    NotificationType.BILL_CREATED,
                    bill,
                    "New Bill to Split!",
                    f'{creator} wants to split "{bill.title}" ({format_amount(p.amount_owed, bill.currency.value)})',
                )
                for p in bill.participants
                if p.fid != bill.creator_fid
            ]
        )

    def payment_received(self, bill: Bill, payer: Participant) -> int:
        messages = [
            self._message(
                bill.creator_fid,
                NotificationType.PAYMENT_RECEIVED,
                bill,
                "Payment Received!",
                f'{payer.label} paid {format_amount(payer.amount_owed, bill.currency.value)} for "{bill.title}"',
            )
        ]
        for p in bill.participants:
            if p.fid in (payer.fid, bill.creator_fid):
                continue
            messages.append(
                self._message(
                    p.fid,
                    NotificationType.PAYMENT_RECEIVED,
                    bill,
                    "Someone Paid!",
                    f'{payer.display_name or "Someone"} paid their share for "{bill.title}"',
                )
            )
        return self._dispatch(messages)

    def bill_completed(self, bill: Bill) -> int:
        return self._dispatch(
            [
                self._message(
                    fid,
                    NotificationType.BILL_COMPLETED,
                    bill,
                    "Bill Completed!",
                    f'All payments received for "{bill.title}". The bill is now settled!',
                )
                for fid in bill.member_fids
            ]
        )

    def bill_cancelled(self, bill: Bill, reason: str = "") -> int:
        suffix = f": {reason}" if reason else ""
        return self._dispatch(
            [
                self._message(
                    p.fid,
                    NotificationType.BILL_CANCELLED,
                    bill,
                    "Bill Cancelled",
                    f'"{bill.title}" has been cancelled{suffix}',
                )
                for p in bill.participants
            ]
        )

    def payment_failed(self, bill: Bill, participant: Participant) -> int:
        return self._dispatch(
            [
                self._message(
                    participant.fid,
                    NotificationType.PAYMENT_FAILED,
                    bill,
                    "Payment Failed",
                    f'Your payment for "{bill.title}" failed. Please try again.',
                ),
                self._message(
                    bill.creator_fid,
                    NotificationType.PAYMENT_FAILED,
                    bill,
                    "Payment Failed",
                    f'Payment from {participant.label} failed for "{bill.title}"',
                ),
            ]
        )

    def payment_reminders(self, bill: Bill) -> int:
        return self._dispatch(
            [
                self._message(
                    p.fid,
                    NotificationType.PAYMENT_REMINDER,
                    bill,
                    "Payment Reminder",
                    f"Don't forget to pay {format_amount(p.amount_owed, bill.currency.value)} for \"{bill.title}\"",
                )
                for p in bill.participants
                if p.status != ParticipantStatus.PAID
            ]
        )

    def due_date_reminders(self, bill: Bill, today: date) -> int:
        if bill.due_date is None:
            return 0
        days_left = (bill.due_date - today).days
        if days_left > 1:
            return 0
        overdue = days_left < 0
        messages = []
        for p in bill.participants:
            if p.status == ParticipantStatus.PAID:
                continue
            amount = format_amount(p.amount_owed, bill.currency.value)
            if overdue:
                title = "Payment Overdue!"
                body = f'"{bill.title}" payment is overdue! Please pay {amount} ASAP'
            else:
                title = "Payment Due Soon!"
                body = f'"{bill.title}" payment is due {"today" if days_left == 0 else "tomorrow"}! Please pay {amount}'
            messages.append(self._message(p.fid, NotificationType.PAYMENT_REMINDER, bill, title, body))
        return self._dispatch(messages)

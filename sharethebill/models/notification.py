from __future__ import annotations

from enum import Enum

from pydantic import BaseModel


class NotificationType(str, Enum):
    BILL_CREATED = "bill_created"
    PAYMENT_RECEIVED = "payment_received"
    PAYMENT_FAILED = "payment_failed"
    BILL_COMPLETED = "bill_completed"
    BILL_CANCELLED = "bill_cancelled"
    PAYMENT_REMINDER = "payment_reminder"


class Notification(BaseModel):
    fid: int
    type: NotificationType
    bill_id: str
    title: str
    body: str
    action_url: str = ""

from __future__ import annotations

from decimal import Decimal

from pydantic import BaseModel

from sharethebill.models.bill import Currency


class PaymentRequest(BaseModel):
    participant_fid: int
    amount: Decimal
    transaction_hash: str
    currency: Currency | None = None


class PaymentFailureRequest(BaseModel):
    participant_fid: int
    reason: str = ""


class ReminderRequest(BaseModel):
    requestor_fid: int


class SyncWalletRequest(BaseModel):
    fid: int
    wallet_address: str
    username: str = ""
    display_name: str = ""

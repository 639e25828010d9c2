from __future__ import annotations

import logging
from typing import Any

from fastapi import APIRouter, Body, Request
from fastapi.responses import JSONResponse

from sharethebill.models.bill import BillCreate, PaymentStatus
from web.deps import get_bill_service
from web.schemas import PaymentFailureRequest, PaymentRequest, ReminderRequest
from web.serializers import (
    serialize_bill,
    serialize_participant_payment,
    serialize_payment_status,
    serialize_summary,
)

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/bills")

_CAMEL_TO_SNAKE = {"dueDate": "due_date"}


@router.get("")
async def bill_list(request: Request, fid: int):
    logger.info("GET /api/bills fid=%s", fid)
    bills = get_bill_service(request).list_bills_for_user(fid)
    return {"bills": [serialize_summary(b) for b in bills], "count": len(bills)}


@router.post("")
async def bill_create(request: Request, payload: BillCreate):
    logger.info("POST /api/bills creator=%s split=%s", payload.creator_fid, payload.split_type.value)
    bill = get_bill_service(request).create_bill(payload)
    return JSONResponse(
        {"bill": serialize_bill(bill), "message": "Bill created successfully"},
        status_code=201,
    )


@router.get("/{bill_id}")
async def bill_detail(request: Request, bill_id: str):
    logger.info("GET /api/bills/%s", bill_id)
    bill = get_bill_service(request).get_bill(bill_id)
    return {"bill": serialize_bill(bill)}


@router.patch("/{bill_id}")
async def bill_update(request: Request, bill_id: str, fid: int | None = None, updates: dict[str, Any] = Body(...)):
    logger.info("PATCH /api/bills/%s fields=%s", bill_id, sorted(updates))
    fields = {_CAMEL_TO_SNAKE.get(key, key): value for key, value in updates.items()}
    bill = get_bill_service(request).update_bill_metadata(bill_id, fields, requestor_fid=fid)
    return {"bill": serialize_bill(bill), "message": "Bill updated successfully"}


@router.delete("/{bill_id}")
async def bill_delete(request: Request, bill_id: str, fid: int):
    logger.info("DELETE /api/bills/%s requestor=%s", bill_id, fid)
    get_bill_service(request).delete_bill(bill_id, fid)
    return {"message": "Bill deleted successfully"}


@router.post("/{bill_id}/pay")
async def bill_pay(request: Request, bill_id: str, payload: PaymentRequest):
    logger.info("POST /api/bills/%s/pay participant=%s", bill_id, payload.participant_fid)
    service = get_bill_service(request)
    bill = service.record_payment(bill_id, payload.participant_fid, payload.amount, payload.transaction_hash)
    participant = bill.get_participant(payload.participant_fid)
    return {
        "success": True,
        "payment_result": {
            "transaction_hash": payload.transaction_hash,
            "timestamp": participant.paid_at.isoformat() if participant and participant.paid_at else None,
        },
        "bill": serialize_bill(bill),
        "message": "Payment processed successfully",
    }


@router.get("/{bill_id}/pay")
async def bill_payment_status(request: Request, bill_id: str, participant_fid: int | None = None):
    logger.info("GET /api/bills/%s/pay participant=%s", bill_id, participant_fid)
    status = get_bill_service(request).get_payment_status(bill_id, participant_fid)
    if isinstance(status, PaymentStatus):
        return serialize_payment_status(status)
    return serialize_participant_payment(status)


@router.post("/{bill_id}/fail")
async def bill_payment_failed(request: Request, bill_id: str, payload: PaymentFailureRequest):
    logger.info("POST /api/bills/%s/fail participant=%s", bill_id, payload.participant_fid)
    bill = get_bill_service(request).record_payment_failure(bill_id, payload.participant_fid, payload.reason)
    return {"bill": serialize_bill(bill), "message": "Payment failure recorded"}


@router.post("/{bill_id}/remind")
async def bill_remind(request: Request, bill_id: str, payload: ReminderRequest):
    logger.info("POST /api/bills/%s/remind requestor=%s", bill_id, payload.requestor_fid)
    sent = get_bill_service(request).send_payment_reminders(bill_id, payload.requestor_fid)
    return {"sent": sent}

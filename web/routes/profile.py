from __future__ import annotations

import logging

from fastapi import APIRouter, Request

from web.deps import get_profile_service
from web.schemas import SyncWalletRequest
from web.serializers import serialize_profile

logger = logging.getLogger(__name__)

router = APIRouter(prefix="/api/profile")


@router.post("/sync-wallet")
async def sync_wallet(request: Request, payload: SyncWalletRequest):
    logger.info("POST /api/profile/sync-wallet fid=%s", payload.fid)
    profile = get_profile_service(request).sync_wallet(
        payload.fid,
        payload.wallet_address,
        username=payload.username,
        display_name=payload.display_name,
    )
    return {"success": True, "profile": serialize_profile(profile)}

from __future__ import annotations

import re
from datetime import datetime

from pydantic import BaseModel

WALLET_ADDRESS_RE = re.compile(r"^0x[a-fA-F0-9]{40}$")


class UserProfile(BaseModel):
    fid: int
    username: str = ""
    display_name: str = ""
    wallet_address: str | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None

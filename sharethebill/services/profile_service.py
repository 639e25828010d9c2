from __future__ import annotations

import logging
from abc import ABC, abstractmethod

from sharethebill.errors import ValidationError
from sharethebill.models.profile import WALLET_ADDRESS_RE, UserProfile
from sharethebill.repositories.base import ProfileRepository

logger = logging.getLogger(__name__)


class WalletResolver(ABC):
    @abstractmethod
    def resolve_wallet_address(self, fid: int) -> str | None:
        """Return the address payments to ``fid`` should be sent to, if known."""
        ...


class ProfileService(WalletResolver):
    def __init__(self, profile_repo: ProfileRepository) -> None:
        self.profile_repo = profile_repo

    def get_profile(self, fid: int) -> UserProfile | None:
        result = self.profile_repo.get_by_fid(fid)
        logger.debug("get_profile fid=%s found=%s", fid, result is not None)
        return result

    def sync_wallet(self, fid: int, wallet_address: str, username: str = "", display_name: str = "") -> UserProfile:
        """Attach a verified wallet address to the user's profile, creating it if needed."""
        address = wallet_address.strip()
        if not WALLET_ADDRESS_RE.match(address):
            logger.warning("Wallet sync rejected for fid=%s: invalid address format", fid)
            raise ValidationError("Invalid wallet address format")

        profile = self.profile_repo.get_by_fid(fid)
        if profile is None:
            profile = UserProfile(fid=fid, username=username, display_name=display_name)
            logger.info("Creating profile for fid=%s", fid)
        else:
            profile.username = username or profile.username
            profile.display_name = display_name or profile.display_name

        profile.wallet_address = address.lower()
        profile = self.profile_repo.save(profile)
        logger.info("Wallet synced for fid=%s", fid)
        return profile

    def resolve_wallet_address(self, fid: int) -> str | None:
        profile = self.profile_repo.get_by_fid(fid)
        if profile is None:
            return None
        return profile.wallet_address

from unittest.mock import MagicMock

import pytest

from sharethebill.errors import ValidationError
from sharethebill.models.profile import UserProfile
from sharethebill.repositories.kv import KVProfileRepository
from sharethebill.services.profile_service import ProfileService

WALLET = "0xAbCdEf0123456789aBcDeF0123456789AbCdEf01"


@pytest.fixture()
def service(store):
    return ProfileService(KVProfileRepository(store))


class TestSyncWallet:
    def test_creates_profile_with_lowercased_address(self, service):
        profile = service.sync_wallet(7, WALLET, username="dave")

        assert profile.wallet_address == WALLET.lower()
        assert profile.username == "dave"
        assert profile.created_at is not None
        assert service.get_profile(7).wallet_address == WALLET.lower()

    def test_updates_existing_profile(self, service):
        service.sync_wallet(7, WALLET, username="dave", display_name="Dave")
        other = "0x" + "1" * 40

        profile = service.sync_wallet(7, other)

        assert profile.wallet_address == other
        assert profile.username == "dave"
        assert profile.display_name == "Dave"

    @pytest.mark.parametrize("address", ["", "0x123", "abcdef0123456789abcdef0123456789abcdef01", "0x" + "g" * 40])
    def test_invalid_address(self, service, address):
        with pytest.raises(ValidationError, match="Invalid wallet address"):
            service.sync_wallet(7, address)
        assert service.get_profile(7) is None


class TestResolveWalletAddress:
    def test_known(self, service):
        service.sync_wallet(7, WALLET)
        assert service.resolve_wallet_address(7) == WALLET.lower()

    def test_unknown_fid(self, service):
        assert service.resolve_wallet_address(404) is None

    def test_profile_without_wallet(self):
        repo = MagicMock()
        repo.get_by_fid.return_value = UserProfile(fid=7)
        assert ProfileService(repo).resolve_wallet_address(7) is None

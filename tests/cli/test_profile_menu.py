from unittest.mock import MagicMock, patch

from sharethebill.errors import ValidationError
from sharethebill.models.profile import UserProfile

WALLET = "0x" + "ab" * 20


class TestSyncWalletMenu:
    @patch("sharethebill.cli.profile_menu.questionary")
    def test_invalid_fid(self, mock_q):
        from sharethebill.cli.profile_menu import sync_wallet_menu

        mock_q.text.return_value.ask.return_value = "abc"
        mock_service = MagicMock()

        sync_wallet_menu(mock_service)
        mock_service.sync_wallet.assert_not_called()

    @patch("sharethebill.cli.profile_menu.questionary")
    def test_saves_address(self, mock_q):
        from sharethebill.cli.profile_menu import sync_wallet_menu

        mock_q.text.return_value.ask.side_effect = ["7", WALLET]
        mock_service = MagicMock()
        mock_service.get_profile.return_value = None
        mock_service.sync_wallet.return_value = UserProfile(fid=7, wallet_address=WALLET)

        sync_wallet_menu(mock_service)
        mock_service.sync_wallet.assert_called_once_with(7, WALLET)

    @patch("sharethebill.cli.profile_menu.questionary")
    def test_invalid_address(self, mock_q):
        from sharethebill.cli.profile_menu import sync_wallet_menu

        mock_q.text.return_value.ask.side_effect = ["7", "0x123"]
        mock_service = MagicMock()
        mock_service.get_profile.return_value = UserProfile(fid=7, wallet_address=WALLET)
        mock_service.sync_wallet.side_effect = ValidationError("Invalid wallet address format")

        sync_wallet_menu(mock_service)

    @patch("sharethebill.cli.profile_menu.questionary")
    def test_blank_address_cancels(self, mock_q):
        from sharethebill.cli.profile_menu import sync_wallet_menu

        mock_q.text.return_value.ask.side_effect = ["7", ""]
        mock_service = MagicMock()
        mock_service.get_profile.return_value = None

        sync_wallet_menu(mock_service)
        mock_service.sync_wallet.assert_not_called()

from unittest.mock import patch

import pytest

from sharethebill.models.notification import Notification, NotificationType
from sharethebill.notify.log import LogNotificationSink, NullNotificationSink


class TestNotificationSinkFactory:
    @patch("sharethebill.notify.factory.settings")
    def test_log_sink(self, mock_settings):
        mock_settings.notification_backend = "log"

        from sharethebill.notify.factory import get_notification_sink

        assert isinstance(get_notification_sink(), LogNotificationSink)

    @patch("sharethebill.notify.factory.settings")
    def test_null_sink(self, mock_settings):
        mock_settings.notification_backend = "none"

        from sharethebill.notify.factory import get_notification_sink

        assert isinstance(get_notification_sink(), NullNotificationSink)

    @patch("sharethebill.notify.factory.settings")
    def test_unsupported_backend(self, mock_settings):
        mock_settings.notification_backend = "carrier-pigeon"

        from sharethebill.notify.factory import get_notification_sink

        with pytest.raises(ValueError, match="Unsupported notification backend"):
            get_notification_sink()


class TestLogNotificationSink:
    def test_logs_message(self, caplog):
        notification = Notification(
            fid=2, type=NotificationType.PAYMENT_REMINDER, bill_id="b1", title="Payment Reminder", body="Pay up"
        )
        with caplog.at_level("INFO", logger="sharethebill.notify.log"):
            LogNotificationSink().notify(notification)

        assert "fid=2" in caplog.text
        assert "Pay up" in caplog.text

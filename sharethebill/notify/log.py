import logging

from sharethebill.models.notification import Notification
from sharethebill.notify.base import NotificationSink

logger = logging.getLogger(__name__)


class LogNotificationSink(NotificationSink):
    """Writes notifications to the application log instead of delivering them."""

    def notify(self, notification: Notification) -> None:
        logger.info(
            "Notification [%s] to fid=%s: %s | %s",
            notification.type.value,
            notification.fid,
            notification.title,
            notification.body,
        )


class NullNotificationSink(NotificationSink):
    def notify(self, notification: Notification) -> None:
        pass

import logging

from sharethebill.notify.base import NotificationSink
from sharethebill.settings import settings

logger = logging.getLogger(__name__)


def get_notification_sink() -> NotificationSink:
    backend = settings.notification_backend

    if backend == "log":
        from sharethebill.notify.log import LogNotificationSink

        logger.debug("Using notification backend: log")
        return LogNotificationSink()

    if backend == "none":
        from sharethebill.notify.log import NullNotificationSink

        logger.debug("Using notification backend: none")
        return NullNotificationSink()

    raise ValueError(f"Unsupported notification backend: {backend}")

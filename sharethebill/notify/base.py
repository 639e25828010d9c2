from abc import ABC, abstractmethod

from sharethebill.models.notification import Notification


class NotificationSink(ABC):
    @abstractmethod
    def notify(self, notification: Notification) -> None:
        """Deliver one notification. May raise; callers treat delivery as best effort."""
        ...

"""Notification domain service."""

import logging
from datetime import datetime
from typing import Optional

from xitique.database.base import Database
from xitique.domain.entities import Notification
from xitique.domain.errors import NotFoundError, notification_not_found
from xitique.domain.ledger import Clock, utc_now
from xitique.domain.reminders import generate_notifications

logger = logging.getLogger(__name__)


class NotificationService:
    """Service for generating and reading reminders."""

    def __init__(self, db: Database, clock: Optional[Clock] = None):
        """Initialize notification service.

        Args:
            db: Database instance
            clock: Source of the current time (defaults to UTC now)
        """
        self.db = db
        self.clock = clock or utc_now

    def check_and_generate(self, now: Optional[datetime] = None) -> list[Notification]:
        """Scan active circles and persist any reminders not generated before.

        Safe to call repeatedly: IDs already stored are never emitted again.

        Returns:
            Newly generated notifications
        """
        now = now or self.clock()
        existing_ids = self.db.get_notification_ids()
        generated = generate_notifications(self.db.list_circles(), existing_ids, now)
        self.db.add_notifications(generated)
        if generated:
            logger.info("Generated %d notification(s)", len(generated))
        return generated

    def list_notifications(self, unread_only: bool = False) -> list[Notification]:
        """List stored notifications, newest first."""
        return self.db.list_notifications(unread_only=unread_only)

    def mark_read(self, notification_id: str) -> None:
        """Mark one notification read.

        Raises:
            NotFoundError: If the notification does not exist
        """
        if not self.db.mark_notification_read(notification_id):
            raise NotFoundError(notification_not_found(notification_id))

    def mark_all_read(self) -> int:
        """Mark every unread notification read.

        Returns:
            Number of notifications updated
        """
        unread = self.db.list_notifications(unread_only=True)
        for notification in unread:
            self.db.mark_notification_read(notification.id)
        return len(unread)

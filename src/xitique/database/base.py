"""Abstract database interface."""

from abc import ABC, abstractmethod
from typing import Optional

from xitique.domain.entities import Circle, Notification


class Database(ABC):
    """Abstract persistence provider for xitique.

    Circles are saved whole: ``save_circle`` replaces the stored
    participants and appends any transactions not yet stored. Stored
    transactions are never updated or deleted.
    """

    @abstractmethod
    def connect(self) -> None:
        """Connect to the database."""
        pass

    @abstractmethod
    def disconnect(self) -> None:
        """Disconnect from the database."""
        pass

    @abstractmethod
    def initialize_schema(self) -> None:
        """Initialize database schema (create tables)."""
        pass

    # Circle operations
    @abstractmethod
    def load_circle(self, circle_id: str) -> Optional[Circle]:
        """Load a circle with its participants and full log, archived or not."""
        pass

    @abstractmethod
    def save_circle(self, circle: Circle) -> None:
        """Upsert a whole circle.

        Raises:
            PersistenceError: If storage fails; nothing is written
            InvariantViolation: If the circle's log drops or reorders stored transactions
        """
        pass

    @abstractmethod
    def list_circles(self, include_archived: bool = False) -> list[Circle]:
        """List circles ordered by name, excluding archived ones by default."""
        pass

    # Notification operations
    @abstractmethod
    def add_notifications(self, notifications: list[Notification]) -> None:
        """Persist newly generated notifications."""
        pass

    @abstractmethod
    def get_notification_ids(self) -> set[str]:
        """IDs of every notification ever stored."""
        pass

    @abstractmethod
    def list_notifications(self, unread_only: bool = False) -> list[Notification]:
        """List notifications, newest first."""
        pass

    @abstractmethod
    def mark_notification_read(self, notification_id: str) -> bool:
        """Mark a notification read. Returns False if it does not exist."""
        pass

"""Domain layer for xitique application.

Services are imported lazily: the database layer imports
``xitique.domain.entities``, and the services import the database layer.
"""

__all__ = ["CircleService", "NotificationService"]


def __getattr__(name):
    if name == "CircleService":
        from xitique.domain.circle import CircleService
        return CircleService
    if name == "NotificationService":
        from xitique.domain.notification import NotificationService
        return NotificationService
    raise AttributeError(f"module '{__name__}' has no attribute '{name}'")

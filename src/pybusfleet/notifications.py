"""User-facing notification channel.

Components that report outcomes (the client's login/logout and the
console's loads and mutations) receive a :class:`Notifier` explicitly.
How a notification reaches the user, a platform alert or an in-page
toast, is decided by the implementation passed in.
"""

from __future__ import annotations

import logging
from collections.abc import Callable
from enum import StrEnum

from pydantic import BaseModel, ConfigDict

_logger = logging.getLogger(__name__)


class NotificationCategory(StrEnum):
    SUCCESS = "success"
    ERROR = "error"
    INFO = "info"
    WARNING = "warning"

    @property
    def title(self) -> str:
        return self.value.capitalize()


class PermissionState(StrEnum):
    DEFAULT = "default"
    GRANTED = "granted"
    DENIED = "denied"


class Notification(BaseModel):
    model_config = ConfigDict(frozen=True, extra="forbid")

    category: NotificationCategory
    message: str

    @property
    def title(self) -> str:
        return self.category.title

    @property
    def tag(self) -> str:
        return self.category.value


class Notifier:
    """Base notifier. Subclasses implement :meth:`deliver`."""

    def deliver(self, notification: Notification) -> bool:
        raise NotImplementedError

    def notify(self, category: NotificationCategory, message: str) -> bool:
        """Send a notification; returns whether it was delivered."""
        return self.deliver(Notification(category=category, message=message))

    def success(self, message: str) -> bool:
        return self.notify(NotificationCategory.SUCCESS, message)

    def error(self, message: str) -> bool:
        return self.notify(NotificationCategory.ERROR, message)

    def info(self, message: str) -> bool:
        return self.notify(NotificationCategory.INFO, message)

    def warning(self, message: str) -> bool:
        return self.notify(NotificationCategory.WARNING, message)


class LoggingNotifier(Notifier):
    """Write notifications to a logger, at a level chosen by category."""

    _LEVELS: dict[NotificationCategory, int] = {
        NotificationCategory.SUCCESS: logging.INFO,
        NotificationCategory.INFO: logging.INFO,
        NotificationCategory.WARNING: logging.WARNING,
        NotificationCategory.ERROR: logging.ERROR,
    }

    def __init__(self, logger: logging.Logger | None = None) -> None:
        self._logger = logger or _logger

    def deliver(self, notification: Notification) -> bool:
        self._logger.log(self._LEVELS[notification.category], "%s: %s", notification.title, notification.message)
        return True


class MemoryNotifier(Notifier):
    """Buffer notifications for a UI to render as toasts."""

    def __init__(self) -> None:
        self.notifications: list[Notification] = []

    def deliver(self, notification: Notification) -> bool:
        self.notifications.append(notification)
        return True

    def drain(self) -> list[Notification]:
        pending, self.notifications = self.notifications, []
        return pending

    def messages(self, category: NotificationCategory | None = None) -> list[str]:
        return [n.message for n in self.notifications if category is None or n.category == category]


class CallbackNotifier(Notifier):
    """Hand notifications to a callable."""

    def __init__(self, callback: Callable[[Notification], None]) -> None:
        self._callback = callback

    def deliver(self, notification: Notification) -> bool:
        try:
            self._callback(notification)
        except Exception:
            _logger.debug("Notification callback failed", exc_info=True)
            return False
        return True


class PermissionGatedNotifier(Notifier):
    """Deliver through a platform alert API that requires user permission.

    Permission is requested once, on the first notification while the
    state is still ``default``. A denied or unsupported platform drops
    notifications with a warning log.
    """

    def __init__(
        self,
        show: Callable[[Notification], None],
        *,
        supported: bool = True,
        permission: PermissionState = PermissionState.DEFAULT,
        request_permission: Callable[[], PermissionState] | None = None,
    ) -> None:
        self._show = show
        self._supported = supported
        self._permission = permission
        self._request_permission = request_permission

    @property
    def permission(self) -> PermissionState:
        return self._permission

    def ensure_permission(self) -> bool:
        """Return whether notifications may be shown, asking if undecided."""
        if not self._supported:
            _logger.warning("Notifications are not supported on this platform")
            return False
        if self._permission == PermissionState.GRANTED:
            return True
        if self._permission == PermissionState.DENIED:
            _logger.warning("Notification permission denied")
            return False
        if self._request_permission is None:
            return False
        try:
            self._permission = PermissionState(self._request_permission())
        except Exception:
            _logger.error("Error requesting notification permission", exc_info=True)
            return False
        return self._permission == PermissionState.GRANTED

    def deliver(self, notification: Notification) -> bool:
        if not self.ensure_permission():
            _logger.warning("Notification not shown: %s", notification.message)
            return False
        try:
            self._show(notification)
        except Exception:
            _logger.error("Error showing notification", exc_info=True)
            return False
        return True

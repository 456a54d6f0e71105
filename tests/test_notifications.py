from __future__ import annotations

import logging

import pytest

from pybusfleet.notifications import (
    CallbackNotifier,
    LoggingNotifier,
    MemoryNotifier,
    Notification,
    NotificationCategory,
    PermissionGatedNotifier,
    PermissionState,
)


def test_notification_title_and_tag_follow_category() -> None:
    notification = Notification(category=NotificationCategory.WARNING, message="No report data to export")

    assert notification.title == "Warning"
    assert notification.tag == "warning"


def test_memory_notifier_buffers_and_drains() -> None:
    notifier = MemoryNotifier()

    assert notifier.success("Bus added successfully")
    assert notifier.error("Failed to add bus")

    assert notifier.messages() == ["Bus added successfully", "Failed to add bus"]
    assert notifier.messages(NotificationCategory.ERROR) == ["Failed to add bus"]
    assert [n.category for n in notifier.drain()] == [NotificationCategory.SUCCESS, NotificationCategory.ERROR]
    assert notifier.notifications == []


def test_logging_notifier_levels(caplog: pytest.LogCaptureFixture) -> None:
    logger = logging.getLogger("tests.notifications")
    notifier = LoggingNotifier(logger)

    with caplog.at_level(logging.INFO, logger="tests.notifications"):
        notifier.info("Loading")
        notifier.warning("Careful")
        notifier.error("Broken")

    assert [(r.levelno, r.getMessage()) for r in caplog.records] == [
        (logging.INFO, "Info: Loading"),
        (logging.WARNING, "Warning: Careful"),
        (logging.ERROR, "Error: Broken"),
    ]


def test_callback_notifier_reports_callback_failure() -> None:
    received: list[Notification] = []

    def _fail(_notification: Notification) -> None:
        raise RuntimeError("toast container missing")

    assert CallbackNotifier(received.append).success("Saved")
    assert received[0].message == "Saved"
    assert not CallbackNotifier(_fail).success("Saved")


def test_permission_is_requested_once() -> None:
    shown: list[str] = []
    requests: list[int] = []

    def _request() -> PermissionState:
        requests.append(1)
        return PermissionState.GRANTED

    notifier = PermissionGatedNotifier(lambda n: shown.append(n.message), request_permission=_request)

    assert notifier.success("one")
    assert notifier.success("two")
    assert shown == ["one", "two"]
    assert len(requests) == 1
    assert notifier.permission == PermissionState.GRANTED


def test_denied_permission_drops_notifications(caplog: pytest.LogCaptureFixture) -> None:
    shown: list[str] = []
    notifier = PermissionGatedNotifier(
        lambda n: shown.append(n.message),
        request_permission=lambda: PermissionState.DENIED,
    )

    with caplog.at_level(logging.WARNING, logger="pybusfleet.notifications"):
        assert not notifier.error("Failed to fetch data")
        assert not notifier.error("Failed to fetch data")

    assert shown == []
    assert notifier.permission == PermissionState.DENIED
    assert "Notification not shown: Failed to fetch data" in caplog.text


def test_unsupported_platform_never_shows() -> None:
    shown: list[str] = []
    notifier = PermissionGatedNotifier(
        lambda n: shown.append(n.message),
        supported=False,
        permission=PermissionState.GRANTED,
    )

    assert not notifier.info("hello")
    assert shown == []


def test_show_failure_is_reported_as_undelivered() -> None:
    def _show(_notification: Notification) -> None:
        raise OSError("display unavailable")

    notifier = PermissionGatedNotifier(_show, permission=PermissionState.GRANTED)

    assert not notifier.success("Saved")

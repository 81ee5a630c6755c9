from dataclasses import dataclass

NOTIFICATION_TITLE = "가계부"
NOTIFICATION_TAG = "gaegyebu-notification"
DEFAULT_NOTIFICATION_BODY = "새로운 알림이 있습니다"
NOTIFICATION_ICON = "/icon-192x192.png"
VIEW_ACTION = "view"
DISMISS_ACTION = "dismiss"


@dataclass(frozen=True)
class NotificationAction:
    action: str
    title: str
    icon: str


@dataclass(frozen=True)
class PushNotification:
    body: str
    title: str = NOTIFICATION_TITLE
    icon: str = NOTIFICATION_ICON
    badge: str = NOTIFICATION_ICON
    tag: str = NOTIFICATION_TAG
    actions: tuple[NotificationAction, ...] = (
        NotificationAction(action=VIEW_ACTION, title="보기", icon="/icon-view.png"),
        NotificationAction(action=DISMISS_ACTION, title="닫기", icon="/icon-close.png"),
    )


def build_push_notification(data: bytes | str | None) -> PushNotification:
    if isinstance(data, bytes):
        data = data.decode("utf-8", errors="replace")
    body = data.strip() if data else ""
    return PushNotification(body=body or DEFAULT_NOTIFICATION_BODY)


def notification_click_target(action: str | None) -> str | None:
    """Path to open for a clicked notification action, or None to just close it."""
    if action == VIEW_ACTION:
        return "/"
    return None

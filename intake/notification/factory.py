from intake.config.settings import Settings
from intake.notification.base import BaseNotifier
from intake.notification.log_adapter import LogNotifier
from intake.notification.webhook_adapter import WebhookNotifier


class NotifierFactory:
    """Creates the configured notifier."""

    BACKENDS = ("webhook", "log")

    @classmethod
    def create(cls, settings: Settings) -> BaseNotifier:
        backend = settings.notifier_backend.lower()
        if backend == "webhook":
            return WebhookNotifier(
                url=settings.notifier_webhook_url,
                timeout_seconds=settings.notifier_timeout_seconds,
            )
        if backend == "log":
            return LogNotifier()
        raise ValueError(
            f"Unknown notifier backend '{backend}'. Choose from: {list(cls.BACKENDS)}"
        )

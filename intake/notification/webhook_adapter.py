from typing import Any

import httpx

from intake.notification.base import BaseNotifier
from intake.notification.exceptions import NotifyError


class WebhookNotifier(BaseNotifier):
    """POSTs each payload as JSON to an automation webhook."""

    def __init__(
        self,
        *,
        url: str,
        timeout_seconds: int,
        client: httpx.Client | None = None,
    ) -> None:
        if not url:
            raise ValueError("notifier_webhook_url is required for notifier_backend=webhook")
        self._url = url
        self._client = client or httpx.Client(timeout=timeout_seconds)

    def send(self, payload: dict[str, Any]) -> None:
        try:
            response = self._client.post(self._url, json=payload)
        except httpx.HTTPError as exc:
            raise NotifyError(f"Webhook network error: {exc}") from exc
        if response.is_error:
            raise NotifyError(
                f"Webhook error: {response.status_code} {response.reason_phrase}"
            )

    def close(self) -> None:
        self._client.close()

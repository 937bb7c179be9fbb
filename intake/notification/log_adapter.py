"""Notifier that only writes payloads to the log.

No network calls. Useful for local development and dry runs.
"""

import json
from typing import Any

from intake.logging.logger import Log
from intake.notification.base import BaseNotifier


class LogNotifier(BaseNotifier):
    def send(self, payload: dict[str, Any]) -> None:
        Log.info(f"Notification: {json.dumps(payload, ensure_ascii=False)}")

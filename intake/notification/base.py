from abc import ABC, abstractmethod
from typing import Any


class BaseNotifier(ABC):
    """Contract for outbound submission notifications."""

    @abstractmethod
    def send(self, payload: dict[str, Any]) -> None:
        """Deliver one notification payload.

        Raises:
            NotifyError: if delivery failed.
        """

from typing import Protocol

from intake.logging.logger import Log
from intake.pipeline.exceptions import QuotaError


class QuotaAccounts(Protocol):
    def remaining(self, owner_id: str) -> int | None: ...

    def deduct(self, owner_id: str, note: str) -> tuple[int, int] | None: ...


class QuotaGuard:
    """Checks an owner's remaining allowance before a run and spends it after.

    Anonymous submitters (no owner id) are never checked or charged. Owners
    with no allowance on record are not checked either.
    """

    def __init__(self, accounts: QuotaAccounts) -> None:
        self._accounts = accounts

    def check(self, owner_id: str | None, batch_size: int) -> None:
        """Raise QuotaError if the owner cannot afford batch_size items."""
        if not owner_id:
            return
        remaining = self._accounts.remaining(owner_id)
        if remaining is None:
            Log.info(f"Owner {owner_id} has no allowance on record; quota check skipped")
            return
        if remaining < batch_size:
            raise QuotaError(required=batch_size, remaining=remaining)

    def decrement(self, owner_id: str | None, item_name: str) -> bool:
        """Spend one unit of allowance for a persisted item.

        Best effort: failures are logged and reported as False, never raised.
        """
        if not owner_id:
            return False
        try:
            spent = self._accounts.deduct(owner_id, f"Deducted for new submission: {item_name}")
        except Exception as exc:
            Log.warning(f"Failed to deduct allowance for {item_name}: {exc}", exc_info=True)
            return False
        if spent is None:
            Log.warning(f"Owner {owner_id} has no remaining allowance to deduct")
            return False
        return True

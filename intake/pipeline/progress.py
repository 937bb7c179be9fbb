import threading
from collections.abc import Callable
from dataclasses import dataclass, replace
from enum import Enum


class StageName(str, Enum):
    COMPRESS = "compress"
    UPLOAD = "upload"
    PERSIST = "persist"
    NOTIFY = "notify"


class StageStatus(str, Enum):
    PENDING = "pending"
    ACTIVE = "active"
    DONE = "done"
    FAILED = "failed"


STAGE_ORDER: tuple[StageName, ...] = (
    StageName.COMPRESS,
    StageName.UPLOAD,
    StageName.PERSIST,
    StageName.NOTIFY,
)


@dataclass(frozen=True)
class StageState:
    name: StageName
    progress: int = 0
    status: StageStatus = StageStatus.PENDING
    detail: str = ""
    error: str | None = None


@dataclass(frozen=True)
class ProgressState:
    """Immutable view of a run's progress, safe to hand to another thread."""

    stages: tuple[StageState, ...]
    current_item_index: int = 0
    total_items: int = 0
    current_item_name: str = ""
    cancellable: bool = True
    complete: bool = False

    @property
    def overall(self) -> int:
        """Arithmetic mean of the stage progress values."""
        if not self.stages:
            return 0
        return round(sum(stage.progress for stage in self.stages) / len(self.stages))

    def stage(self, name: StageName | str) -> StageState:
        key = StageName(name)
        for state in self.stages:
            if state.name == key:
                return state
        raise KeyError(key)


ProgressListener = Callable[[ProgressState], None]


class ProgressTracker:
    """Single synchronized writer for a run's ProgressState.

    Stage workers update progress from several threads; every mutation goes
    through the lock and produces a fresh snapshot, which is passed to the
    optional listener before the lock is released so listeners observe
    updates in order.
    """

    def __init__(self, listener: ProgressListener | None = None) -> None:
        self._lock = threading.RLock()
        self._listener = listener
        self._state = self._initial_state(0)

    @staticmethod
    def _initial_state(total_items: int) -> ProgressState:
        return ProgressState(
            stages=tuple(StageState(name=name) for name in STAGE_ORDER),
            total_items=total_items,
        )

    def reset(self, total_items: int) -> None:
        with self._lock:
            self._publish(self._initial_state(total_items))

    def snapshot(self) -> ProgressState:
        with self._lock:
            return self._state

    @property
    def overall(self) -> int:
        return self.snapshot().overall

    def set_stage(
        self,
        name: StageName | str,
        progress: float,
        detail: str = "",
        error: str | None = None,
    ) -> None:
        """Record stage progress; status is derived from error and progress."""
        key = StageName(name)
        value = max(0, min(100, round(progress)))
        if error:
            status = StageStatus.FAILED
        elif value == 100:
            status = StageStatus.DONE
        else:
            status = StageStatus.ACTIVE
        with self._lock:
            self._replace_stage(
                key,
                lambda s: replace(s, progress=value, status=status, detail=detail, error=error),
            )

    def fail_stage(self, name: StageName | str, error: str) -> None:
        """Mark a stage failed, keeping whatever progress it had reached."""
        key = StageName(name)
        with self._lock:
            self._replace_stage(
                key,
                lambda s: replace(s, status=StageStatus.FAILED, detail=error, error=error),
            )

    def set_current_item(self, index: int, name: str = "") -> None:
        with self._lock:
            self._publish(
                replace(self._state, current_item_index=index, current_item_name=name)
            )

    def disable_cancel(self) -> None:
        with self._lock:
            self._publish(replace(self._state, cancellable=False))

    def finish(self, complete: bool = True) -> None:
        """Close the run; cancellation is no longer possible either way."""
        with self._lock:
            self._publish(replace(self._state, cancellable=False, complete=complete))

    def _replace_stage(
        self,
        key: StageName,
        update: Callable[[StageState], StageState],
    ) -> None:
        stages = tuple(
            update(stage) if stage.name == key else stage for stage in self._state.stages
        )
        self._publish(replace(self._state, stages=stages))

    def _publish(self, state: ProgressState) -> None:
        self._state = state
        if self._listener is not None:
            self._listener(state)

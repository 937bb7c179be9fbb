import threading
from abc import ABC, abstractmethod
from collections.abc import Callable, Sequence
from concurrent.futures import FIRST_EXCEPTION, ThreadPoolExecutor, wait
from dataclasses import dataclass, field
from typing import ClassVar, TypeVar

from intake.pipeline.cancellation import CancellationToken
from intake.pipeline.exceptions import CancelledError
from intake.pipeline.models import Batch, CreatedSubmission
from intake.pipeline.progress import ProgressTracker, StageName

T = TypeVar("T")
R = TypeVar("R")

DEFAULT_CONCURRENCY = 3


@dataclass(slots=True)
class RunContext:
    """State shared by the stages of one pipeline run."""

    batch: Batch
    token: CancellationToken
    tracker: ProgressTracker
    created: dict[int, CreatedSubmission] = field(default_factory=dict)
    uploaded_keys: list[str] = field(default_factory=list)
    lock: threading.Lock = field(default_factory=threading.Lock)

    def check_cancelled(self, stage: StageName) -> None:
        if self.token.is_requested():
            self.tracker.disable_cancel()
            raise CancelledError(stage.value)

    def record_upload(self, key: str) -> None:
        with self.lock:
            self.uploaded_keys.append(key)

    def record_created(self, index: int, created: CreatedSubmission) -> None:
        with self.lock:
            self.created[index] = created

    def created_in_order(self) -> list[CreatedSubmission]:
        with self.lock:
            return [self.created[i] for i in sorted(self.created)]


class PipelineStage(ABC):
    name: ClassVar[StageName]

    @abstractmethod
    def run(self, context: RunContext) -> RunContext:
        raise NotImplementedError


class ConcurrentStage(PipelineStage):
    """Stage whose per-entry work fans out to a bounded thread pool.

    The first failure stops new entries from starting; entries already in
    flight run to completion before the failure is re-raised.
    """

    def __init__(self, concurrency: int = DEFAULT_CONCURRENCY) -> None:
        self._concurrency = max(1, concurrency)

    def fan_out(
        self,
        context: RunContext,
        entries: Sequence[T],
        work: Callable[[int, T], R],
    ) -> list[R]:
        if not entries:
            return []
        results: list[R | None] = [None] * len(entries)
        stop = threading.Event()

        def task(index: int, entry: T) -> None:
            if stop.is_set():
                return
            context.check_cancelled(self.name)
            results[index] = work(index, entry)

        with ThreadPoolExecutor(
            max_workers=min(self._concurrency, len(entries)),
            thread_name_prefix=f"intake-{self.name.value}",
        ) as executor:
            futures = [executor.submit(task, i, entry) for i, entry in enumerate(entries)]
            done, _pending = wait(futures, return_when=FIRST_EXCEPTION)
            failed = [f for f in futures if f in done and f.exception() is not None]
            if failed:
                stop.set()
                for future in futures:
                    future.cancel()

        if failed:
            raise failed[0].exception()  # type: ignore[misc]
        return results  # type: ignore[return-value]

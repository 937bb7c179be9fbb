from intake.config.settings import Settings
from intake.database.repositories.accounts_repository import AccountsRepository
from intake.database.repositories.record_store import PostgresRecordStore
from intake.logging.logger import Log
from intake.pipeline.cancellation import CancellationToken
from intake.pipeline.exceptions import QuotaError, ValidationError
from intake.pipeline.models import Batch, Outcome
from intake.pipeline.orchestrator import PipelineOrchestrator, build_orchestrator
from intake.pipeline.progress import ProgressListener, ProgressTracker
from intake.pipeline.quota import QuotaGuard
from intake.pipeline.validation import ValidationGate

SUBMIT_ERROR_KEY = "submit"


class BatchSubmitter:
    """Validate, check allowance, then run the pipeline. Always returns an Outcome."""

    def __init__(
        self,
        validation_gate: ValidationGate,
        quota_guard: QuotaGuard,
        orchestrator: PipelineOrchestrator,
    ) -> None:
        self._validation_gate = validation_gate
        self._quota_guard = quota_guard
        self._orchestrator = orchestrator

    def submit(
        self,
        batch: Batch,
        token: CancellationToken | None = None,
        on_progress: ProgressListener | None = None,
        tracker: ProgressTracker | None = None,
    ) -> Outcome:
        try:
            self._validation_gate.validate(batch)
        except ValidationError as exc:
            Log.warning(f"Batch rejected: {exc.field}: {exc.message}")
            return Outcome(
                success=False,
                error=exc.message,
                field_errors={exc.field: exc.message},
            )

        try:
            self._quota_guard.check(batch.owner_id, len(batch.items))
        except QuotaError as exc:
            Log.warning(f"Batch rejected for owner {batch.owner_id}: {exc}")
            return Outcome(
                success=False,
                error=str(exc),
                field_errors={SUBMIT_ERROR_KEY: str(exc)},
            )

        return self._orchestrator.run(batch, token, on_progress, tracker)


def build_submitter(settings: Settings) -> BatchSubmitter:
    """Build a BatchSubmitter wired to the configured adapters."""
    record_store = PostgresRecordStore()
    quota_guard = QuotaGuard(AccountsRepository())
    return BatchSubmitter(
        validation_gate=ValidationGate(settings.min_images_per_item),
        quota_guard=quota_guard,
        orchestrator=build_orchestrator(settings, record_store, quota_guard),
    )

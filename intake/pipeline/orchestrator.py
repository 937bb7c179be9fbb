from intake.config.settings import Settings
from intake.database.repositories.accounts_repository import AccountsRepository
from intake.database.repositories.record_store import PostgresRecordStore
from intake.imaging.factory import TranscoderFactory
from intake.logging.logger import Log
from intake.notification.factory import NotifierFactory
from intake.pipeline.cancellation import CancellationToken
from intake.pipeline.context import PipelineStage, RunContext
from intake.pipeline.exceptions import CancelledError, StageError
from intake.pipeline.models import Batch, Outcome
from intake.pipeline.path_namer import PathNamer
from intake.pipeline.progress import ProgressListener, ProgressTracker
from intake.pipeline.quota import QuotaGuard
from intake.pipeline.stages import CompressStage, NotifyStage, PersistStage, UploadStage
from intake.storage.factory import BlobStoreFactory


class PipelineOrchestrator:
    """Runs the submission stages strictly in sequence over a whole batch.

    Pipeline: compress -> upload -> persist -> notify.
    A stage error or cancellation ends the run; work already committed by
    earlier items or stages is left in place.
    """

    def __init__(self, stages: list[PipelineStage]) -> None:
        self._stages = stages

    def run(
        self,
        batch: Batch,
        token: CancellationToken | None = None,
        on_progress: ProgressListener | None = None,
        tracker: ProgressTracker | None = None,
    ) -> Outcome:
        """Run every stage and report the outcome. Never raises for stage failures."""
        tracker = tracker or ProgressTracker(on_progress)
        tracker.reset(len(batch.items))
        token = token or CancellationToken()
        token.on_request(tracker.disable_cancel)
        context = RunContext(batch=batch, token=token, tracker=tracker)
        Log.info(
            f"Starting submission of {len(batch.items)} item(s) "
            f"for owner {batch.owner_id or 'guest'}"
        )

        current = None
        try:
            for stage in self._stages:
                current = stage.name
                context.check_cancelled(stage.name)
                Log.info(f"Stage {stage.name.value} started")
                context = stage.run(context)
                Log.info(f"Stage {stage.name.value} finished")
        except CancelledError as exc:
            return self._fail(context, current.value if current else exc.stage, str(exc), True)
        except StageError as exc:
            return self._fail(context, exc.stage, exc.detail, False)

        tracker.finish()
        created = context.created_in_order()
        message = f"{len(created)} submissions completed"
        Log.info(message)
        return Outcome(success=True, created=created, message=message)

    @staticmethod
    def _fail(context: RunContext, stage: str, error: str, cancelled: bool) -> Outcome:
        context.tracker.fail_stage(stage, error)
        context.tracker.finish(complete=False)
        Log.error(f"Submission failed at stage {stage}: {error}")
        if context.uploaded_keys:
            Log.warning(
                f"{len(context.uploaded_keys)} uploaded object(s) left in storage "
                "after failed submission"
            )
        created = context.created_in_order()
        if created:
            Log.warning(f"{len(created)} submission(s) were persisted before the failure")
        return Outcome(success=False, created=created, error=error, cancelled=cancelled)


def build_orchestrator(
    settings: Settings,
    record_store: PostgresRecordStore | None = None,
    quota_guard: QuotaGuard | None = None,
    path_namer: PathNamer | None = None,
) -> PipelineOrchestrator:
    """Build a PipelineOrchestrator with all required adapters."""
    record_store = record_store or PostgresRecordStore()
    quota_guard = quota_guard or QuotaGuard(AccountsRepository())
    concurrency = settings.pipeline_concurrency
    stages: list[PipelineStage] = [
        CompressStage(
            TranscoderFactory.create(settings),
            max_width=settings.compression_max_width,
            max_height=settings.compression_max_height,
            quality=settings.compression_quality,
            concurrency=concurrency,
        ),
        UploadStage(
            BlobStoreFactory.create(settings),
            path_namer or PathNamer(),
            concurrency=concurrency,
        ),
        PersistStage(
            record_store,
            quota_guard,
            initial_status=settings.initial_submission_status,
            concurrency=concurrency,
        ),
        NotifyStage(
            NotifierFactory.create(settings),
            source_tag=settings.notification_source_tag,
            concurrency=concurrency,
        ),
    ]
    return PipelineOrchestrator(stages)

import argparse
import sys
from pathlib import Path

from psycopg_pool import PoolTimeout

from intake.config.settings import Settings
from intake.database.connection import close_pool, init_pool
from intake.logging.logger import Log
from intake.pipeline.batch_loader import BatchLoader
from intake.pipeline.exceptions import ManifestError
from intake.pipeline.progress import ProgressState
from intake.pipeline.submitter import build_submitter


def _log_progress(state: ProgressState) -> None:
    active = [s for s in state.stages if s.detail and s.status.value == "active"]
    detail = active[-1].detail if active else ""
    Log.debug(f"[{state.overall:3d}%] {detail}")


def main(argv: list[str] | None = None) -> int:
    """Entry point: load manifest -> build pipeline -> submit -> report."""
    parser = argparse.ArgumentParser(prog="intake", description="Submit a dish batch.")
    parser.add_argument("manifest", type=Path, help="path to the batch manifest JSON")
    args = parser.parse_args(argv)

    settings = Settings()
    Log.configure(settings.log_level)

    try:
        batch = BatchLoader().load(args.manifest)
    except ManifestError as exc:
        Log.error(str(exc))
        return 2

    try:
        init_pool(settings)
    except PoolTimeout as exc:
        Log.error(f"Database unavailable: {exc}")
        return 1
    try:
        outcome = build_submitter(settings).submit(batch, on_progress=_log_progress)
    finally:
        close_pool()

    if not outcome.success:
        Log.error(f"Submission failed: {outcome.error}")
        return 1
    Log.info(outcome.message)
    for created in outcome.created:
        Log.info(f"  {created.item.name}: {created.notify_detail}")
    return 0


if __name__ == "__main__":
    sys.exit(main())

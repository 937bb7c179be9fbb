import threading
from typing import Any

from intake.database.repositories.record_store import PostgresRecordStore
from intake.imaging.base import BaseImageTranscoder
from intake.logging.logger import Log
from intake.notification.base import BaseNotifier
from intake.notification.payload import build_payload
from intake.pipeline.categories import SUBMISSIONS_TABLE, ItemCategory
from intake.pipeline.context import DEFAULT_CONCURRENCY, ConcurrentStage, RunContext
from intake.pipeline.exceptions import IntakeError, StageError
from intake.pipeline.models import Batch, CreatedSubmission, ImageBlob, Item
from intake.pipeline.path_namer import PathNamer
from intake.pipeline.progress import StageName
from intake.pipeline.quota import QuotaGuard
from intake.storage.base import BaseBlobStore

STYLE_INSTRUCTIONS_HEADER = "\n\nCustom style instructions:\n"


class CompressStage(ConcurrentStage):
    name = StageName.COMPRESS

    def __init__(
        self,
        transcoder: BaseImageTranscoder,
        *,
        max_width: int,
        max_height: int,
        quality: int,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        super().__init__(concurrency)
        self._transcoder = transcoder
        self._max_width = max_width
        self._max_height = max_height
        self._quality = quality

    def run(self, context: RunContext) -> RunContext:
        items = context.batch.items
        tracker = context.tracker
        fractions = [0.0] * len(items)
        lock = threading.Lock()
        tracker.set_stage(self.name, 0, "Starting image compression...")

        def report(index: int, done: int, total: int, item: Item) -> None:
            with lock:
                fractions[index] = done / total if total else 1.0
                progress = sum(fractions) / len(items) * 100
                tracker.set_stage(
                    self.name, progress, f"Compressing images of {item.name}: {done}/{total}"
                )

        def compress_item(index: int, item: Item) -> None:
            tracker.set_current_item(index + 1, item.name)
            total = len(item.raw_images)
            transcoded: list[ImageBlob] = []
            for position, image in enumerate(item.raw_images, start=1):
                transcoded.append(self._transcode(item, image))
                report(index, position, total, item)
            if not total:
                report(index, 0, 0, item)
            item.transcoded_images = transcoded

        self.fan_out(context, items, compress_item)
        tracker.set_stage(self.name, 100, "Image compression complete")
        return context

    def _transcode(self, item: Item, image: ImageBlob) -> ImageBlob:
        try:
            return self._transcoder.transcode(
                image, self._max_width, self._max_height, self._quality
            )
        except IntakeError:
            raise
        except Exception as exc:
            raise StageError(
                self.name.value,
                f"Failed to compress {image.filename} of {item.name}: {exc}",
            ) from exc


class UploadStage(ConcurrentStage):
    name = StageName.UPLOAD

    def __init__(
        self,
        blob_store: BaseBlobStore,
        path_namer: PathNamer,
        *,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        super().__init__(concurrency)
        self._blob_store = blob_store
        self._path_namer = path_namer

    def run(self, context: RunContext) -> RunContext:
        batch = context.batch
        tracker = context.tracker
        assets = batch.auxiliary_assets
        if not batch.items:
            tracker.set_stage(self.name, 100, "No images to upload")
            return context
        total_files = sum(len(item.transcoded_images) for item in batch.items)
        if assets is not None:
            total_files += assets.file_count
        uploaded = 0
        lock = threading.Lock()
        tracker.set_stage(self.name, 0, "Starting image upload...")

        def upload(blob: ImageBlob, key: str, label: str) -> str:
            nonlocal uploaded
            context.check_cancelled(self.name)
            ref = self._put(blob, key)
            context.record_upload(key)
            with lock:
                uploaded += 1
                tracker.set_stage(
                    self.name,
                    uploaded / total_files * 100,
                    f"Uploaded {uploaded}/{total_files} files ({label})",
                )
            return ref

        if assets is not None and assets.file_count:
            shared = [("inspiration", blob) for blob in assets.inspiration_images]
            shared += [("branding", blob) for blob in assets.branding_materials]
            refs = self.fan_out(
                context,
                shared,
                lambda _i, entry: upload(
                    entry[1],
                    self._path_namer.shared_asset_key(
                        batch.owner_id, entry[0], entry[1].extension
                    ),
                    "shared assets",
                ),
            )
            assets.inspiration_refs = refs[: len(assets.inspiration_images)]
            assets.branding_refs = refs[len(assets.inspiration_images):]

        def upload_item(index: int, item: Item) -> None:
            tracker.set_current_item(index + 1, item.name)
            item_segment = self._path_namer.new_segment()
            item.uploaded_refs = [
                upload(
                    blob,
                    self._path_namer.item_key(
                        batch.owner_id, item.category, item_segment, blob.extension
                    ),
                    item.name,
                )
                for blob in item.transcoded_images
            ]

        self.fan_out(context, batch.items, upload_item)
        tracker.set_stage(self.name, 100, "Image upload complete")
        return context

    def _put(self, blob: ImageBlob, key: str) -> str:
        try:
            self._blob_store.put(key, blob)
            ref = self._blob_store.public_ref(key)
        except IntakeError:
            raise
        except Exception as exc:
            raise StageError(
                self.name.value, f"Error uploading {blob.filename}: {exc}"
            ) from exc
        if not ref:
            raise StageError(self.name.value, f"Error getting URL for {blob.filename}")
        return ref


class PersistStage(ConcurrentStage):
    name = StageName.PERSIST

    def __init__(
        self,
        record_store: PostgresRecordStore,
        quota_guard: QuotaGuard,
        *,
        initial_status: str,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        super().__init__(concurrency)
        self._record_store = record_store
        self._quota_guard = quota_guard
        self._initial_status = initial_status

    def run(self, context: RunContext) -> RunContext:
        batch = context.batch
        tracker = context.tracker
        saved = 0
        lock = threading.Lock()
        tracker.set_stage(self.name, 0, "Saving records...")

        def persist_item(index: int, item: Item) -> None:
            nonlocal saved
            tracker.set_current_item(index + 1, item.name)
            category = ItemCategory.parse(item.category)
            item_row = self._insert(
                category.table,
                self._item_fields(batch, item),
                f"Error saving {item.name}",
            )
            submission = self._insert(
                SUBMISSIONS_TABLE,
                self._submission_fields(batch, item, item_row.get("id")),
                f"Error creating submission for {item.name}",
            )
            self._quota_guard.decrement(batch.owner_id, item.name)
            context.record_created(
                index,
                CreatedSubmission(
                    item_record_id=item_row.get("id"),
                    submission=submission,
                    item=item,
                ),
            )
            with lock:
                saved += 1
                tracker.set_stage(
                    self.name, saved / len(batch.items) * 100, f"Saved {item.name}"
                )

        self.fan_out(context, batch.items, persist_item)
        tracker.set_stage(self.name, 100, "Records saved")
        return context

    def _insert(self, table: str, fields: dict[str, Any], context: str) -> dict[str, Any]:
        try:
            return self._record_store.insert(table, fields)
        except IntakeError:
            raise
        except Exception as exc:
            raise StageError(self.name.value, f"{context}: {exc}") from exc

    @staticmethod
    def _item_fields(batch: Batch, item: Item) -> dict[str, Any]:
        return {
            "client_id": batch.owner_id,
            "name": item.name,
            "description": item.description or None,
            "notes": item.notes or None,
            "reference_image_urls": list(item.uploaded_refs),
        }

    def _submission_fields(
        self, batch: Batch, item: Item, item_record_id: Any
    ) -> dict[str, Any]:
        assets = batch.auxiliary_assets
        instructions = assets.instructions.strip() if assets is not None else ""
        description = item.description or None
        if instructions:
            header = STYLE_INSTRUCTIONS_HEADER if item.description else ""
            description = f"{item.description}{header}{instructions}"
        return {
            "client_id": batch.owner_id,
            "original_item_id": item_record_id,
            "item_type": item.category,
            "item_name_at_submission": item.name,
            "submission_status": self._initial_status,
            "original_image_urls": list(item.uploaded_refs),
            "restaurant_name": batch.organization or None,
            "contact_name": batch.owner_display_name or None,
            "branding_material_urls": (assets.branding_refs or None) if assets else None,
            "reference_example_urls": (assets.inspiration_refs or None) if assets else None,
            "description": description,
        }


class NotifyStage(ConcurrentStage):
    """Best-effort delivery: failures are recorded per submission, never raised."""

    name = StageName.NOTIFY

    def __init__(
        self,
        notifier: BaseNotifier,
        *,
        source_tag: str,
        concurrency: int = DEFAULT_CONCURRENCY,
    ) -> None:
        super().__init__(concurrency)
        self._notifier = notifier
        self._source_tag = source_tag

    def run(self, context: RunContext) -> RunContext:
        submissions = context.created_in_order()
        tracker = context.tracker
        settled = 0
        lock = threading.Lock()
        tracker.set_stage(self.name, 0, "Sending notifications...")

        def notify(_index: int, created: CreatedSubmission) -> None:
            nonlocal settled
            name = created.item.name
            try:
                self._notifier.send(build_payload(context.batch, created, self._source_tag))
            except Exception as exc:
                created.notified = False
                created.notify_detail = f"Notification failed: {exc}"
                Log.warning(f"Notification for {name} failed: {exc}")
            else:
                created.notified = True
                created.notify_detail = "Notification sent"
            with lock:
                settled += 1
                tracker.set_stage(
                    self.name,
                    settled / len(submissions) * 100,
                    f"Notification settled for {name}",
                )

        self.fan_out(context, submissions, notify)
        failures = sum(1 for created in submissions if not created.notified)
        detail = (
            f"Notifications completed with {failures} error(s)"
            if failures
            else "Notifications sent"
        )
        tracker.set_stage(self.name, 100, detail)
        return context

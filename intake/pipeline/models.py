from dataclasses import dataclass, field
from typing import Any


@dataclass(frozen=True)
class ImageBlob:
    """A single file moving through the pipeline (raw or transcoded)."""

    filename: str
    content_type: str
    data: bytes

    @property
    def extension(self) -> str:
        _, dot, ext = self.filename.rpartition(".")
        return ext.lower() if dot and ext else "bin"


@dataclass
class Item:
    """One user-authored dish; stages fill in the derived fields in place."""

    id: str
    name: str
    category: str
    description: str = ""
    notes: str = ""
    raw_images: list[ImageBlob] = field(default_factory=list)
    transcoded_images: list[ImageBlob] = field(default_factory=list)
    uploaded_refs: list[str] = field(default_factory=list)


@dataclass
class AuxiliaryAssets:
    """Shared files and notes attached to every submission of a batch."""

    inspiration_images: list[ImageBlob] = field(default_factory=list)
    branding_materials: list[ImageBlob] = field(default_factory=list)
    instructions: str = ""
    inspiration_refs: list[str] = field(default_factory=list)
    branding_refs: list[str] = field(default_factory=list)

    @property
    def file_count(self) -> int:
        return len(self.inspiration_images) + len(self.branding_materials)


@dataclass
class Batch:
    """The unit of a single pipeline run."""

    items: list[Item]
    owner_id: str | None = None
    owner_display_name: str = ""
    organization: str = ""
    auxiliary_assets: AuxiliaryAssets | None = None

    @property
    def is_identified(self) -> bool:
        return bool(self.owner_id)


@dataclass
class CreatedSubmission:
    """Persisted records for one item, plus its delivery status."""

    item_record_id: Any
    submission: dict[str, Any]
    item: Item
    notify_detail: str = ""
    notified: bool = False


@dataclass
class Outcome:
    """Final result of a submission attempt."""

    success: bool
    created: list[CreatedSubmission] = field(default_factory=list)
    error: str | None = None
    message: str = ""
    cancelled: bool = False
    field_errors: dict[str, str] = field(default_factory=dict)

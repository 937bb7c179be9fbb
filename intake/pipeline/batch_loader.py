"""Builds a Batch from a JSON manifest on disk.

Manifest shape::

    {
      "owner_id": "c-42",              # optional, omit for guests
      "owner_display_name": "Dana",
      "organization": "Cafe Dana",
      "items": [
        {"name": "Shakshuka", "category": "dish", "description": "...",
         "notes": "...", "images": ["shakshuka/1.jpg", ...]}
      ],
      "auxiliary_assets": {
        "inspiration_images": [...], "branding_materials": [...],
        "instructions": "..."
      }
    }

Image paths are resolved relative to the manifest's directory.
"""

import json
import mimetypes
import uuid
from pathlib import Path
from typing import Any

from intake.pipeline.exceptions import ManifestError
from intake.pipeline.models import AuxiliaryAssets, Batch, ImageBlob, Item


def load_image(path: Path) -> ImageBlob:
    if not path.is_file():
        raise ManifestError(f"Image not found: {path}")
    content_type, _ = mimetypes.guess_type(path.name)
    return ImageBlob(
        filename=path.name,
        content_type=content_type or "application/octet-stream",
        data=path.read_bytes(),
    )


class BatchLoader:
    """Reads a manifest file and the images it references."""

    def load(self, manifest_path: Path) -> Batch:
        try:
            raw = json.loads(manifest_path.read_text(encoding="utf-8"))
        except FileNotFoundError as exc:
            raise ManifestError(f"Manifest not found: {manifest_path}") from exc
        except json.JSONDecodeError as exc:
            raise ManifestError(f"Invalid manifest JSON: {exc}") from exc
        if not isinstance(raw, dict):
            raise ManifestError("Manifest must be a JSON object")

        base_dir = manifest_path.parent
        items_raw = raw.get("items", [])
        if not isinstance(items_raw, list):
            raise ManifestError("'items' must be a list")

        return Batch(
            items=[self._item(entry, base_dir) for entry in items_raw],
            owner_id=raw.get("owner_id") or None,
            owner_display_name=str(raw.get("owner_display_name", "")),
            organization=str(raw.get("organization", "")),
            auxiliary_assets=self._assets(raw.get("auxiliary_assets"), base_dir),
        )

    def _item(self, entry: Any, base_dir: Path) -> Item:
        if not isinstance(entry, dict):
            raise ManifestError("Each item must be a JSON object")
        return Item(
            id=str(entry.get("id") or uuid.uuid4()),
            name=str(entry.get("name", "")),
            category=str(entry.get("category", "")),
            description=str(entry.get("description", "")),
            notes=str(entry.get("notes", "")),
            raw_images=self._images(entry.get("images", []), base_dir),
        )

    def _assets(self, entry: Any, base_dir: Path) -> AuxiliaryAssets | None:
        if entry is None:
            return None
        if not isinstance(entry, dict):
            raise ManifestError("'auxiliary_assets' must be a JSON object")
        return AuxiliaryAssets(
            inspiration_images=self._images(entry.get("inspiration_images", []), base_dir),
            branding_materials=self._images(entry.get("branding_materials", []), base_dir),
            instructions=str(entry.get("instructions", "")),
        )

    @staticmethod
    def _images(paths: Any, base_dir: Path) -> list[ImageBlob]:
        if not isinstance(paths, list):
            raise ManifestError("Image lists must be JSON arrays of paths")
        return [load_image(base_dir / str(p)) for p in paths]

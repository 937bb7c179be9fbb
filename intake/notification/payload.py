from datetime import datetime, timezone
from typing import Any

from intake.pipeline.categories import ItemCategory
from intake.pipeline.models import Batch, CreatedSubmission


def parse_ingredients(description: str | None) -> list[str] | None:
    """Split a comma-separated description into trimmed, non-empty ingredients."""
    if not description or not description.strip():
        return None
    return [part.strip() for part in description.split(",") if part.strip()]


def build_payload(
    batch: Batch,
    created: CreatedSubmission,
    source_tag: str,
    now: datetime | None = None,
) -> dict[str, Any]:
    """Build the outbound notification body for one created submission."""
    item = created.item
    category = ItemCategory.parse(item.category)
    if category.lists_ingredients:
        category_field = None
        ingredients = parse_ingredients(item.description)
    else:
        category_field = item.description.strip() or None
        ingredients = None

    timestamp = (now or datetime.now(timezone.utc)).isoformat()
    return {
        "submissionTimestamp": timestamp,
        "isAuthenticated": batch.is_identified,
        "clientId": batch.owner_id,
        "restaurantName": batch.organization or None,
        "submitterName": batch.owner_display_name or None,
        "itemName": created.submission.get("item_name_at_submission", item.name),
        "itemType": created.submission.get("item_type", item.category),
        "description": item.description or None,
        "specialNotes": item.notes or None,
        "uploadedImageUrls": created.submission.get(
            "original_image_urls", list(item.uploaded_refs)
        ),
        "category": category_field,
        "ingredients": ingredients,
        "sourceForm": source_tag,
    }

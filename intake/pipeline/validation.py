from intake.pipeline.exceptions import ValidationError
from intake.pipeline.models import Batch

DEFAULT_MIN_IMAGES = 4


class ValidationGate:
    """Pre-flight structural checks on a batch.

    Checks run in a fixed order and stop at the first failure:
    owner display name, then per item: name, category, image count.
    """

    def __init__(self, min_images_per_item: int = DEFAULT_MIN_IMAGES) -> None:
        self._min_images = min_images_per_item

    def validate(self, batch: Batch) -> None:
        """Raise ValidationError keyed by the first offending field."""
        if not batch.owner_display_name.strip():
            raise ValidationError("owner_display_name", "Contact name is required.")

        for position, item in enumerate(batch.items, start=1):
            if not item.name.strip():
                raise ValidationError(
                    "item_name", f"Item name is required for item {position}."
                )
            if not item.category.strip():
                raise ValidationError(
                    "item_category", f"Item type is required for item {position}."
                )
            if len(item.raw_images) < self._min_images:
                raise ValidationError(
                    "images",
                    f"At least {self._min_images} images are required for item {position}.",
                )

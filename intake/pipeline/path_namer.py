import random
import re
import uuid
from collections.abc import Callable

ANONYMOUS_SCOPE = "guest"
SHARED_ASSETS_SEGMENT = "shared-assets"

_UNSAFE_CHARS = re.compile(r"[^a-z0-9_-]+")
_REPEATED_DASHES = re.compile(r"-{2,}")


def sanitize_path_component(value: str, fallback: str = "item") -> str:
    """Reduce free text to a lower-case storage-safe path segment."""
    cleaned = _UNSAFE_CHARS.sub("-", value.strip().lower())
    cleaned = _REPEATED_DASHES.sub("-", cleaned).strip("-")
    return cleaned or fallback


class PathNamer:
    """Builds collision-resistant object keys.

    Keys are scoped by owner (or the anonymous scope), then category, then
    random identifiers. The randomness source is injectable so tests can
    reproduce keys.
    """

    def __init__(self, random_segment: Callable[[], str] | None = None) -> None:
        self._random_segment = random_segment or (lambda: str(uuid.uuid4()))

    @classmethod
    def seeded(cls, seed: int) -> "PathNamer":
        rng = random.Random(seed)
        return cls(lambda: str(uuid.UUID(int=rng.getrandbits(128), version=4)))

    def new_segment(self) -> str:
        return self._random_segment()

    @staticmethod
    def scope(owner_id: str | None) -> str:
        return sanitize_path_component(owner_id, ANONYMOUS_SCOPE) if owner_id else ANONYMOUS_SCOPE

    def item_key(
        self,
        owner_id: str | None,
        category: str,
        item_segment: str,
        extension: str,
    ) -> str:
        """{scope}/{category}/{item_segment}/{random}.{ext}"""
        return "/".join(
            (
                self.scope(owner_id),
                sanitize_path_component(category),
                item_segment,
                f"{self.new_segment()}.{extension}",
            )
        )

    def shared_asset_key(self, owner_id: str | None, kind: str, extension: str) -> str:
        """{scope}/shared-assets/{kind}/{random}.{ext}"""
        return "/".join(
            (
                self.scope(owner_id),
                SHARED_ASSETS_SEGMENT,
                sanitize_path_component(kind, "assets"),
                f"{self.new_segment()}.{extension}",
            )
        )

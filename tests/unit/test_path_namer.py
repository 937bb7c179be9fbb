from intake.pipeline.path_namer import PathNamer, sanitize_path_component


class TestSanitizePathComponent:
    def test_lowercases_and_replaces_unsafe_characters(self) -> None:
        assert sanitize_path_component("Main Course / Hot!") == "main-course-hot"

    def test_keeps_underscores_and_dashes(self) -> None:
        assert sanitize_path_component("side_dish-2") == "side_dish-2"

    def test_falls_back_when_nothing_remains(self) -> None:
        assert sanitize_path_component("מנה", fallback="item") == "item"


class TestItemKey:
    def test_layout(self) -> None:
        namer = PathNamer(lambda: "rnd")
        key = namer.item_key("c-1", "Cocktail", "item-seg", "jpg")
        assert key == "c-1/cocktail/item-seg/rnd.jpg"

    def test_anonymous_scope(self) -> None:
        namer = PathNamer(lambda: "rnd")
        assert namer.item_key(None, "dish", "seg", "png").startswith("guest/dish/")

    def test_fresh_segment_per_call_never_collides(self) -> None:
        namer = PathNamer()
        keys = {namer.item_key("c-1", "dish", "seg", "jpg") for _ in range(500)}
        assert len(keys) == 500

    def test_same_seed_reproduces_keys(self) -> None:
        first = PathNamer.seeded(42)
        second = PathNamer.seeded(42)
        a = [first.item_key("c-1", "dish", "seg", "jpg") for _ in range(3)]
        b = [second.item_key("c-1", "dish", "seg", "jpg") for _ in range(3)]
        assert a == b
        assert len(set(a)) == 3

    def test_different_seeds_differ(self) -> None:
        assert PathNamer.seeded(1).new_segment() != PathNamer.seeded(2).new_segment()


class TestSharedAssetKey:
    def test_layout(self) -> None:
        namer = PathNamer(lambda: "rnd")
        key = namer.shared_asset_key("c-1", "branding", "pdf")
        assert key == "c-1/shared-assets/branding/rnd.pdf"

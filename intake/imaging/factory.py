from intake.config.settings import Settings
from intake.imaging.base import BaseImageTranscoder
from intake.imaging.passthrough_adapter import PassthroughTranscoder
from intake.imaging.pillow_adapter import PillowTranscoder


class TranscoderFactory:
    """Creates the configured image transcoder."""

    ADAPTERS: dict[str, type[BaseImageTranscoder]] = {
        "pillow": PillowTranscoder,
        "passthrough": PassthroughTranscoder,
    }

    @classmethod
    def create(cls, settings: Settings) -> BaseImageTranscoder:
        engine = settings.transcoder_engine.lower()
        adapter_cls = cls.ADAPTERS.get(engine)
        if adapter_cls is None:
            raise ValueError(
                f"Unknown transcoder engine '{engine}'. Choose from: {list(cls.ADAPTERS)}"
            )
        return adapter_cls()

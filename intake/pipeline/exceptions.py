class IntakeError(Exception):
    """Base exception for all submission pipeline errors."""


class ValidationError(IntakeError):
    """Raised when a batch fails a pre-flight field check."""

    def __init__(self, field: str, message: str) -> None:
        super().__init__(message)
        self.field = field
        self.message = message


class QuotaError(IntakeError):
    """Raised when an identified owner has too little allowance left."""

    def __init__(self, required: int, remaining: int) -> None:
        super().__init__(
            f"Not enough remaining dishes in the package: "
            f"{required} required, {remaining} remaining."
        )
        self.required = required
        self.remaining = remaining


class StageError(IntakeError):
    """Raised when compress, upload or persist fails for any item."""

    def __init__(self, stage: str, detail: str) -> None:
        super().__init__(detail)
        self.stage = stage
        self.detail = detail


class CancelledError(IntakeError):
    """Raised at a checkpoint once cancellation has been requested."""

    def __init__(self, stage: str) -> None:
        super().__init__("Upload cancelled")
        self.stage = stage


class ManifestError(IntakeError):
    """Raised when a batch manifest cannot be loaded."""

class NotifyError(Exception):
    """Raised when a notification could not be delivered."""

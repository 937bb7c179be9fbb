class RecordStoreError(Exception):
    """Raised when a row cannot be inserted or updated."""

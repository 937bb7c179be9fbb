class BlobStoreError(Exception):
    """Raised when an object cannot be stored or addressed."""

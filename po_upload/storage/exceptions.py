class StorageError(Exception):
    """Raised when the storage provider rejects or cannot serve a request."""


class StorageConfigurationError(StorageError):
    """Raised for known first-run bucket misconfigurations; the message says how to fix it."""

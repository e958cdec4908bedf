"""Exception types shared across the notification pipeline."""


class SetupError(ValueError):
    """Required configuration or credentials are missing. Fatal for a run."""


class DocumentStoreError(Exception):
    """A record store read or write failed (network, auth, bad response)."""


class DocumentConflictError(DocumentStoreError):
    """A write was rejected because the document changed since it was read."""

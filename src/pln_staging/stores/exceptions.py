"""Exceptions raised by the record stores."""


class StoreError(Exception):
    """Base exception for store failures."""

    def __init__(self, message: str, *args, **kwargs):
        self.message = message
        super().__init__(message, *args, **kwargs)


class DepositNotFoundError(StoreError):
    """Raised when a deposit id is not present in any bucket."""

    pass


class JournalNotFoundError(StoreError):
    """Raised when a journal uuid is not present in the store."""

    pass

"""Record stores for deposits, journals, and the whitelist."""

from .deposit_store import DepositStore, JsonDepositStore
from .exceptions import DepositNotFoundError, JournalNotFoundError, StoreError
from .journal_store import JsonJournalStore
from .whitelist_store import JsonWhitelistStore, WhitelistStore

__all__ = [
    "DepositStore",
    "JsonDepositStore",
    "JsonJournalStore",
    "WhitelistStore",
    "JsonWhitelistStore",
    "StoreError",
    "DepositNotFoundError",
    "JournalNotFoundError",
]

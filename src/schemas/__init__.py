"""Schema definitions for the PLN staging server."""

from .deposit import DEPOSIT_STATES, SENT_STATES, Deposit, DepositState, LogEntry
from .journal import GATEWAY_URL_SUFFIX, JOURNAL_STATUSES, Journal
from .ping_result import ArticleTitle, PingParseError, PingResult
from .whitelist import WhitelistEntry

__all__ = [
    "ArticleTitle",
    "DEPOSIT_STATES",
    "Deposit",
    "DepositState",
    "GATEWAY_URL_SUFFIX",
    "JOURNAL_STATUSES",
    "Journal",
    "LogEntry",
    "PingParseError",
    "PingResult",
    "SENT_STATES",
    "WhitelistEntry",
]

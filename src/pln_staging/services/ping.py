"""Journal health monitor.

Pings a journal's gateway, refreshes the journal's health attributes from
the response, and whitelists journals running a recent enough OJS release.

One call to ``Ping.ping`` is exactly one network attempt. A journal that
cannot be reached, or whose gateway does not report an OJS release, is
marked ``ping-error``; the next scheduled ping tries again.
"""

import logging
from datetime import datetime, timezone

from packaging.version import InvalidVersion, Version

from pln_staging.clients.gateway_client import GatewayClient
from pln_staging.stores.whitelist_store import WhitelistStore
from schemas.journal import Journal
from schemas.ping_result import PingResult
from schemas.whitelist import WhitelistEntry

logger = logging.getLogger(__name__)

DEFAULT_MIN_OJS_VERSION = "3.0.0.0"

VERSION_MISSING = "Journal version information missing in ping result."


def version_below(version: str, minimum: str) -> bool:
    """Return True if *version* is strictly older than *minimum*.

    Unparseable versions count as older than any minimum.
    """
    try:
        return Version(version) < Version(minimum)
    except InvalidVersion:
        logger.warning(f"Cannot compare OJS version {version!r}")
        return True


class Ping:
    """Ping journals and reconcile their health and whitelist state.

    New whitelist entries are staged by ``process`` and written by ``flush``,
    so a caller doing a dry run can inspect them without saving.

    Attributes:
        min_ojs_version: Oldest OJS release eligible for the whitelist
        whitelist: Whitelist store
        client: Gateway client used for the network request
        pending: Whitelist entries staged since the last flush
    """

    def __init__(
        self,
        min_ojs_version: str,
        whitelist: WhitelistStore,
        client: GatewayClient | None = None,
    ):
        try:
            Version(min_ojs_version)
        except InvalidVersion as e:
            raise ValueError(f"invalid minimum OJS version: {min_ojs_version}") from e
        self.min_ojs_version = min_ojs_version
        self.whitelist = whitelist
        self.client = client or GatewayClient()
        self.pending: list[WhitelistEntry] = []

    def ping(self, journal: Journal) -> PingResult:
        """Ping *journal* and update it from the result.

        Args:
            journal: The journal to ping; its fields are updated in place

        Returns:
            The ping result, including any diagnostics added while processing
        """
        result = self.client.ping(journal.gateway_url)
        if not result.is_success:
            journal.status = "ping-error"
            logger.warning(f"Ping of journal {journal.uuid} failed: {result.error}")
            return result
        return self.process(journal, result)

    def process(self, journal: Journal, result: PingResult) -> PingResult:
        """Update *journal* from a successful gateway response.

        Args:
            journal: The journal that was pinged
            result: Parsed gateway response

        Returns:
            *result*, or a copy of it with a diagnostic when the OJS release
            is missing
        """
        if not result.ojs_release:
            journal.status = "ping-error"
            logger.warning(f"Journal {journal.uuid}: {VERSION_MISSING}")
            return result.with_error(VERSION_MISSING)

        journal.contacted = datetime.now(timezone.utc)
        journal.title = result.journal_title
        journal.ojs_version = result.ojs_release
        journal.terms_accepted = result.terms_accepted == "yes"
        journal.status = "healthy"

        if version_below(result.ojs_release, self.min_ojs_version):
            logger.debug(
                f"Journal {journal.uuid} runs OJS {result.ojs_release}, "
                f"below {self.min_ojs_version}"
            )
            return result
        if self.whitelist.contains(journal.uuid) or self._is_pending(journal.uuid):
            return result

        entry = WhitelistEntry(uuid=journal.uuid, comment=f"{journal.url} added by ping.")
        self.pending.append(entry)
        logger.info(f"Journal {journal.uuid} staged for the whitelist")
        return result

    def flush(self) -> int:
        """Write staged whitelist entries.

        Returns:
            Number of entries actually created
        """
        created = 0
        for entry in self.pending:
            if self.whitelist.insert(entry.uuid, entry.comment):
                created += 1
        self.pending = []
        return created

    def discard(self) -> None:
        """Drop staged whitelist entries without writing them."""
        self.pending = []

    def _is_pending(self, uuid: str) -> bool:
        return any(entry.uuid == uuid for entry in self.pending)

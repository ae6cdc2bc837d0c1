"""Ping result value object.

A PingResult is built from exactly one gateway response or one caught
failure, and is never modified afterwards. Diagnostics discovered while
processing a result are added by deriving a new result with ``with_error``.

Gateway payload (fields read by this module):

    <plnplugin>
      <ojsInfo><release>3.3.0.8</release></ojsInfo>
      <pluginInfo>
        <release>2.0.4.2</release>
        <releaseDate>2023-01-01</releaseDate>
        <current>1</current>
        <terms termsAccepted="yes">...</terms>
      </pluginInfo>
      <journalInfo>
        <title>Journal Title</title>
        <articles count="2">
          <article pubDate="2023-01-02 10:00:00">Article title</article>
        </articles>
      </journalInfo>
    </plnplugin>
"""

from lxml import etree
from pydantic import BaseModel, model_validator


class PingParseError(ValueError):
    """Raised when a gateway response body is not well-formed XML."""

    pass


class ArticleTitle(BaseModel):
    """An article listed in a ping response."""

    date: str | None = None
    title: str


class PingResult(BaseModel):
    """Outcome of a single ping.

    Either ``error`` is set (transport or HTTP failure), or the parsed
    gateway fields are. ``errors`` holds any further diagnostics.

    Attributes:
        http_status: HTTP status of the response, if one was received
        ojs_release: OJS release version
        plugin_release_version: PLN plugin release version
        plugin_release_date: PLN plugin release date
        plugin_current: Whether the plugin reports itself current
        terms_accepted: Raw termsAccepted marker ("yes" when accepted)
        journal_title: Journal title
        article_count: Number of articles the journal reports
        article_titles: Recently published articles
        error: Failure message for pings that did not get a usable response
        errors: Diagnostics collected for this result
    """

    http_status: int | None = None
    ojs_release: str | None = None
    plugin_release_version: str | None = None
    plugin_release_date: str | None = None
    plugin_current: str | None = None
    terms_accepted: str | None = None
    journal_title: str | None = None
    article_count: int | None = None
    article_titles: list[ArticleTitle] = []
    error: str | None = None
    errors: tuple[str, ...] = ()

    model_config = {"frozen": True}

    @model_validator(mode="after")
    def _check_exclusive(self) -> "PingResult":
        if self.error is not None and (
            self.ojs_release is not None or self.journal_title is not None
        ):
            raise ValueError("a failed ping result cannot carry gateway fields")
        return self

    @classmethod
    def from_error(cls, message: str, http_status: int | None = None) -> "PingResult":
        """Build a failure result."""
        return cls(http_status=http_status, error=message, errors=(message,))

    @classmethod
    def from_xml(cls, body: bytes | str, http_status: int | None = None) -> "PingResult":
        """Parse a gateway response body.

        Args:
            body: Raw response body
            http_status: HTTP status of the response

        Returns:
            PingResult with the gateway fields that were present

        Raises:
            PingParseError: If the body is not well-formed XML
        """
        if isinstance(body, str):
            body = body.encode("utf-8")
        if not body.strip():
            raise PingParseError("Cannot parse ping response: empty body")
        parser = etree.XMLParser(resolve_entities=False, no_network=True)
        try:
            root = etree.fromstring(body, parser=parser)
        except etree.XMLSyntaxError as e:
            raise PingParseError(f"Cannot parse ping response: {e}") from e
        if root is None:
            raise PingParseError("Cannot parse ping response: empty document")

        count = _query(root, "//articles/@count")
        return cls(
            http_status=http_status,
            ojs_release=_query(root, "//ojsInfo/release"),
            plugin_release_version=_query(root, "//pluginInfo/release"),
            plugin_release_date=_query(root, "//pluginInfo/releaseDate"),
            plugin_current=_query(root, "//pluginInfo/current"),
            terms_accepted=_query(root, "//terms/@termsAccepted"),
            journal_title=_query(root, "//journalInfo/title"),
            article_count=int(count) if count and count.isdigit() else None,
            article_titles=[
                ArticleTitle(date=el.get("pubDate"), title=(el.text or "").strip())
                for el in root.xpath("//articles/article")
            ],
        )

    @property
    def has_error(self) -> bool:
        return bool(self.errors)

    @property
    def is_success(self) -> bool:
        return self.error is None

    @property
    def error_text(self) -> str:
        return "\n".join(self.errors)

    def with_error(self, message: str) -> "PingResult":
        """Return a copy of this result with one more diagnostic."""
        return self.model_copy(update={"errors": self.errors + (message,)})


def _query(root: etree._Element, xpath: str) -> str | None:
    """Return the stripped text of the first node matching *xpath*."""
    matches = root.xpath(xpath)
    if not matches:
        return None
    node = matches[0]
    text = node if isinstance(node, str) else node.text
    if text is None:
        return None
    text = str(text).strip()
    return text or None

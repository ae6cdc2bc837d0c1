"""Pytest fixtures for PLN staging tests."""

import zipfile
from pathlib import Path

import bagit
import httpx
import pytest

from pln_staging.clients import GatewayClient
from pln_staging.stores import JsonDepositStore, JsonJournalStore, JsonWhitelistStore
from schemas.deposit import Deposit
from schemas.journal import Journal

JOURNAL_UUID = "7A1B2C3D-4E5F-4A6B-8C7D-9E0F1A2B3C4D"

PING_XML = """<?xml version="1.0" encoding="UTF-8"?>
<plnplugin>
  <ojsInfo>
    <release>{release}</release>
  </ojsInfo>
  <pluginInfo>
    <release>2.0.4.2</release>
    <releaseDate>2023-01-01</releaseDate>
    <current>1</current>
    <terms termsAccepted="{terms}">
      <term key="pkp.ojs.pln.terms.1" updated="2014-03-17 13:37:20+00:00" accepted="2023-02-01T10:00:00+00:00">I agree.</term>
    </terms>
  </pluginInfo>
  <journalInfo>
    <title>{title}</title>
    <articles count="2">
      <article pubDate="2023-01-02 10:00:00">
        First Article
      </article>
      <article pubDate="2023-01-03 11:30:00">Second Article</article>
    </articles>
  </journalInfo>
</plnplugin>
"""

PING_XML_NO_RELEASE = """<?xml version="1.0" encoding="UTF-8"?>
<plnplugin>
  <pluginInfo>
    <terms termsAccepted="yes"/>
  </pluginInfo>
  <journalInfo>
    <title>Journal Without Version</title>
  </journalInfo>
</plnplugin>
"""


def _ping_xml(release: str = "3.3.0.8", terms: str = "yes", title: str = "Test Journal") -> str:
    """Build a gateway response body."""
    return PING_XML.format(release=release, terms=terms, title=title)


def _gateway_client(handler) -> GatewayClient:
    """Build a GatewayClient whose requests are answered by *handler*."""
    http_client = httpx.Client(transport=httpx.MockTransport(handler))
    return GatewayClient(http_client=http_client)


def _xml_handler(body: str, status_code: int = 200):
    """Return a MockTransport handler that always answers with *body*."""

    def handler(request: httpx.Request) -> httpx.Response:
        return httpx.Response(
            status_code,
            content=body.encode("utf-8"),
            headers={"Content-Type": "application/xml"},
        )

    return handler


@pytest.fixture
def data_dir(tmp_path):
    """Root directory for the JSON stores."""
    path = tmp_path / "data"
    path.mkdir()
    return path


@pytest.fixture
def deposit_store(data_dir):
    return JsonDepositStore(data_dir / "deposits")


@pytest.fixture
def journal_store(data_dir):
    return JsonJournalStore(data_dir / "journals")


@pytest.fixture
def whitelist(data_dir):
    return JsonWhitelistStore(data_dir / "whitelist")


@pytest.fixture
def journal():
    """A registered journal that has not been pinged yet."""
    return Journal(
        uuid=JOURNAL_UUID.lower(),
        url="https://journals.example.org/index.php/test",
        title="Old Title",
        ojs_version="2.4.8",
    )


@pytest.fixture
def make_bag(tmp_path):
    """Factory that creates a valid BagIt bag directory."""

    def _make_bag(name: str = "bag", files: dict[str, str] | None = None, bag_info: dict | None = None) -> Path:
        bag_dir = tmp_path / "bags" / name
        bag_dir.mkdir(parents=True)
        files = files or {
            "article.txt": "hello world",
            "issue/metadata.xml": "<issue id='1'/>",
        }
        for relative, content in files.items():
            path = bag_dir / relative
            path.parent.mkdir(parents=True, exist_ok=True)
            path.write_text(content)
        bagit.make_bag(str(bag_dir), bag_info=bag_info or {}, checksums=["sha256"])
        return bag_dir

    return _make_bag


@pytest.fixture
def zip_bag(tmp_path):
    """Factory that zips a bag directory the way a harvested deposit arrives."""

    def _zip_bag(bag_dir: Path) -> Path:
        archive_path = tmp_path / f"{bag_dir.name}.zip"
        with zipfile.ZipFile(archive_path, "w") as archive:
            for path in sorted(bag_dir.rglob("*")):
                archive.write(path, str(Path(bag_dir.name) / path.relative_to(bag_dir)))
        return archive_path

    return _zip_bag


@pytest.fixture
def add_deposit(deposit_store):
    """Factory that stores a deposit in the given state."""

    def _add_deposit(
        deposit_id: str,
        state: str = "payload-validated",
        package_path: Path | str | None = "/nonexistent/package.zip",
    ) -> Deposit:
        deposit = Deposit(
            id=deposit_id,
            deposit_uuid=f"deposit-{deposit_id}",
            journal_uuid=JOURNAL_UUID,
            state=state,
            package_path=str(package_path) if package_path is not None else None,
        )
        deposit_store.add(deposit)
        return deposit

    return _add_deposit


@pytest.fixture
def ping_xml():
    """Factory for gateway response bodies."""
    return _ping_xml


@pytest.fixture
def ping_xml_no_release():
    return PING_XML_NO_RELEASE


@pytest.fixture
def xml_handler():
    """Factory for MockTransport handlers that answer with a fixed body."""
    return _xml_handler


@pytest.fixture
def gateway_client():
    """Factory for GatewayClients backed by a MockTransport handler."""
    return _gateway_client

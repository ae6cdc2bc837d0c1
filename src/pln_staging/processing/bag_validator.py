"""BagIt validation stage processor.

Checks that a harvested deposit package is a complete, uncorrupted BagIt
bag: the bag declaration and manifests are well formed, every payload file
listed in the manifests is present, no unlisted files are present, the
Payload-Oxum matches, and every file's checksum matches its manifest entry.

Packages arrive either as a bag directory or as a zip archive holding one bag.
"""

import logging
import tempfile
import zipfile
from pathlib import Path

import bagit

from .stage import StageProcessor, StageVerdict

logger = logging.getLogger(__name__)

OJS_VERSION_TAG = "PKP-PLN-OJS-Version"


class BagValidator(StageProcessor):
    """Validate bag metadata and checksums.

    Attributes:
        processes: Number of processes bagit uses to compute checksums
    """

    def __init__(self, processes: int = 1):
        self.processes = processes

    def validate(self, package_ref: str) -> StageVerdict:
        package = Path(package_ref)
        if not package.exists():
            return StageVerdict(ok=False, diagnostics=[f"Package not found: {package}"])

        if package.is_dir():
            return self._validate_bag(package)

        if not zipfile.is_zipfile(package):
            return StageVerdict(
                ok=False, diagnostics=[f"Package is not a bag or zip archive: {package}"]
            )

        with tempfile.TemporaryDirectory(prefix="pln-bag-") as tmp:
            try:
                with zipfile.ZipFile(package) as archive:
                    archive.extractall(tmp)
            except (zipfile.BadZipFile, OSError) as e:
                return StageVerdict(ok=False, diagnostics=[f"Cannot extract {package}: {e}"])

            bag_dir = self._find_bag_dir(Path(tmp))
            if bag_dir is None:
                return StageVerdict(
                    ok=False, diagnostics=[f"No bag declaration found in {package}"]
                )
            return self._validate_bag(bag_dir)

    def _validate_bag(self, bag_dir: Path) -> StageVerdict:
        """Validate an unpacked bag directory."""
        try:
            bag = bagit.Bag(str(bag_dir))
            bag.validate(processes=self.processes)
        except bagit.BagValidationError as e:
            diagnostics = [self._describe(detail) for detail in e.details]
            if not diagnostics:
                diagnostics = [f"Bag validation error: {e.message}"]
            logger.debug(f"Bag at {bag_dir} is invalid: {diagnostics}")
            return StageVerdict(ok=False, diagnostics=diagnostics)
        except bagit.BagError as e:
            return StageVerdict(ok=False, diagnostics=[f"Bag validation error: {e}"])

        metadata = {}
        version = bag.info.get(OJS_VERSION_TAG)
        if isinstance(version, list):
            version = version[0]
        if version:
            metadata["ojs_version"] = str(version)
        return StageVerdict(ok=True, metadata=metadata)

    def _describe(self, detail: bagit.ManifestErrorDetail) -> str:
        return f"Bag validation error for {detail.path} - {detail}"

    def _find_bag_dir(self, root: Path) -> Path | None:
        """Locate the bag in an extracted archive (root or one directory down)."""
        if (root / "bagit.txt").is_file():
            return root
        candidates = [d for d in root.iterdir() if d.is_dir() and (d / "bagit.txt").is_file()]
        if len(candidates) == 1:
            return candidates[0]
        return None

# catalog_pipeline/delegates/file_manager_delegate.py
import json
import logging
from datetime import datetime, timezone
from pathlib import Path
from typing import Dict, List, Optional, Sequence

from ..errors import ArtifactFault, MalformedRowFault
from ..models import ListingRecord
from ..models.product_models import LISTING_COLUMNS

logger = logging.getLogger(__name__)

ARTIFACT_NAME = "listing-rows"
ARTIFACT_VERSION = 1


def serialize_listing_row(record: ListingRecord) -> str:
    # Quotes are dropped and commas are not escaped, so a field containing a comma does not survive a reload.
    return ",".join(value.replace('"', "") for value in record.as_row())


def parse_listing_row(line: str, line_no: int) -> ListingRecord:
    fields = [value.replace('"', "").strip() for value in line.split(",")]
    if len(fields) < len(LISTING_COLUMNS):
        raise MalformedRowFault(line_no, line)
    name, price, image, link = fields[:len(LISTING_COLUMNS)]
    return ListingRecord(name=name, price=price, image=image, link=link)


class FileManagerDelegate:
    """Handles all file system interactions for the pipeline."""
    def __init__(self, base_path: Path, listings_filename: str = "products.csv"):
        self.base_path = Path(base_path)
        self.listings_path = self.base_path / listings_filename
        self.manifest_path = self.listings_path.with_suffix(".manifest.json")
        self.base_path.mkdir(parents=True, exist_ok=True)
        logger.info("File manager initialized. Data will be stored in: %s", self.base_path)

    def save_listing_rows(self, records: Sequence[ListingRecord], source_url: str) -> Path:
        """Writes the scraped records in extraction order, replacing any earlier file, plus its manifest."""
        lines = [",".join(LISTING_COLUMNS)]
        lines.extend(serialize_listing_row(record) for record in records)
        try:
            self.listings_path.write_text("\n".join(lines), encoding="utf-8")
            manifest = {
                "artifact": ARTIFACT_NAME,
                "version": ARTIFACT_VERSION,
                "columns": list(LISTING_COLUMNS),
                "row_count": len(records),
                "source_url": source_url,
                "saved_at": datetime.now(timezone.utc).isoformat(),
            }
            with self.manifest_path.open("w", encoding="utf-8") as f:
                json.dump(manifest, f, indent=2, ensure_ascii=False)
        except OSError as e:
            logger.error("Failed to save listing rows to %s: %s", self.listings_path, e, exc_info=True)
            raise
        logger.info("Saved %d listing rows to: %s", len(records), self.listings_path.name)
        return self.listings_path

    def load_manifest(self) -> Optional[Dict]:
        """Reads the manifest next to the rows, checking that this code understands it."""
        if not self.manifest_path.exists():
            logger.warning("Listing manifest not found at: %s", self.manifest_path)
            return None
        try:
            with self.manifest_path.open("r", encoding="utf-8") as f:
                manifest = json.load(f)
        except json.JSONDecodeError as e:
            raise ArtifactFault(f"Listing manifest {self.manifest_path} is not valid JSON: {e}") from e

        if manifest.get("artifact") != ARTIFACT_NAME or manifest.get("version") != ARTIFACT_VERSION:
            raise ArtifactFault(
                f"Unsupported listing artifact {manifest.get('artifact')!r} version {manifest.get('version')!r} "
                f"(expected {ARTIFACT_NAME!r} version {ARTIFACT_VERSION})"
            )
        logger.debug("Loaded listing manifest: %s", manifest)
        return manifest

    def load_listing_rows(self) -> List[ListingRecord]:
        """Reads back the rows written by save_listing_rows, skipping the header and blank lines."""
        if not self.listings_path.exists():
            raise ArtifactFault(f"Listing rows not found at {self.listings_path}. Run step 1 first.")

        manifest = self.load_manifest()
        # Only "\n" separates rows; splitlines() would also break on U+2028 and friends inside names.
        lines = self.listings_path.read_text(encoding="utf-8").split("\n")
        records = [
            parse_listing_row(line, line_no)
            for line_no, line in enumerate(lines[1:], start=2)
            if line.strip()
        ]

        if manifest and manifest.get("row_count") != len(records):
            logger.warning("Manifest lists %s rows but %d were read from %s",
                           manifest.get("row_count"), len(records), self.listings_path.name)
        logger.info("Loaded %d listing rows from: %s", len(records), self.listings_path.name)
        return records

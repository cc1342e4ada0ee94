"""Download the source catalog and turn it into the organism worklist."""

import csv
import io
import logging
from pathlib import Path
from typing import Iterable, List, Optional, Sequence

import requests
from tenacity import retry, stop_after_attempt, wait_exponential, retry_if_exception_type

from genome_grabber.config import USER_AGENT
from genome_grabber.errors import CatalogFetchFailure, EmptyCatalog

logger = logging.getLogger(__name__)


@retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=1, min=1, max=10),
    retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
)
def _download(session: requests.Session, url: str, timeout: float) -> bytes:
    resp = session.get(url, timeout=timeout)
    if resp.status_code == 429:
        raise requests.ConnectionError("Rate limited (429)")
    resp.raise_for_status()
    return resp.content


def fetch_catalog(
    url: str,
    dest: Path,
    session: Optional[requests.Session] = None,
    timeout: float = 60,
) -> Path:
    """Download the catalog TSV to ``dest`` unless it is already there."""
    dest = Path(dest)
    if dest.exists():
        logger.info("Catalog already exists at %s, skipping download", dest)
        return dest

    if session is None:
        session = requests.Session()
        session.headers.update({"User-Agent": USER_AGENT})

    logger.info("Downloading catalog from %s", url)
    try:
        content = _download(session, url, timeout)
    except requests.RequestException as exc:
        raise CatalogFetchFailure(f"Failed to download catalog from {url}: {exc}") from exc

    if not content:
        raise CatalogFetchFailure(f"Catalog at {url} is empty")

    dest.parent.mkdir(parents=True, exist_ok=True)
    partial = dest.with_name(dest.name + ".part")
    try:
        partial.write_bytes(content)
        partial.replace(dest)
    except OSError as exc:
        partial.unlink(missing_ok=True)
        raise CatalogFetchFailure(f"Could not write catalog to {dest}: {exc}") from exc

    logger.info("Catalog downloaded (%d bytes)", len(content))
    return dest


def read_rows(text: str) -> List[List[str]]:
    reader = csv.reader(io.StringIO(text), delimiter="\t", quoting=csv.QUOTE_NONE)
    return [row for row in reader]


def extract_organisms(rows: Iterable[Sequence[str]]) -> List[str]:
    """Return the sorted, de-duplicated organism names from catalog rows.

    The first row is the header. Column 1 holds the organism name; rows whose
    name is blank after trimming are dropped. Raises EmptyCatalog if nothing
    is left.
    """
    names = set()
    for index, row in enumerate(rows):
        if index == 0:
            continue
        if not row:
            continue
        name = row[0].strip()
        if name:
            names.add(name)

    if not names:
        raise EmptyCatalog("Catalog contains no organism rows")
    return sorted(names)


def write_worklist(organisms: List[str], path: Path) -> None:
    path = Path(path)
    path.parent.mkdir(parents=True, exist_ok=True)
    partial = path.with_name(path.name + ".part")
    with open(partial, "w", encoding="utf-8", newline="\n") as fh:
        for name in organisms:
            fh.write(name + "\n")
    partial.replace(path)


def read_worklist(path: Path) -> List[str]:
    try:
        with open(path, encoding="utf-8") as fh:
            return [line.rstrip("\n") for line in fh if line.strip()]
    except (OSError, UnicodeDecodeError) as exc:
        raise CatalogFetchFailure(f"Cannot read organism list {path}: {exc}") from exc


def load_worklist(catalog_path: Path, worklist_path: Path) -> List[str]:
    """Return the cached worklist, building it from the catalog if the cache is missing.

    The cache is never invalidated automatically; delete it to re-extract.
    An unreadable or non-UTF-8 catalog or cache raises CatalogFetchFailure.
    """
    worklist_path = Path(worklist_path)
    if worklist_path.exists():
        organisms = read_worklist(worklist_path)
        logger.info(
            "Organism list already exists (%d organisms), skipping extraction", len(organisms)
        )
        if not organisms:
            raise EmptyCatalog(f"Cached organism list is empty: {worklist_path}")
        return organisms

    logger.info("Extracting organism names to %s", worklist_path)
    try:
        rows = read_rows(Path(catalog_path).read_text(encoding="utf-8"))
    except (OSError, UnicodeDecodeError, csv.Error) as exc:
        raise CatalogFetchFailure(f"Cannot read catalog {catalog_path}: {exc}") from exc

    organisms = extract_organisms(rows)
    write_worklist(organisms, worklist_path)
    logger.info("Extracted %d unique organisms", len(organisms))
    return organisms

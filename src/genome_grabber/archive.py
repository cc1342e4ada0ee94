"""Unpack downloaded genome archives and locate the sequence file inside."""

import logging
import zipfile
import zlib
from pathlib import Path
from typing import Optional

from genome_grabber.errors import ArchiveCorrupt, EmptyArchive

logger = logging.getLogger(__name__)


def extract_archive(archive_path: Path, dest: Path) -> None:
    """Extract a zip archive into ``dest``, raising ArchiveCorrupt if it is unreadable."""
    dest = Path(dest)
    dest.mkdir(parents=True, exist_ok=True)
    try:
        with zipfile.ZipFile(archive_path, "r") as zf:
            bad_member = zf.testzip()
            if bad_member is not None:
                raise ArchiveCorrupt(f"CRC check failed for {bad_member} in {archive_path}")
            zf.extractall(dest)
    except (zipfile.BadZipFile, zipfile.LargeZipFile, zlib.error, OSError, EOFError) as exc:
        raise ArchiveCorrupt(f"Failed to extract {archive_path}: {exc}") from exc


def find_sequence_file(root: Path, pattern: str = "*.fna") -> Optional[Path]:
    """Return the first file under ``root`` matching ``pattern`` in sorted path order."""
    matches = sorted(p for p in Path(root).rglob(pattern) if p.is_file())
    if len(matches) > 1:
        logger.debug("%d sequence files in %s, using %s", len(matches), root, matches[0].name)
    return matches[0] if matches else None


def require_sequence_file(root: Path, pattern: str = "*.fna") -> Path:
    found = find_sequence_file(root, pattern)
    if found is None:
        raise EmptyArchive(f"No {pattern} file found in archive")
    return found

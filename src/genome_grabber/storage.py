"""Artifact store: where finished genome files live and how they are named."""

import gzip
import logging
import shutil
import string
from abc import ABC, abstractmethod
from pathlib import Path
from typing import Optional

from genome_grabber.config import ARTIFACT_SUFFIX, COMPRESSED_SUFFIX
from genome_grabber.errors import CompressionFailure
from genome_grabber.models import GenomeArtifact

logger = logging.getLogger(__name__)

_SAFE_CHARS = frozenset(string.ascii_letters + string.digits + "-.")


def sanitize_name(organism: str) -> str:
    """Map an organism name to a filename stem.

    Spaces become underscores; letters, digits, '-' and '.' are kept; every
    other byte is percent-encoded (including '_' and '%'), so distinct names
    never share a stem.

    >>> sanitize_name("Bacillus subtilis")
    'Bacillus_subtilis'
    >>> sanitize_name("[Clostridium] sp.")
    '%5BClostridium%5D_sp.'
    """
    out = []
    for ch in organism:
        if ch == " ":
            out.append("_")
        elif ch in _SAFE_CHARS:
            out.append(ch)
        else:
            out.extend(f"%{b:02X}" for b in ch.encode("utf-8"))
    stem = "".join(out)
    if stem.startswith("."):
        stem = "%2E" + stem[1:]
    return stem


def compress_file(src: Path, dest: Optional[Path] = None) -> Path:
    """Gzip ``src`` next to itself. Output bytes depend only on the input bytes."""
    src = Path(src)
    dest = Path(dest) if dest else src.with_name(src.name + COMPRESSED_SUFFIX)
    partial = dest.with_name(dest.name + ".part")
    try:
        with open(src, "rb") as fin, open(partial, "wb") as raw:
            with gzip.GzipFile(filename="", mode="wb", fileobj=raw, mtime=0) as gz:
                shutil.copyfileobj(fin, gz)
        partial.replace(dest)
    except OSError as exc:
        partial.unlink(missing_ok=True)
        raise CompressionFailure(f"Could not compress {src}: {exc}") from exc
    return dest


class ArtifactStore(ABC):
    """Single source of truth for which organisms already have a genome."""

    @abstractmethod
    def exists(self, organism: str) -> bool:
        ...

    @abstractmethod
    def store(self, organism: str, sequence_file: Path) -> GenomeArtifact:
        """Move ``sequence_file`` into the store as this organism's artifact."""
        ...

    @abstractmethod
    def compress(self, artifact: GenomeArtifact) -> GenomeArtifact:
        """Add a compressed sibling; raises CompressionFailure."""
        ...


class FileSystemArtifactStore(ArtifactStore):
    def __init__(self, output_dir: Path, suffix: str = ARTIFACT_SUFFIX):
        self.output_dir = Path(output_dir)
        self.suffix = suffix

    def path_for(self, organism: str) -> Path:
        return self.output_dir / f"{sanitize_name(organism)}{self.suffix}"

    def exists(self, organism: str) -> bool:
        return self.path_for(organism).is_file()

    def store(self, organism: str, sequence_file: Path) -> GenomeArtifact:
        target = self.path_for(organism)
        target.parent.mkdir(parents=True, exist_ok=True)
        # stage next to the target so the final rename is atomic
        partial = target.with_name(target.name + ".part")
        try:
            shutil.move(str(sequence_file), str(partial))
            partial.replace(target)
        except OSError:
            partial.unlink(missing_ok=True)
            raise
        logger.debug("Stored %s at %s", organism, target)
        return GenomeArtifact(organism=organism, path=target)

    def compress(self, artifact: GenomeArtifact) -> GenomeArtifact:
        compressed = compress_file(artifact.path)
        return GenomeArtifact(
            organism=artifact.organism, path=artifact.path, compressed_path=compressed
        )

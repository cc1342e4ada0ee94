"""Immutable run configuration passed to every component at construction."""

import os
from dataclasses import dataclass, field
from pathlib import Path
from typing import Optional, Tuple

from genome_grabber.models import AssemblyLevel

USER_AGENT = "genomeGrabber/0.1.0"
DEFAULT_CATALOG_URL = "https://plasticdb.org/static/degraders_list.tsv"
DEFAULT_SOURCES = ("refseq", "genbank")
BACKENDS = ("api", "cli")

CATALOG_FILENAME = "degraders_list.tsv"
WORKLIST_FILENAME = "organism_names.txt"
LOG_FILENAME = "genome_download.log"
SUCCESS_FILENAME = "successful_downloads.txt"
FAILED_FILENAME = "failed_downloads.txt"
EVENTS_FILENAME = "genome_download_events.jsonl"

SEQUENCE_GLOB = "*.fna"
ARTIFACT_SUFFIX = ".fasta"
COMPRESSED_SUFFIX = ".gz"

OUTPUT_DIR_ENV = "GENOME_GRABBER_OUTPUT_DIR"
LOG_DIR_ENV = "GENOME_GRABBER_LOG_DIR"


@dataclass(frozen=True)
class AcquisitionConfig:
    output_dir: Path
    log_dir: Path
    data_dir: Optional[Path] = None
    work_dir: Optional[Path] = None
    catalog_url: str = DEFAULT_CATALOG_URL
    catalog_path: Optional[Path] = None
    assembly_level: AssemblyLevel = AssemblyLevel.COMPLETE
    compress: bool = True
    backend: str = "api"
    sources: Tuple[str, ...] = field(default=DEFAULT_SOURCES)
    workers: int = 1
    timeout: float = 300.0
    retries: int = 3

    def __post_init__(self):
        # frozen: normalize through object.__setattr__
        object.__setattr__(self, "output_dir", Path(self.output_dir))
        object.__setattr__(self, "log_dir", Path(self.log_dir))
        object.__setattr__(self, "data_dir", Path(self.data_dir or self.output_dir))
        object.__setattr__(self, "work_dir", Path(self.work_dir or self.output_dir))
        object.__setattr__(
            self, "catalog_path", Path(self.catalog_path or self.log_dir / CATALOG_FILENAME)
        )
        object.__setattr__(self, "assembly_level", AssemblyLevel(self.assembly_level))
        object.__setattr__(self, "sources", tuple(self.sources))

        if self.backend not in BACKENDS:
            raise ValueError(f"Unknown backend: {self.backend}")
        if not self.sources:
            raise ValueError("At least one genome source is required")
        if len(set(self.sources)) != len(self.sources):
            raise ValueError(f"Duplicate genome sources: {self.sources}")
        if self.workers < 1:
            raise ValueError("workers must be >= 1")
        if self.retries < 1:
            raise ValueError("retries must be >= 1")

    @property
    def worklist_path(self) -> Path:
        return self.data_dir / WORKLIST_FILENAME

    @property
    def log_file(self) -> Path:
        return self.log_dir / LOG_FILENAME

    @property
    def success_file(self) -> Path:
        return self.log_dir / SUCCESS_FILENAME

    @property
    def failed_file(self) -> Path:
        return self.log_dir / FAILED_FILENAME

    @property
    def events_file(self) -> Path:
        return self.log_dir / EVENTS_FILENAME

    @classmethod
    def from_env(cls, **overrides) -> "AcquisitionConfig":
        """Build a config, filling directories from the environment when not given."""
        home = Path.home()
        values = {
            "output_dir": os.environ.get(OUTPUT_DIR_ENV, str(home / "plasticDB" / "genomes")),
            "log_dir": os.environ.get(LOG_DIR_ENV, str(home)),
        }
        values.update({k: v for k, v in overrides.items() if v is not None})
        return cls(**values)

"""Value types shared by the catalog, providers, store, ledger and orchestrator."""

from dataclasses import asdict, dataclass, field
from enum import Enum
from pathlib import Path
from typing import Optional

LEDGER_COLUMNS = [
    "organism",
    "outcome",
    "reason",
    "source",
    "timestamp",
]


class AssemblyLevel(str, Enum):
    COMPLETE = "complete"
    CHROMOSOME = "chromosome"
    SCAFFOLD = "scaffold"
    CONTIG = "contig"


class Outcome(str, Enum):
    SKIPPED = "skipped-existing"
    DOWNLOADED = "downloaded"
    FAILED = "failed"


class FailureReason(str, Enum):
    SOURCE_UNAVAILABLE = "SourceUnavailable"
    ARCHIVE_CORRUPT = "ArchiveCorrupt"
    EMPTY_ARCHIVE = "EmptyArchive"
    STORE_FAILURE = "StoreFailure"


class FetchStatus(str, Enum):
    FOUND = "found"
    NOT_FOUND = "not_found"
    TRANSIENT_ERROR = "transient_error"


@dataclass
class FetchResult:
    """What a genome provider hands back for one organism."""

    status: FetchStatus
    archive: Optional[bytes] = None
    detail: str = ""

    @classmethod
    def found(cls, archive: bytes) -> "FetchResult":
        if not archive:
            return cls(FetchStatus.NOT_FOUND, detail="empty archive")
        return cls(FetchStatus.FOUND, archive=archive)

    @classmethod
    def not_found(cls, detail: str = "") -> "FetchResult":
        return cls(FetchStatus.NOT_FOUND, detail=detail)

    @classmethod
    def transient(cls, detail: str) -> "FetchResult":
        return cls(FetchStatus.TRANSIENT_ERROR, detail=detail)

    @property
    def has_archive(self) -> bool:
        return self.status is FetchStatus.FOUND and bool(self.archive)


@dataclass
class AcquisitionAttempt:
    """One source-resolution try. Lives only inside a single orchestration step."""

    organism: str
    source: str
    found: bool
    detail: str = ""

    def describe(self) -> str:
        if self.found:
            return f"{self.source}: archive received"
        return f"{self.source}: {self.detail or 'no archive'}"


@dataclass
class GenomeArtifact:
    organism: str
    path: Path
    compressed_path: Optional[Path] = None


@dataclass
class LedgerEntry:
    organism: str
    outcome: Outcome
    reason: Optional[str] = None
    source: Optional[str] = None
    timestamp: str = ""
    run_id: str = ""
    attempts: list = field(default_factory=list)

    def to_dict(self) -> dict:
        """Return the report columns only (excludes run_id and attempts)."""
        data = asdict(self)
        data["outcome"] = self.outcome.value
        return {col: data[col] if data[col] is not None else "" for col in LEDGER_COLUMNS}

    def to_event(self) -> dict:
        data = asdict(self)
        data["outcome"] = self.outcome.value
        return data

    @classmethod
    def from_event(cls, event: dict) -> "LedgerEntry":
        return cls(
            organism=event["organism"],
            outcome=Outcome(event["outcome"]),
            reason=event.get("reason"),
            source=event.get("source"),
            timestamp=event.get("timestamp", ""),
            run_id=event.get("run_id", ""),
            attempts=list(event.get("attempts") or []),
        )


@dataclass
class RunSummary:
    total: int = 0
    skipped: int = 0
    downloaded: int = 0
    failed: int = 0

    def add(self, outcome: Outcome) -> None:
        self.total += 1
        if outcome is Outcome.SKIPPED:
            self.skipped += 1
        elif outcome is Outcome.DOWNLOADED:
            self.downloaded += 1
        else:
            self.failed += 1

    def is_consistent(self) -> bool:
        return self.total == self.skipped + self.downloaded + self.failed

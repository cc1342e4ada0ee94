"""Exception hierarchy.

Fatal errors abort the run with a non-zero exit. Acquisition errors are scoped
to a single organism: the orchestrator records them in the ledger and moves on.
"""

from typing import Iterable, List

from genome_grabber.models import FailureReason


class GenomeGrabberError(Exception):
    pass


class FatalError(GenomeGrabberError):
    pass


class MissingDependency(FatalError):
    def __init__(self, missing: Iterable[str]):
        self.missing: List[str] = list(missing)
        super().__init__(
            "Missing dependencies: " + ", ".join(self.missing)
        )


class CatalogFetchFailure(FatalError):
    pass


class EmptyCatalog(FatalError):
    pass


class LedgerWriteFailure(FatalError):
    pass


class AcquisitionError(GenomeGrabberError):
    reason: FailureReason


class SourceUnavailable(AcquisitionError):
    reason = FailureReason.SOURCE_UNAVAILABLE


class ArchiveCorrupt(AcquisitionError):
    reason = FailureReason.ARCHIVE_CORRUPT


class EmptyArchive(AcquisitionError):
    reason = FailureReason.EMPTY_ARCHIVE


class StoreFailure(AcquisitionError):
    reason = FailureReason.STORE_FAILURE


class CompressionFailure(GenomeGrabberError):
    """Raised when the gzip sibling cannot be written. Never fails an organism."""

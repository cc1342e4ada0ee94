"""Orchestrator: drives each organism from lookup to a terminal ledger entry."""

import logging
import shutil
from concurrent.futures import ThreadPoolExecutor, as_completed
from pathlib import Path
from typing import List, Optional, Sequence

from genome_grabber.archive import extract_archive, require_sequence_file
from genome_grabber.config import SEQUENCE_GLOB, AcquisitionConfig
from genome_grabber.errors import (
    AcquisitionError,
    CompressionFailure,
    SourceUnavailable,
    StoreFailure,
)
from genome_grabber.ledger import Ledger
from genome_grabber.models import (
    AcquisitionAttempt,
    FetchResult,
    GenomeArtifact,
    LedgerEntry,
    Outcome,
    RunSummary,
)
from genome_grabber.providers.base import BaseProvider
from genome_grabber.storage import ArtifactStore, sanitize_name

logger = logging.getLogger(__name__)


class GenomeGrabber:
    """Per organism: check the store, try each provider in order, unpack, store.

    Acquisition errors end in a ``failed`` ledger entry and never stop the
    run. Ledger write failures do.
    """

    def __init__(
        self,
        config: AcquisitionConfig,
        providers: Sequence[BaseProvider],
        store: ArtifactStore,
        ledger: Ledger,
    ):
        if not providers:
            raise ValueError("At least one genome provider is required")
        self._config = config
        self._providers = list(providers)
        self._store = store
        self._ledger = ledger

    def process_one(
        self, organism: str, position: Optional[int] = None, total: Optional[int] = None
    ) -> LedgerEntry:
        prefix = f"[{position}/{total}] " if position is not None else ""
        logger.info("%sProcessing: %s", prefix, organism)

        if self._store.exists(organism):
            logger.info("Genome already exists for '%s', skipping", organism)
            return self._ledger.record(organism, Outcome.SKIPPED)

        stem = sanitize_name(organism)
        archive_path = self._config.work_dir / f"{stem}.zip"
        scratch_dir = self._config.work_dir / f"tmp_{stem}"
        attempts: List[AcquisitionAttempt] = []

        try:
            self._clear_leftovers(archive_path, scratch_dir)
            source = self._acquire(organism, archive_path, attempts)
            artifact = self._finalize(organism, archive_path, scratch_dir)
        except AcquisitionError as exc:
            logger.warning("Failed '%s': %s (%s)", organism, exc.reason.value, exc)
            return self._ledger.record(
                organism,
                Outcome.FAILED,
                reason=exc.reason.value,
                attempts=[a.describe() for a in attempts],
            )
        finally:
            self._cleanup(archive_path, scratch_dir)

        saved = artifact.path.name
        if artifact.compressed_path is not None:
            saved += f" + {artifact.compressed_path.suffix}"
        logger.info("Downloaded genome for '%s' from %s: %s", organism, source, saved)
        return self._ledger.record(
            organism,
            Outcome.DOWNLOADED,
            source=source,
            attempts=[a.describe() for a in attempts],
        )

    def run(self, organisms: Sequence[str]) -> RunSummary:
        total = len(organisms)
        self._config.work_dir.mkdir(parents=True, exist_ok=True)
        logger.info("Total organisms queued for download: %d", total)

        if self._config.workers == 1:
            for position, organism in enumerate(organisms, 1):
                self.process_one(organism, position, total)
        else:
            self._run_parallel(organisms)

        summary = self._ledger.summarize()
        logger.info(
            "Pipeline complete - Total: %d, Skipped: %d, Downloaded: %d, Failed: %d",
            summary.total, summary.skipped, summary.downloaded, summary.failed,
        )
        return summary

    def _run_parallel(self, organisms: Sequence[str]) -> None:
        total = len(organisms)
        with ThreadPoolExecutor(max_workers=self._config.workers) as pool:
            futures = [
                pool.submit(self.process_one, organism, position, total)
                for position, organism in enumerate(organisms, 1)
            ]
            try:
                for future in as_completed(futures):
                    future.result()
            except Exception:
                for future in futures:
                    future.cancel()
                raise

    def _acquire(
        self, organism: str, archive_path: Path, attempts: List[AcquisitionAttempt]
    ) -> str:
        """Try each provider in order; write the first archive received. Returns its source."""
        level = self._config.assembly_level
        for provider in self._providers:
            logger.info("Attempting %s download for '%s'", provider.source, organism)
            try:
                result = provider.fetch(organism, level)
            except Exception as exc:
                logger.exception("%s provider failed for '%s'", provider.source, organism)
                result = FetchResult.transient(f"{type(exc).__name__}: {exc}")
            attempt = AcquisitionAttempt(
                organism=organism,
                source=provider.source,
                found=result.has_archive,
                detail=result.detail or result.status.value,
            )
            attempts.append(attempt)
            logger.debug("Attempt: %s", attempt.describe())

            if result.has_archive:
                try:
                    archive_path.parent.mkdir(parents=True, exist_ok=True)
                    archive_path.write_bytes(result.archive)
                except OSError as exc:
                    raise StoreFailure(f"Could not write {archive_path}: {exc}") from exc
                return provider.source

            logger.info(
                "%s unavailable for '%s' (%s)", provider.source, organism, attempt.detail
            )

        raise SourceUnavailable(
            f"No {level.value} genome found: " + "; ".join(a.describe() for a in attempts)
        )

    def _finalize(self, organism: str, archive_path: Path, scratch_dir: Path) -> GenomeArtifact:
        extract_archive(archive_path, scratch_dir)
        sequence_file = require_sequence_file(scratch_dir, SEQUENCE_GLOB)

        try:
            artifact = self._store.store(organism, sequence_file)
        except OSError as exc:
            raise StoreFailure(f"Could not store genome for {organism!r}: {exc}") from exc

        if self._config.compress:
            try:
                artifact = self._store.compress(artifact)
            except CompressionFailure as exc:
                logger.warning("Compression failed for '%s': %s", organism, exc)
        return artifact

    @staticmethod
    def _clear_leftovers(archive_path: Path, scratch_dir: Path) -> None:
        """Drop the archive and scratch tree an interrupted run may have left behind."""
        if not archive_path.exists() and not scratch_dir.exists():
            return
        logger.info("Removing leftovers of an interrupted run: %s", scratch_dir.name)
        try:
            archive_path.unlink(missing_ok=True)
            if scratch_dir.exists():
                shutil.rmtree(scratch_dir)
        except OSError as exc:
            raise StoreFailure(f"Could not clear {scratch_dir}: {exc}") from exc

    @staticmethod
    def _cleanup(archive_path: Path, scratch_dir: Path) -> None:
        try:
            archive_path.unlink(missing_ok=True)
            if scratch_dir.exists():
                shutil.rmtree(scratch_dir)
        except OSError:
            logger.warning("Could not clean up %s / %s", archive_path, scratch_dir, exc_info=True)

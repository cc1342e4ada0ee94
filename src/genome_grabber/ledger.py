"""Append-only record of per-organism outcomes."""

import json
import logging
import threading
import uuid
from datetime import datetime, timezone
from pathlib import Path
from typing import List, Optional, Sequence

from genome_grabber.errors import LedgerWriteFailure
from genome_grabber.models import LedgerEntry, Outcome, RunSummary

logger = logging.getLogger(__name__)


class Ledger:
    """Three append-only files.

    * ``success_file``: one organism name per successful download
    * ``failed_file``: ``"<organism> - <reason>"`` per failure
    * ``events_file``: JSON Lines, one object per entry including skips

    Entries carry the run id, so ``summarize()`` can be derived from the events
    file for the current run alone. Appends are serialized by a lock.
    """

    def __init__(
        self,
        success_file: Path,
        failed_file: Path,
        events_file: Path,
        run_id: Optional[str] = None,
    ):
        self.success_file = Path(success_file)
        self.failed_file = Path(failed_file)
        self.events_file = Path(events_file)
        self.run_id = run_id or uuid.uuid4().hex
        self._lock = threading.Lock()

    def open(self) -> "Ledger":
        """Create the ledger files if they do not exist yet."""
        try:
            for path in (self.success_file, self.failed_file, self.events_file):
                path.parent.mkdir(parents=True, exist_ok=True)
                path.touch(exist_ok=True)
        except OSError as exc:
            raise LedgerWriteFailure(f"Cannot initialize ledger: {exc}") from exc
        return self

    def record(
        self,
        organism: str,
        outcome: Outcome,
        reason: Optional[str] = None,
        source: Optional[str] = None,
        attempts: Sequence[str] = (),
    ) -> LedgerEntry:
        entry = LedgerEntry(
            organism=organism,
            outcome=Outcome(outcome),
            reason=reason,
            source=source,
            timestamp=datetime.now(timezone.utc).isoformat(timespec="seconds"),
            run_id=self.run_id,
            attempts=list(attempts),
        )
        line = json.dumps(entry.to_event(), ensure_ascii=False)

        with self._lock:
            try:
                with open(self.events_file, "a", encoding="utf-8") as fh:
                    fh.write(line + "\n")
                if entry.outcome is Outcome.DOWNLOADED:
                    with open(self.success_file, "a", encoding="utf-8") as fh:
                        fh.write(organism + "\n")
                elif entry.outcome is Outcome.FAILED:
                    with open(self.failed_file, "a", encoding="utf-8") as fh:
                        fh.write(f"{organism} - {reason or 'unknown'}\n")
            except OSError as exc:
                raise LedgerWriteFailure(
                    f"Could not record {entry.outcome.value} for {organism!r}: {exc}"
                ) from exc

        logger.debug("Ledger: %s %s %s", organism, entry.outcome.value, reason or "")
        return entry

    def entries(self) -> List[LedgerEntry]:
        """Entries written by this run, in append order."""
        if not self.events_file.exists():
            return []
        result = []
        with self._lock:
            with open(self.events_file, encoding="utf-8") as fh:
                for line in fh:
                    line = line.strip()
                    if not line:
                        continue
                    try:
                        event = json.loads(line)
                    except json.JSONDecodeError:
                        logger.warning("Skipping unreadable ledger line in %s", self.events_file)
                        continue
                    if event.get("run_id") == self.run_id:
                        result.append(LedgerEntry.from_event(event))
        return result

    def summarize(self) -> RunSummary:
        summary = RunSummary()
        for entry in self.entries():
            summary.add(entry.outcome)
        return summary

"""Write a run's ledger entries to a TSV/CSV report."""

import csv
from typing import Dict, Iterable, List, Optional

from genome_grabber.models import LEDGER_COLUMNS, LedgerEntry, Outcome

REPORT_COLUMNS = LEDGER_COLUMNS + ["attempts"]
REPORT_FORMATS = {"tsv": "\t", "csv": ","}


def report_row(entry: LedgerEntry) -> Dict[str, str]:
    row = entry.to_dict()
    row["attempts"] = "; ".join(entry.attempts)
    return row


def write_report(
    entries: Iterable[LedgerEntry],
    filepath: str,
    fmt: str = "tsv",
    outcomes: Optional[Iterable[Outcome]] = None,
) -> int:
    """Write one row per entry, optionally only those with the given outcomes.

    Returns the number of rows written. The header is written even when no
    entry matches.
    """
    if fmt not in REPORT_FORMATS:
        raise ValueError(f"Unknown report format: {fmt}")
    wanted = {Outcome(o) for o in outcomes} if outcomes else None
    selected: List[LedgerEntry] = [
        e for e in entries if wanted is None or e.outcome in wanted
    ]

    with open(filepath, "w", newline="", encoding="utf-8") as fh:
        writer = csv.DictWriter(fh, fieldnames=REPORT_COLUMNS, delimiter=REPORT_FORMATS[fmt])
        writer.writeheader()
        for entry in selected:
            writer.writerow(report_row(entry))
    return len(selected)

"""Command-line interface for genome-grabber."""

import argparse
import logging
import sys
from typing import List, Optional, Tuple

from genome_grabber import preflight
from genome_grabber.config import BACKENDS, DEFAULT_CATALOG_URL, DEFAULT_SOURCES, AcquisitionConfig
from genome_grabber.errors import FatalError
from genome_grabber.models import AssemblyLevel, LedgerEntry, Outcome, RunSummary

logger = logging.getLogger("genome_grabber")


def build_parser() -> argparse.ArgumentParser:
    parser = argparse.ArgumentParser(
        prog="genome-grabber",
        description=(
            "Download reference genomes for every organism in a TSV catalog, "
            "trying RefSeq first and GenBank second."
        ),
    )
    parser.add_argument(
        "--catalog-url", type=str, default=DEFAULT_CATALOG_URL,
        help=f"Source catalog URL (default: {DEFAULT_CATALOG_URL})",
    )
    parser.add_argument(
        "--catalog", type=str, default=None,
        help="Local catalog TSV path; downloaded from --catalog-url if missing "
             "(default: <log-dir>/degraders_list.tsv)",
    )
    parser.add_argument(
        "-o", "--output-dir", type=str, default=None,
        help="Genome output directory (env: GENOME_GRABBER_OUTPUT_DIR, "
             "default: ~/plasticDB/genomes)",
    )
    parser.add_argument(
        "--data-dir", type=str, default=None,
        help="Directory for the cached organism list (default: output dir)",
    )
    parser.add_argument(
        "--work-dir", type=str, default=None,
        help="Directory for archives and scratch space (default: output dir)",
    )
    parser.add_argument(
        "--log-dir", type=str, default=None,
        help="Directory for logs and success/failure lists (env: GENOME_GRABBER_LOG_DIR, "
             "default: ~)",
    )
    parser.add_argument(
        "--assembly-level", choices=[level.value for level in AssemblyLevel],
        default=AssemblyLevel.COMPLETE.value,
        help="Assembly level to request (default: complete)",
    )
    parser.add_argument(
        "--sources", nargs="+", default=list(DEFAULT_SOURCES),
        help="Assembly sources in fallback order (default: refseq genbank)",
    )
    parser.add_argument(
        "--backend", choices=list(BACKENDS), default="api",
        help="Use the NCBI Datasets REST API or the 'datasets' executable (default: api)",
    )
    parser.add_argument(
        "--no-compress", action="store_false", dest="compress",
        help="Do not write a .gz copy next to each genome",
    )
    parser.add_argument(
        "--workers", type=int, default=1,
        help="Organisms processed concurrently (default: 1, sequential)",
    )
    parser.add_argument(
        "--timeout", type=float, default=300.0,
        help="Per-request timeout in seconds (default: 300)",
    )
    parser.add_argument(
        "--retries", type=int, default=3,
        help="Attempts per request on transient errors (default: 3)",
    )
    parser.add_argument(
        "--report", type=str, default=None,
        help="Also write this run's ledger entries to a report file",
    )
    parser.add_argument(
        "--format", choices=["tsv", "csv"], default="tsv", dest="fmt",
        help="Report format (default: tsv)",
    )
    parser.add_argument(
        "--report-outcomes", nargs="+", default=None,
        choices=[outcome.value for outcome in Outcome],
        help="Only report entries with these outcomes (default: all)",
    )
    parser.add_argument(
        "-v", "--verbose", action="store_true",
        help="Enable verbose/debug logging",
    )
    return parser


def config_from_args(args: argparse.Namespace) -> AcquisitionConfig:
    return AcquisitionConfig.from_env(
        output_dir=args.output_dir,
        log_dir=args.log_dir,
        data_dir=args.data_dir,
        work_dir=args.work_dir,
        catalog_url=args.catalog_url,
        catalog_path=args.catalog,
        assembly_level=args.assembly_level,
        compress=args.compress,
        backend=args.backend,
        sources=tuple(args.sources),
        workers=args.workers,
        timeout=args.timeout,
        retries=args.retries,
    )


def configure_logging(config: AcquisitionConfig, verbose: bool = False) -> None:
    logging.basicConfig(
        level=logging.DEBUG if verbose else logging.INFO,
        format="%(levelname)s: %(message)s",
    )
    level = logging.DEBUG if verbose else logging.INFO
    logger.setLevel(level)
    for handler in list(logger.handlers):
        if isinstance(handler, logging.FileHandler):
            logger.removeHandler(handler)
            handler.close()

    config.log_dir.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(config.log_file, encoding="utf-8")
    file_handler.setFormatter(
        logging.Formatter("[%(asctime)s] [%(levelname)s] %(message)s", "%Y-%m-%d %H:%M:%S")
    )
    file_handler.setLevel(level)
    logger.addHandler(file_handler)


def run_pipeline(config: AcquisitionConfig) -> Tuple[RunSummary, List[LedgerEntry]]:
    """Preflight, catalog, worklist, downloads. Raises FatalError on any fatal step.

    Returns the run summary and the ledger entries written by this run.
    """
    preflight.verify(preflight.required_capabilities(config))

    # imported after preflight so a missing library is reported, not a traceback
    from genome_grabber.catalog import fetch_catalog, load_worklist
    from genome_grabber.core import GenomeGrabber
    from genome_grabber.ledger import Ledger
    from genome_grabber.providers import build_providers
    from genome_grabber.storage import FileSystemArtifactStore

    if not config.worklist_path.exists():
        fetch_catalog(config.catalog_url, config.catalog_path, timeout=config.timeout)
    organisms = load_worklist(config.catalog_path, config.worklist_path)

    config.output_dir.mkdir(parents=True, exist_ok=True)
    logger.info("Genome directory: %s", config.output_dir)

    ledger = Ledger(config.success_file, config.failed_file, config.events_file).open()
    grabber = GenomeGrabber(
        config,
        build_providers(config),
        FileSystemArtifactStore(config.output_dir),
        ledger,
    )
    summary = grabber.run(organisms)
    return summary, ledger.entries()


def main(argv: Optional[List[str]] = None) -> None:
    parser = build_parser()
    args = parser.parse_args(argv)

    try:
        config = config_from_args(args)
    except ValueError as exc:
        parser.error(str(exc))

    try:
        configure_logging(config, args.verbose)
    except OSError as exc:
        print(f"Error: cannot open log file: {exc}", file=sys.stderr)
        sys.exit(1)

    logger.info("===== Pipeline Started =====")
    logger.info("Assembly level: %s", config.assembly_level.value)

    try:
        summary, entries = run_pipeline(config)
    except (FatalError, OSError) as exc:
        logger.error("%s", exc)
        print(f"Error: {exc}", file=sys.stderr)
        sys.exit(1)

    if args.report:
        from genome_grabber.output import write_report

        try:
            rows = write_report(entries, args.report, args.fmt, args.report_outcomes)
        except OSError as exc:
            logger.error("Cannot write report: %s", exc)
            print(f"Error: cannot write report: {exc}", file=sys.stderr)
            sys.exit(1)
        logger.info("Wrote %d report rows to %s", rows, args.report)

    logger.info("===== Pipeline Completed Successfully =====")
    print(
        f"Done. {summary.total} processed: {summary.downloaded} downloaded, "
        f"{summary.skipped} already present, {summary.failed} failed."
    )
    print(f"Genome directory: {config.output_dir}")
    print(f"Success log: {config.success_file}")
    print(f"Failed log: {config.failed_file}")
    if args.report:
        print(f"Report: {args.report}")


if __name__ == "__main__":
    main()

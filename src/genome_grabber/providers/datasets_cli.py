"""Fetch genome archives by shelling out to the NCBI ``datasets`` command-line tool."""

import logging
import subprocess
import tempfile
from pathlib import Path
from typing import List

from tenacity import Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from genome_grabber.models import AssemblyLevel, FetchResult
from genome_grabber.providers.base import BaseProvider

logger = logging.getLogger(__name__)

DATASETS_CMD = "datasets"

_NETWORK_ERROR_TERMS = (
    "timeout",
    "i/o timeout",
    "connection",
    "network",
    "gateway",
    "dial tcp",
    "too many requests",
)


class _TransientCliError(Exception):
    pass


class DatasetsCliProvider(BaseProvider):
    def __init__(
        self,
        source: str,
        timeout: float = 300.0,
        retries: int = 3,
        backoff: float = 1.0,
        command: str = DATASETS_CMD,
    ):
        super().__init__(source)
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff
        self._command = command

    def build_command(self, organism: str, assembly_level: AssemblyLevel, filename: Path) -> List[str]:
        return [
            self._command, "download", "genome", "taxon", organism,
            "--include", "genome",
            "--assembly-source", self.source,
            "--assembly-level", assembly_level.value,
            "--filename", str(filename),
        ]

    def fetch(self, organism: str, assembly_level: AssemblyLevel) -> FetchResult:
        with tempfile.TemporaryDirectory(prefix="genome_grabber_") as tmp:
            zip_path = Path(tmp) / "genome.zip"
            cmd = self.build_command(organism, assembly_level, zip_path)
            retrying = Retrying(
                stop=stop_after_attempt(self._retries),
                wait=wait_exponential(multiplier=self._backoff, min=0, max=10),
                retry=retry_if_exception_type(_TransientCliError),
                reraise=True,
            )
            try:
                for attempt in retrying:
                    with attempt:
                        result = self._run(cmd)
            except _TransientCliError as exc:
                return FetchResult.transient(str(exc))

            if zip_path.exists() and zip_path.stat().st_size > 0:
                return FetchResult.found(zip_path.read_bytes())

            message = (result.stderr or result.stdout or "").strip()
            return FetchResult.not_found(
                message.splitlines()[-1] if message else f"no archive from {self.source}"
            )

    def _run(self, cmd: List[str]) -> subprocess.CompletedProcess:
        logger.debug("Run: %s", " ".join(cmd))
        try:
            result = subprocess.run(cmd, capture_output=True, text=True, timeout=self._timeout)
        except FileNotFoundError as exc:
            raise _TransientCliError(f"Command not found: {cmd[0]}") from exc
        except subprocess.TimeoutExpired as exc:
            raise _TransientCliError(f"{cmd[0]} timed out after {self._timeout}s") from exc

        if result.returncode != 0:
            combined = f"{result.stderr or ''}{result.stdout or ''}".lower()
            if any(term in combined for term in _NETWORK_ERROR_TERMS):
                raise _TransientCliError(
                    f"{cmd[0]} returned {result.returncode}: {(result.stderr or '').strip()[:200]}"
                )
        return result

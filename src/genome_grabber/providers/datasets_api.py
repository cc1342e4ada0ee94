"""Fetch genome archives from the NCBI Datasets v2 REST API."""

import logging
from typing import List, Optional
from urllib.parse import quote

import requests
from tenacity import Retrying, stop_after_attempt, wait_exponential, retry_if_exception_type

from genome_grabber.models import AssemblyLevel, FetchResult
from genome_grabber.providers.base import BaseProvider

logger = logging.getLogger(__name__)

DATASETS_API_URL = "https://api.ncbi.nlm.nih.gov/datasets/v2"

# CLI-style level names -> Datasets API filter values
ASSEMBLY_LEVEL_FILTERS = {
    AssemblyLevel.COMPLETE: "complete_genome",
    AssemblyLevel.CHROMOSOME: "chromosome",
    AssemblyLevel.SCAFFOLD: "scaffold",
    AssemblyLevel.CONTIG: "contig",
}


class DatasetsApiProvider(BaseProvider):
    """Resolve a taxon to its first matching assembly and download its genome FASTA.

    HTTP 429, 5xx, connection errors and timeouts are retried; whatever is
    still failing after ``retries`` attempts is reported as a transient error.
    Any other 4xx means the service does not know the taxon.
    """

    def __init__(
        self,
        source: str,
        session: requests.Session,
        timeout: float = 300.0,
        retries: int = 3,
        backoff: float = 1.0,
        base_url: str = DATASETS_API_URL,
        max_assemblies: int = 1,
    ):
        super().__init__(source)
        self._session = session
        self._timeout = timeout
        self._retries = retries
        self._backoff = backoff
        self._base_url = base_url.rstrip("/")
        self._max_assemblies = max_assemblies

    def fetch(self, organism: str, assembly_level: AssemblyLevel) -> FetchResult:
        try:
            accessions = self._find_accessions(organism, assembly_level)
            if not accessions:
                return FetchResult.not_found(
                    f"no {assembly_level.value} assembly in {self.source}"
                )
            logger.debug("%s: %s resolved to %s", self.source, organism, ", ".join(accessions))
            return FetchResult.found(self._download_archive(accessions))
        except requests.HTTPError as exc:
            status = exc.response.status_code if exc.response is not None else None
            return FetchResult.not_found(f"HTTP {status} from {self.source}")
        except requests.RequestException as exc:
            logger.warning("%s request failed for %s: %s", self.source, organism, exc)
            return FetchResult.transient(f"{type(exc).__name__}: {exc}")
        except ValueError as exc:
            # malformed JSON body
            logger.warning("%s returned an unreadable report for %s", self.source, organism)
            return FetchResult.transient(f"invalid response: {exc}")

    def _find_accessions(self, organism: str, assembly_level: AssemblyLevel) -> List[str]:
        url = f"{self._base_url}/genome/taxon/{quote(organism, safe='')}/dataset_report"
        params = {
            "filters.assembly_source": self.source,
            "filters.assembly_level": ASSEMBLY_LEVEL_FILTERS[assembly_level],
            "page_size": str(self._max_assemblies),
        }
        data = self._http_get(url, params).json()
        reports = (data.get("reports") if isinstance(data, dict) else None) or []
        if not isinstance(reports, list):
            logger.warning("%s: unexpected 'reports' field for %s", self.source, organism)
            return []
        accessions = [
            str(r["accession"]) for r in reports if isinstance(r, dict) and r.get("accession")
        ]
        return accessions[: self._max_assemblies]

    def _download_archive(self, accessions: List[str]) -> bytes:
        url = f"{self._base_url}/genome/accession/{','.join(accessions)}/download"
        params = {"include_annotation_type": "GENOME_FASTA"}
        return self._http_get(url, params).content

    def _http_get(self, url: str, params: Optional[dict] = None) -> requests.Response:
        retrying = Retrying(
            stop=stop_after_attempt(self._retries),
            wait=wait_exponential(multiplier=self._backoff, min=0, max=10),
            retry=retry_if_exception_type((requests.ConnectionError, requests.Timeout)),
            reraise=True,
        )
        for attempt in retrying:
            with attempt:
                resp = self._session.get(url, params=params, timeout=self._timeout)
                if resp.status_code == 429 or resp.status_code >= 500:
                    raise requests.ConnectionError(
                        f"{self.source} unavailable ({resp.status_code})"
                    )
                resp.raise_for_status()
                return resp

"""Shared fixtures for genome-grabber tests."""

import io
import zipfile
from pathlib import Path

import pytest
import requests

from genome_grabber.config import AcquisitionConfig
from genome_grabber.ledger import Ledger
from genome_grabber.models import FetchResult, GenomeArtifact
from genome_grabber.providers.base import BaseProvider
from genome_grabber.storage import ArtifactStore, FileSystemArtifactStore

FASTA_TEXT = ">NC_000964.3 Bacillus subtilis subsp. subtilis str. 168\nACGTACGTACGT\n"


def build_zip(members: dict) -> bytes:
    buf = io.BytesIO()
    with zipfile.ZipFile(buf, "w", zipfile.ZIP_DEFLATED) as zf:
        for name, content in members.items():
            zf.writestr(name, content)
    return buf.getvalue()


class FakeProvider(BaseProvider):
    """Provider serving canned results; records every organism it is asked for.

    An exception instance in ``results`` is raised instead of returned.
    """

    def __init__(self, source: str, results: dict):
        super().__init__(source)
        self.results = results
        self.calls = []

    def fetch(self, organism, assembly_level):
        self.calls.append((organism, assembly_level))
        result = self.results.get(organism, FetchResult.not_found("unknown taxon"))
        if isinstance(result, Exception):
            raise result
        return result


class InMemoryArtifactStore(ArtifactStore):
    def __init__(self, existing=()):
        self.artifacts = {name: b"" for name in existing}
        self.compressed = set()

    def exists(self, organism):
        return organism in self.artifacts

    def store(self, organism, sequence_file):
        self.artifacts[organism] = Path(sequence_file).read_bytes()
        return GenomeArtifact(organism=organism, path=Path(f"/memory/{organism}.fasta"))

    def compress(self, artifact):
        self.compressed.add(artifact.organism)
        return GenomeArtifact(
            organism=artifact.organism,
            path=artifact.path,
            compressed_path=artifact.path.with_name(artifact.path.name + ".gz"),
        )


@pytest.fixture
def make_zip():
    return build_zip


@pytest.fixture
def fasta_text():
    return FASTA_TEXT


@pytest.fixture
def session():
    return requests.Session()


@pytest.fixture
def genome_zip():
    """Realistic NCBI Datasets genome package with one genomic FASTA."""
    return build_zip({
        "README.md": "NCBI Datasets genome package\n",
        "ncbi_dataset/data/assembly_data_report.jsonl": '{"accession": "GCF_000009045.1"}\n',
        "ncbi_dataset/data/dataset_catalog.json": "{}",
        "ncbi_dataset/data/GCF_000009045.1/GCF_000009045.1_ASM904v1_genomic.fna": FASTA_TEXT,
    })


@pytest.fixture
def empty_genome_zip():
    """Genome package that carries metadata but no sequence file."""
    return build_zip({
        "README.md": "NCBI Datasets genome package\n",
        "ncbi_dataset/data/assembly_data_report.jsonl": "",
    })


@pytest.fixture
def config(tmp_path):
    return AcquisitionConfig(
        output_dir=tmp_path / "genomes",
        log_dir=tmp_path / "logs",
        catalog_url="https://example.org/degraders_list.tsv",
    )


@pytest.fixture
def ledger(config):
    return Ledger(config.success_file, config.failed_file, config.events_file).open()


@pytest.fixture
def fs_store(config):
    return FileSystemArtifactStore(config.output_dir)


@pytest.fixture
def make_provider():
    return FakeProvider


@pytest.fixture
def memory_store():
    return InMemoryArtifactStore


@pytest.fixture
def catalog_tsv():
    return (
        "Microorganism\tPlastic\tReference\n"
        "\tPET\tref0\n"
        "Alpha\tPET\tref1\n"
        "Alpha\tPLA\tref2\n"
        "Beta\tPHB\tref3\n"
    )

import gzip

import pytest

from genome_grabber.errors import CompressionFailure
from genome_grabber.storage import FileSystemArtifactStore, compress_file, sanitize_name


def test_sanitize_spaces():
    assert sanitize_name("Bacillus subtilis") == "Bacillus_subtilis"
    assert sanitize_name("Pseudomonas sp. AKS2") == "Pseudomonas_sp._AKS2"


def test_sanitize_escapes_path_characters():
    assert sanitize_name("Rhodococcus sp. C-2/1") == "Rhodococcus_sp._C-2%2F1"
    assert sanitize_name("..") == "%2E."
    assert "/" not in sanitize_name("../../etc/passwd")


def test_sanitize_is_collision_free():
    names = ["A b", "A_b", "A%5Fb", "A/b", "A%2Fb", "Aé", "Aé b"]
    stems = [sanitize_name(n) for n in names]
    assert len(set(stems)) == len(names)


def test_sanitize_non_ascii():
    assert sanitize_name("Aé") == "A%C3%A9"


def test_store_moves_file(tmp_path):
    store = FileSystemArtifactStore(tmp_path / "genomes")
    src = tmp_path / "scratch" / "x_genomic.fna"
    src.parent.mkdir()
    src.write_text(">seq\nACGT\n")

    assert not store.exists("Alpha beta")
    artifact = store.store("Alpha beta", src)

    assert artifact.path == tmp_path / "genomes" / "Alpha_beta.fasta"
    assert artifact.path.read_text() == ">seq\nACGT\n"
    assert not src.exists()
    assert store.exists("Alpha beta")


def test_compress_is_deterministic(tmp_path):
    src = tmp_path / "a.fasta"
    src.write_bytes(b">seq\n" + b"ACGT" * 1000 + b"\n")

    first = compress_file(src)
    first_bytes = first.read_bytes()
    first.unlink()
    second = compress_file(src)

    assert second == tmp_path / "a.fasta.gz"
    assert second.read_bytes() == first_bytes
    assert gzip.decompress(first_bytes) == src.read_bytes()


def test_compress_missing_source(tmp_path):
    with pytest.raises(CompressionFailure):
        compress_file(tmp_path / "missing.fasta")
    assert not (tmp_path / "missing.fasta.gz.part").exists()


def test_store_compress_adds_sibling(tmp_path):
    store = FileSystemArtifactStore(tmp_path)
    src = tmp_path / "in.fna"
    src.write_text(">x\nA\n")
    artifact = store.compress(store.store("Alpha", src))

    assert artifact.compressed_path == tmp_path / "Alpha.fasta.gz"
    assert artifact.compressed_path.exists()

import dataclasses
from pathlib import Path

import pytest

from genome_grabber.config import AcquisitionConfig
from genome_grabber.models import AssemblyLevel


def test_defaults_derive_from_output_and_log_dirs(tmp_path):
    config = AcquisitionConfig(output_dir=str(tmp_path / "g"), log_dir=str(tmp_path / "l"))

    assert config.output_dir == tmp_path / "g"
    assert config.work_dir == tmp_path / "g"
    assert config.worklist_path == tmp_path / "g" / "organism_names.txt"
    assert config.catalog_path == tmp_path / "l" / "degraders_list.tsv"
    assert config.success_file == tmp_path / "l" / "successful_downloads.txt"
    assert config.failed_file == tmp_path / "l" / "failed_downloads.txt"
    assert config.assembly_level is AssemblyLevel.COMPLETE
    assert config.sources == ("refseq", "genbank")
    assert config.compress is True


def test_is_immutable(config):
    with pytest.raises(dataclasses.FrozenInstanceError):
        config.workers = 4


def test_assembly_level_from_string(tmp_path):
    config = AcquisitionConfig(output_dir=tmp_path, log_dir=tmp_path, assembly_level="scaffold")
    assert config.assembly_level is AssemblyLevel.SCAFFOLD


@pytest.mark.parametrize(
    "overrides",
    [
        {"assembly_level": "draft"},
        {"backend": "ftp"},
        {"sources": ()},
        {"sources": ("refseq", "refseq")},
        {"workers": 0},
        {"retries": 0},
    ],
)
def test_invalid_values(tmp_path, overrides):
    with pytest.raises(ValueError):
        AcquisitionConfig(output_dir=tmp_path, log_dir=tmp_path, **overrides)


def test_from_env(monkeypatch, tmp_path):
    monkeypatch.setenv("GENOME_GRABBER_OUTPUT_DIR", str(tmp_path / "env-out"))
    monkeypatch.setenv("GENOME_GRABBER_LOG_DIR", str(tmp_path / "env-logs"))

    config = AcquisitionConfig.from_env(workers=2, data_dir=None)

    assert config.output_dir == tmp_path / "env-out"
    assert config.log_dir == tmp_path / "env-logs"
    assert config.workers == 2


def test_from_env_explicit_wins(monkeypatch, tmp_path):
    monkeypatch.setenv("GENOME_GRABBER_OUTPUT_DIR", str(tmp_path / "env-out"))
    config = AcquisitionConfig.from_env(output_dir=str(tmp_path / "cli-out"))
    assert config.output_dir == Path(tmp_path / "cli-out")

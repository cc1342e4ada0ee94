import dataclasses

import pytest

from genome_grabber import preflight
from genome_grabber.errors import MissingDependency


def test_all_present(monkeypatch):
    monkeypatch.setattr(preflight, "_is_available", lambda kind, name: True)
    preflight.verify(["fetch", "archive-extract", "compress", "tabular-parse"])


def test_reports_every_missing_capability(monkeypatch):
    absent = {"requests", "gzip", "datasets"}
    monkeypatch.setattr(preflight, "_is_available", lambda kind, name: name not in absent)

    with pytest.raises(MissingDependency) as excinfo:
        preflight.verify(["fetch", "archive-extract", "compress", "datasets-cli"])

    assert excinfo.value.missing == ["fetch (requests)", "compress (gzip)", "datasets-cli (datasets)"]
    assert "fetch (requests)" in str(excinfo.value)


def test_stdlib_modules_are_found():
    preflight.verify(["archive-extract", "compress", "tabular-parse"])


def test_module_that_fails_to_import_is_missing(tmp_path, monkeypatch):
    # locatable on sys.path but its own import fails, like gzip without zlib
    (tmp_path / "half_installed_gzip.py").write_text("import zlib_not_built_here\n")
    monkeypatch.syspath_prepend(str(tmp_path))
    monkeypatch.setitem(preflight.CAPABILITIES, "compress", ("module", "half_installed_gzip"))

    with pytest.raises(MissingDependency) as excinfo:
        preflight.verify(["fetch", "compress"])

    assert excinfo.value.missing == ["compress (half_installed_gzip)"]


def test_unknown_capability():
    with pytest.raises(ValueError):
        preflight.verify(["teleport"])


def test_required_capabilities_follow_config(config):
    assert "compress" in preflight.required_capabilities(config)
    assert "datasets-cli" not in preflight.required_capabilities(config)

    cli_no_gz = dataclasses.replace(config, backend="cli", compress=False)
    required = preflight.required_capabilities(cli_no_gz)
    assert "datasets-cli" in required
    assert "compress" not in required

"""
Unit tests for minipack/config.py.
"""
import json
import os

import pytest

from minipack.config import BUILD_DIR, BundleConfig, config_paths, load_config
from minipack.errors import BundleError


@pytest.fixture
def home(tmp_path, monkeypatch):
    """Point ~ at an empty temporary directory."""
    path = tmp_path / "home"
    path.mkdir()
    monkeypatch.setenv("HOME", str(path))
    monkeypatch.setenv("USERPROFILE", str(path))
    return path


@pytest.fixture
def workdir(tmp_path, monkeypatch, home):
    path = tmp_path / "work"
    path.mkdir()
    monkeypatch.chdir(path)
    return path


class TestLoadConfig:
    """Tests for locating and validating config files."""

    def test_defaults_without_files(self, workdir):
        config = load_config()
        assert config == BundleConfig()
        assert config.entry is None
        assert config.banner is True

    def test_project_file(self, workdir):
        (workdir / "minipack.json").write_text(json.dumps({"entry": "app.py", "banner": False}))

        config = load_config()

        assert config.entry == "app.py"
        assert config.banner is False

    def test_user_file(self, workdir, home):
        (home / ".minipack").mkdir()
        (home / ".minipack" / "config.json").write_text(json.dumps({"output": "out.py"}))

        assert load_config().output == "out.py"

    def test_project_file_wins(self, workdir, home):
        (home / ".minipack").mkdir()
        (home / ".minipack" / "config.json").write_text(json.dumps({"entry": "user.py"}))
        (workdir / "minipack.json").write_text(json.dumps({"entry": "project.py"}))

        assert load_config().entry == "project.py"

    def test_explicit_path(self, workdir):
        path = workdir / "custom.json"
        path.write_text(json.dumps({"entry": "custom.py"}))

        assert load_config(str(path)).entry == "custom.py"

    def test_explicit_path_missing(self, workdir):
        with pytest.raises(BundleError, match="not found"):
            load_config("nope.json")

    def test_invalid_json(self, workdir):
        (workdir / "minipack.json").write_text('{"entry": "a.py",\n  oops}')

        with pytest.raises(BundleError) as info:
            load_config()

        assert info.value.line_number == 2

    def test_unknown_key(self, workdir):
        (workdir / "minipack.json").write_text(json.dumps({"entyr": "a.py"}))

        with pytest.raises(BundleError, match="Invalid configuration"):
            load_config()

    def test_wrong_type(self, workdir):
        (workdir / "minipack.json").write_text(json.dumps({"banner": "sometimes"}))

        with pytest.raises(BundleError):
            load_config()

    def test_config_paths_order(self, home):
        paths = config_paths("proj")
        assert paths[0] == os.path.join("proj", "minipack.json")
        assert paths[1] == os.path.join(str(home), ".minipack", "config.json")


class TestBundleConfig:
    """Tests for merging flags into settings."""

    def test_merged_skips_none(self):
        config = BundleConfig(entry="a.py", output="out.py")

        merged = config.merged(entry=None, output="other.py")

        assert merged.entry == "a.py"
        assert merged.output == "other.py"
        assert config.output == "out.py"

    def test_output_path_default(self):
        assert BundleConfig().output_path() == os.path.join(BUILD_DIR, "bundle.py")

    def test_output_path_stdout(self):
        assert BundleConfig(output="-").output_path() == "-"

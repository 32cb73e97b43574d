"""Tests for the git check and babel config rendering."""

import subprocess
from unittest.mock import patch

import pytest

from taroshift.core.marker import DependencyFeature, DependencyMarkerSet
from taroshift.core.tooling import (
    DirtyWorkingTree,
    ensure_git_clean,
    is_git_clean,
    render_babel_config,
    write_babel_config,
)

GIT_RUN = "taroshift.core.tooling.git.subprocess.run"


def _completed(returncode=0, stdout="", stderr=""):
    return subprocess.CompletedProcess(["git"], returncode, stdout=stdout, stderr=stderr)


# =========================================================================
# Tests: git
# =========================================================================

class TestGitCheck:
    def test_clean(self):
        with patch(GIT_RUN, return_value=_completed()):
            assert is_git_clean("/repo")

    def test_dirty(self):
        with patch(GIT_RUN, return_value=_completed(stdout=" M src/app.js\n")):
            assert not is_git_clean("/repo")
            with pytest.raises(DirtyWorkingTree):
                ensure_git_clean("/repo")

    def test_not_a_repository_counts_as_clean(self):
        stderr = "fatal: not a git repository (or any of the parent directories): .git\n"
        with patch(GIT_RUN, return_value=_completed(returncode=128, stderr=stderr)):
            assert is_git_clean("/repo")

    def test_other_git_failure_is_dirty(self):
        with patch(GIT_RUN, return_value=_completed(returncode=1, stderr="error: bad index\n")):
            assert not is_git_clean("/repo")

    def test_git_missing(self):
        with patch(GIT_RUN, side_effect=FileNotFoundError("git")):
            assert is_git_clean("/repo")


# =========================================================================
# Tests: babel config
# =========================================================================

class TestBabelConfig:
    def test_no_plugins(self):
        text = render_babel_config(DependencyMarkerSet())
        assert "framework: 'react'" in text
        assert "ts: false" in text
        assert "plugins" not in text
        assert text.rstrip().endswith("}")

    def test_const_enum_plugin(self):
        markers = DependencyMarkerSet()
        markers.record(DependencyFeature.CONST_ENUM, "src/types.ts")
        text = render_babel_config(markers, typescript=True)
        assert "ts: true" in text
        assert "'babel-plugin-const-enum'," in text
        assert "plugin-proposal-decorators" not in text

    def test_decorator_plugin(self):
        markers = DependencyMarkerSet()
        markers.record(DependencyFeature.LEGACY_DECORATORS, "src/app.js")
        text = render_babel_config(markers)
        assert "['@babel/plugin-proposal-decorators', { legacy: true }]," in text

    def test_written_only_when_absent(self, tmp_path):
        path = write_babel_config(str(tmp_path), DependencyMarkerSet())
        assert path == str(tmp_path / "babel.config.js")
        assert "presets" in (tmp_path / "babel.config.js").read_text(encoding="utf-8")

        (tmp_path / "babel.config.js").write_text("module.exports = {}\n", encoding="utf-8")
        assert write_babel_config(str(tmp_path), DependencyMarkerSet()) is None
        assert (tmp_path / "babel.config.js").read_text(encoding="utf-8") == "module.exports = {}\n"

"""End-to-end tests for the command line entry point and settings."""

import json
from unittest.mock import patch

import pytest

from taroshift.__main__ import main
from taroshift.core.tooling import DirtyWorkingTree
from taroshift.setting import load_settings


BUILD_CONFIG = '''const config = {
  projectName: 'demo',
  sourceRoot: 'src',
  outputRoot: 'dist'
}

module.exports = function (merge) {
  return config
}
'''

ENTRY = '''import Taro, { Component } from '@tarojs/taro'
import Index from './pages/index/index'

class App extends Component {
  config = {
    pages: ['pages/index/index']
  }

  componentWillMount() {}

  render() {
    return <Index />
  }
}

Taro.render(<App />, document.getElementById('app'))
'''

PAGE = '''import Taro, { Component } from '@tarojs/taro'

@observer
export default class Index extends Component {
  config = { navigationBarTitleText: 'Home' }

  render() {
    return null
  }
}
'''

MANIFEST = {
    "name": "demo",
    "dependencies": {"@tarojs/taro": "^2.2.13", "nervjs": "^1.5.0"},
}


def _write_project(root):
    (root / "config").mkdir()
    (root / "config" / "index.js").write_text(BUILD_CONFIG, encoding="utf-8")
    (root / "src" / "pages" / "index").mkdir(parents=True)
    (root / "src" / "app.js").write_text(ENTRY, encoding="utf-8")
    (root / "src" / "pages" / "index" / "index.jsx").write_text(PAGE, encoding="utf-8")
    (root / "package.json").write_text(json.dumps(MANIFEST), encoding="utf-8")
    return root


# =========================================================================
# Tests: CLI
# =========================================================================

class TestMain:
    def test_full_migration(self, tmp_path, capsys):
        root = _write_project(tmp_path)
        assert main([str(root), "--force", "--workers", "2"]) == 0

        assert "framework: 'react'" in (root / "config" / "index.js").read_text(encoding="utf-8")
        entry = (root / "src" / "app.js").read_text(encoding="utf-8")
        assert "onLaunch()" in entry
        assert "export default App" in entry
        assert "import React, { Component } from 'react'" in entry
        assert (root / "src" / "app.config.js").exists()
        assert (root / "src" / "pages" / "index" / "index.config.js").read_text(encoding="utf-8") == (
            "export default { navigationBarTitleText: 'Home' };\n"
        )

        babel = (root / "babel.config.js").read_text(encoding="utf-8")
        assert "plugin-proposal-decorators" in babel

        out = capsys.readouterr().out
        assert "@babel/plugin-proposal-decorators" in out
        assert "nervjs" in out
        assert "Thanks for using taroshift" in out

    def test_missing_build_config_exits_1(self, tmp_path):
        assert main([str(tmp_path), "--force"]) == 1

    def test_dirty_tree_exits_1(self, tmp_path):
        root = _write_project(tmp_path)
        with patch("taroshift.__main__.ensure_git_clean", side_effect=DirtyWorkingTree(str(root))):
            assert main([str(root)]) == 1
        assert (root / "src" / "app.js").read_text(encoding="utf-8") == ENTRY

    def test_unknown_pass_exits_before_writing(self, tmp_path):
        root = _write_project(tmp_path)
        (root / "taroshift.yaml").write_text("transform:\n  passes: [router, bogus]\n", encoding="utf-8")
        assert main([str(root), "--force"]) == 1
        assert (root / "config" / "index.js").read_text(encoding="utf-8") == BUILD_CONFIG

    def test_missing_settings_file_exits_1(self, tmp_path):
        root = _write_project(tmp_path)
        assert main([str(root), "--force", "--config", str(tmp_path / "absent.yaml")]) == 1
        assert (root / "config" / "index.js").read_text(encoding="utf-8") == BUILD_CONFIG

    @pytest.mark.parametrize("content", ["transform: [1, 2\n", "transform:\n  workers: 0\n", "- router\n"])
    def test_malformed_settings_exit_1(self, tmp_path, content):
        root = _write_project(tmp_path)
        (root / "taroshift.yaml").write_text(content, encoding="utf-8")
        assert main([str(root), "--force"]) == 1
        assert (root / "config" / "index.js").read_text(encoding="utf-8") == BUILD_CONFIG

    def test_package_manager_applies_plan(self, tmp_path):
        root = _write_project(tmp_path)
        with patch("taroshift.core.dependencies.installer.subprocess.run") as run:
            assert main([str(root), "--force", "--package-manager", "yarn"]) == 0
        commands = [call.args[0] for call in run.call_args_list]
        assert ["yarn", "remove", "nervjs"] in commands
        assert all(call.kwargs["cwd"] == str(root) for call in run.call_args_list)


# =========================================================================
# Tests: Settings
# =========================================================================

class TestSettings:
    def test_defaults(self, tmp_path):
        settings = load_settings(str(tmp_path))
        assert settings.log_level == "INFO"
        assert settings.transform.passes == ["router", "taro-imports", "page-config"]
        assert settings.transform.workers is None
        assert settings.dependencies.package_manager is None

    def test_yaml_file(self, tmp_path):
        (tmp_path / "taroshift.yaml").write_text(
            "transform:\n  workers: 3\ndependencies:\n  npm_registry: https://registry.npmmirror.com/\n",
            encoding="utf-8",
        )
        settings = load_settings(str(tmp_path))
        assert settings.transform.workers == 3
        assert settings.dependencies.npm_registry == "https://registry.npmmirror.com/"

    def test_environment_wins(self, tmp_path, monkeypatch):
        (tmp_path / "taroshift.yaml").write_text("transform:\n  workers: 3\n", encoding="utf-8")
        monkeypatch.setenv("TAROSHIFT_WORKERS", "5")
        monkeypatch.setenv("TAROSHIFT_PACKAGE_MANAGER", "yarn")
        settings = load_settings(str(tmp_path))
        assert settings.transform.workers == 5
        assert settings.dependencies.package_manager == "yarn"

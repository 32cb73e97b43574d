"""Tests for the project model: build config, pages and entry rewriting."""

import pytest

from taroshift.core.ast_parser import parse_source
from taroshift.core.errors import ConfigNotFound, EntryNotFound, SourceRootMissing
from taroshift.core.project import (
    ProjectModel,
    extract_pages,
    extract_source_root,
    locate_build_config,
    rewrite_build_config,
    rewrite_entry,
)


# =========================================================================
# Source fixtures
# =========================================================================

BUILD_CONFIG = '''const config = {
  projectName: 'demo',
  sourceRoot: 'src',
  outputRoot: 'dist',
  plugins: []
}

module.exports = function (merge) {
  return config
}
'''

BUILD_CONFIG_NO_ROOT = '''const config = {
  projectName: 'demo',
  outputRoot: 'dist'
}

module.exports = config
'''

ENTRY = '''import Taro, { Component } from '@tarojs/taro'
import Index from './pages/index'

class App extends Component {
  config = {
    pages: [
      'pages/index/index',
      'pages/mine/mine',
      'pages/index/index'
    ],
    subPackages: [
      { root: 'packageA', pages: ['pages/cat/cat'] }
    ]
  }

  componentWillMount() {
    console.log(this.$router.params)
  }

  render() {
    return <Index />
  }
}

Taro.render(<App />, document.getElementById('app'))
'''

ENTRY_DEFAULT_EXPORT = '''import Taro, { Component } from '@tarojs/taro'

export default class App extends Component {
  config = {
    pages: ['pages/home/home']
  }

  onLaunch() {}

  componentWillMount() {}
}
'''

PAGE = '''import Taro, { Component } from '@tarojs/taro'

export default class Index extends Component {
  config = { navigationBarTitleText: 'Home' }

  render() {
    return null
  }
}
'''


def _write_project(root, build_config=BUILD_CONFIG, entry=ENTRY):
    (root / "config").mkdir()
    (root / "config" / "index.js").write_text(build_config, encoding="utf-8")
    src = root / "src"
    (src / "pages" / "index").mkdir(parents=True)
    (src / "pages" / "index" / "index.jsx").write_text(PAGE, encoding="utf-8")
    (src / "app.js").write_text(entry, encoding="utf-8")
    return root


# =========================================================================
# Tests: Build config
# =========================================================================

class TestBuildConfig:
    def test_locate(self, tmp_path):
        _write_project(tmp_path)
        assert locate_build_config(str(tmp_path)) == str(tmp_path / "config" / "index.js")

    def test_locate_missing(self, tmp_path):
        with pytest.raises(ConfigNotFound):
            locate_build_config(str(tmp_path))

    def test_source_root(self):
        tree = parse_source(BUILD_CONFIG, "config/index.js")
        assert extract_source_root(tree) == "src"

    def test_source_root_normalised(self):
        tree = parse_source(BUILD_CONFIG.replace("'src'", "'./src/'"), "config/index.js")
        assert extract_source_root(tree) == "src"

    def test_source_root_missing(self):
        tree = parse_source(BUILD_CONFIG_NO_ROOT, "config/index.js")
        with pytest.raises(SourceRootMissing):
            extract_source_root(tree)

    def test_rewrite_adds_framework_and_constants(self):
        tree = parse_source(BUILD_CONFIG, "config/index.js")
        changed = rewrite_build_config(tree, {"process.env.TARO_FRAMEWORK": "JSON.stringify('react')"})
        assert changed
        out = tree.print()
        assert "  framework: 'react',\n" in out
        assert "'process.env.TARO_FRAMEWORK': JSON.stringify('react')" in out
        assert "sourceRoot: 'src'" in out

        again = parse_source(out, "config/index.js")
        assert not rewrite_build_config(again, {"process.env.TARO_FRAMEWORK": "JSON.stringify('react')"})

    def test_rewrite_keeps_existing_entries(self):
        source = BUILD_CONFIG.replace(
            "  plugins: []",
            "  plugins: [],\n  framework: 'nerv',\n  defineConstants: {\n    API: '\"/api\"'\n  }",
        )
        tree = parse_source(source, "config/index.js")
        rewrite_build_config(tree, {"ENV": "'\"prod\"'"})
        out = tree.print()
        assert "framework: 'nerv'" in out
        assert "framework: 'react'" not in out
        assert "ENV: '\"prod\"',\n    API" in out


# =========================================================================
# Tests: Pages
# =========================================================================

class TestPages:
    def test_declared_order_and_dedup(self):
        tree = parse_source(ENTRY, "src/app.js")
        assert extract_pages(tree, "src") == [
            "src/pages/index/index",
            "src/pages/mine/mine",
            "src/packageA/pages/cat/cat",
        ]

    def test_default_export_class(self):
        tree = parse_source(ENTRY_DEFAULT_EXPORT, "src/app.js")
        assert extract_pages(tree) == ["pages/home/home"]

    def test_extracted_app_config(self):
        source = "export default defineAppConfig({\n  pages: ['pages/a/a', '/pages/b/b']\n})\n"
        tree = parse_source(source, "src/app.config.ts")
        assert extract_pages(tree, "src") == ["src/pages/a/a", "src/pages/b/b"]

    def test_no_pages(self):
        tree = parse_source("export default {}\n", "src/app.js")
        assert extract_pages(tree, "src") == []


# =========================================================================
# Tests: Entry rewriting
# =========================================================================

class TestRewriteEntry:
    def test_full_rewrite(self):
        tree = parse_source(ENTRY, "/proj/src/app.js")
        siblings = rewrite_entry(tree)
        out = tree.print()

        assert "import Taro, { Component, getCurrentInstance } from '@tarojs/taro'" in out
        assert "onLaunch() {" in out
        assert "componentWillMount" not in out
        assert "getCurrentInstance().router.params" in out
        assert "Taro.render" not in out
        assert out.rstrip().endswith("export default App")
        assert "pages:" not in out

        assert len(siblings) == 1
        assert siblings[0].path == "/proj/src/app.config.js"
        assert siblings[0].content.startswith("export default {\n  pages: [\n    'pages/index/index',")
        assert siblings[0].content.endswith("\n};\n")

    def test_existing_launch_hook_wins(self):
        tree = parse_source(ENTRY_DEFAULT_EXPORT, "/proj/src/app.js")
        rewrite_entry(tree, extract=False)
        out = tree.print()
        assert "componentWillMount() {}" in out
        assert "pages: ['pages/home/home']" in out

    def test_idempotent(self):
        tree = parse_source(ENTRY, "/proj/src/app.js")
        rewrite_entry(tree)
        again = parse_source(tree.print(), "/proj/src/app.js")
        assert rewrite_entry(again) == []
        assert not again.edited


# =========================================================================
# Tests: ProjectModel
# =========================================================================

class TestProjectModel:
    def test_load(self, tmp_path):
        _write_project(tmp_path)
        project = ProjectModel(str(tmp_path)).load()
        assert project.source_root == "src"
        assert project.entry_module == "src/app"
        assert project.entry_file_path == str(tmp_path / "src" / "app.js")
        assert project.pages[0] == "src/pages/index/index"

    def test_load_writes_nothing(self, tmp_path):
        _write_project(tmp_path)
        ProjectModel(str(tmp_path)).load()
        assert (tmp_path / "config" / "index.js").read_text(encoding="utf-8") == BUILD_CONFIG
        assert (tmp_path / "src" / "app.js").read_text(encoding="utf-8") == ENTRY
        assert not (tmp_path / "src" / "app.config.js").exists()

    def test_missing_source_dir(self, tmp_path):
        _write_project(tmp_path, build_config=BUILD_CONFIG.replace("'src'", "'client'"))
        with pytest.raises(SourceRootMissing):
            ProjectModel(str(tmp_path)).load()

    def test_missing_entry(self, tmp_path):
        _write_project(tmp_path)
        (tmp_path / "src" / "app.js").unlink()
        with pytest.raises(EntryNotFound):
            ProjectModel(str(tmp_path)).load()

    def test_transform_and_reload(self, tmp_path):
        _write_project(tmp_path)
        model = ProjectModel(str(tmp_path), {"process.env.TARO_FRAMEWORK": "JSON.stringify('react')"})
        model.load()
        assert model.transform_and_overwrite_config()
        assert model.transform_entry()

        assert "framework: 'react'" in (tmp_path / "config" / "index.js").read_text(encoding="utf-8")
        assert (tmp_path / "src" / "app.config.js").exists()

        # Pages now come from the extracted app config
        reloaded = ProjectModel(str(tmp_path)).load()
        assert reloaded.pages == [
            "src/pages/index/index",
            "src/pages/mine/mine",
            "src/packageA/pages/cat/cat",
        ]

        second = ProjectModel(str(tmp_path), {"process.env.TARO_FRAMEWORK": "JSON.stringify('react')"})
        second.load()
        assert not second.transform_and_overwrite_config()
        assert not second.transform_entry()

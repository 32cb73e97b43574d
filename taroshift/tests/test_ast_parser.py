"""Tests for the syntax tree adapter."""

import pytest

from taroshift.core.ast_parser import ParseError, detect_dialects, parse_file, parse_source
from taroshift.core.ast_parser.queries import collect_imports, find_all, removal_span
from taroshift.core.errors import OverlappingEditError


# =========================================================================
# Source fixtures
# =========================================================================

JSX_PAGE = '''import Taro, { Component } from '@tarojs/taro'
import { View } from '@tarojs/components'

// keep me
export default class Index extends Component {
  render () {
    return <View className='index'>Hello</View>
  }
}
'''

TS_WITH_TYPES = '''import Taro from '@tarojs/taro';

interface Props { title: string }

const enum Mode { Light, Dark }

export function useTitle(props: Props): string {
  return props.title as string;
}
'''

TSX_IN_TS_FILE = '''const App = () => <div>hi</div>;
export default App;
'''

DECORATED = '''@inject('store')
@observer
class Index extends Component {
  render () { return null }
}
export default Index
'''

BROKEN = '''const = ;
function (
'''


# =========================================================================
# Tests: Dialect detection
# =========================================================================

class TestDialectDetection:
    def test_js_falls_back_to_tsx(self):
        assert detect_dialects("src/app.js") == ["javascript", "tsx"]

    def test_ts_falls_back_to_tsx(self):
        assert detect_dialects("src/app.ts") == ["typescript", "tsx"]

    def test_tsx_only(self):
        assert detect_dialects("src/app.tsx") == ["tsx"]

    def test_case_insensitive(self):
        assert detect_dialects("SRC/APP.JSX") == ["javascript", "tsx"]

    def test_unsupported(self):
        assert detect_dialects("styles/app.scss") == []


# =========================================================================
# Tests: Parsing
# =========================================================================

class TestParse:
    def test_jsx_parses_as_javascript(self):
        tree = parse_source(JSX_PAGE, "index.jsx")
        assert tree.dialect == "javascript"
        assert not tree.root.has_error
        assert not tree.is_typescript

    def test_typescript(self):
        tree = parse_source(TS_WITH_TYPES, "hooks.ts")
        assert tree.dialect == "typescript"
        assert tree.is_typescript

    def test_jsx_in_ts_file_uses_tsx(self):
        tree = parse_source(TSX_IN_TS_FILE, "app.ts")
        assert tree.dialect == "tsx"

    def test_decorators(self):
        tree = parse_source(DECORATED, "index.js")
        assert len(find_all(tree, "decorator")) == 2

    def test_forced_dialect(self):
        tree = parse_source(TS_WITH_TYPES, "hooks.js", dialect="typescript")
        assert tree.dialect == "typescript"

    def test_parse_error_carries_location(self):
        with pytest.raises(ParseError) as excinfo:
            parse_source(BROKEN, "src/broken.js")
        error = excinfo.value
        assert error.file_path == "src/broken.js"
        assert error.line >= 1
        assert "src/broken.js" in str(error)

    def test_unsupported_extension(self):
        with pytest.raises(ParseError):
            parse_source("a {}", "app.css")

    def test_parse_file(self, tmp_path):
        path = tmp_path / "index.jsx"
        path.write_text(JSX_PAGE, encoding="utf-8")
        tree = parse_file(str(path))
        assert tree.file_path == str(path)
        assert tree.print() == JSX_PAGE


# =========================================================================
# Tests: Edits and printing
# =========================================================================

class TestPrint:
    def test_untouched_source_is_byte_identical(self):
        tree = parse_source(JSX_PAGE, "index.jsx")
        assert not tree.edited
        assert tree.print() == JSX_PAGE

    def test_replace_keeps_surroundings(self):
        tree = parse_source(JSX_PAGE, "index.jsx")
        decl = collect_imports(tree)[1]
        tree.replace(decl.node, "import { Text } from '@tarojs/components'")
        out = tree.print()
        assert "import { Text } from '@tarojs/components'" in out
        assert "// keep me" in out
        assert out.replace("{ Text }", "{ View }") == JSX_PAGE

    def test_insert_and_remove(self):
        source = "const a = 1;\nconst b = 2;\n"
        tree = parse_source(source, "a.js")
        tree.insert(0, "// head\n")
        second = tree.root.named_children[1]
        tree.remove(*removal_span(tree.source, second.start_byte, second.end_byte))
        assert tree.print() == "// head\nconst a = 1;\n"

    def test_edits_at_same_offset_keep_order(self):
        tree = parse_source("x;\n", "a.js")
        tree.insert(0, "a")
        tree.insert(0, "b")
        assert tree.print() == "abx;\n"

    def test_overlapping_edits_rejected(self):
        tree = parse_source("const a = 1;\n", "a.js")
        statement = tree.root.named_children[0]
        tree.replace(statement, "let a = 1;")
        tree.replace((statement.start_byte + 2, statement.start_byte + 4), "zz")
        with pytest.raises(OverlappingEditError):
            tree.print()

    def test_multibyte_text(self):
        source = "const title = '首页';\nconst n = 1;\n"
        tree = parse_source(source, "a.js")
        second = tree.root.named_children[1]
        tree.replace(second, "const n = 2;")
        assert tree.print() == "const title = '首页';\nconst n = 2;\n"

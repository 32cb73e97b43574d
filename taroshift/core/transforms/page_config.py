"""``page-config`` pass: move inline page config into ``*.config.<ext>``.

Taro 3 reads page configuration from a sibling module instead of a
``config`` field on the page component:

    // pages/index/index.jsx          // pages/index/index.config.js
    class Index extends Component {   export default {
      config = {                        navigationBarTitleText: '首页'
        navigationBarTitleText: '首页'  };
      }
    }

Only page modules are in scope; the entry module's config carries the
route list and is handled by the project model.
"""

import logging

from ..ast_parser import SyntaxTree
from ..errors import AmbiguousComponentError
from .base import PassContext, PassResult, TransformPass
from .components import extract_config, has_config_candidates, resolve_default_component, single_config_site

logger = logging.getLogger(__name__)


class PageConfigPass(TransformPass):

    @property
    def name(self) -> str:
        return "page-config"

    def applies_to(self, context: PassContext) -> bool:
        return context.is_page and not context.is_entry

    def match(self, tree: SyntaxTree) -> bool:
        return has_config_candidates(tree)

    def rewrite(self, tree: SyntaxTree, context: PassContext) -> PassResult:
        try:
            component = resolve_default_component(tree)
            site = single_config_site(tree, component)
        except AmbiguousComponentError as e:
            return PassResult.unchanged(tree, warning=f"page config skipped, {e}")

        if site is None:
            logger.debug("%s: config is not attached to the default export", context.file_path)
            return PassResult.unchanged(tree)

        sibling = extract_config(tree, site)
        return PassResult(text=tree.print(), sibling_files=[sibling])

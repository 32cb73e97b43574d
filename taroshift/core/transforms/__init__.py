"""Transform passes — pattern-matching rewrites applied across the project.

All built-in passes are registered on import, in the order the
orchestrator runs them: ``router``, ``taro-imports``, ``page-config``.
"""

from .base import PassContext, PassResult, SiblingFile, TransformPass
from .registry import PassRegistry

# ── Register built-in passes ─────────────────────────────────────────

from .router import RouterPass
from .taro_imports import TaroImportsPass
from .page_config import PageConfigPass

PassRegistry.register(RouterPass())
PassRegistry.register(TaroImportsPass())
PassRegistry.register(PageConfigPass())

DEFAULT_PASS_ORDER = ["router", "taro-imports", "page-config"]

__all__ = [
    "DEFAULT_PASS_ORDER",
    "PageConfigPass",
    "PassContext",
    "PassRegistry",
    "PassResult",
    "RouterPass",
    "SiblingFile",
    "TaroImportsPass",
    "TransformPass",
]

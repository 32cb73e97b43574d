"""Transform pass registry.

Simple dict-based registry. Built-in passes are registered at import
time via ``transforms/__init__.py``; the declared order is the order
the orchestrator runs them in.
"""

import logging
from typing import Dict, List, Optional

from .base import TransformPass

logger = logging.getLogger(__name__)


class PassRegistry:
    """Registry for transform passes.

    Class-level store so the orchestrator can call
    ``PassRegistry.ordered()`` without holding an instance.
    """

    _passes: Dict[str, TransformPass] = {}

    @classmethod
    def register(cls, transform: TransformPass) -> None:
        """Register a pass instance (re-registering a name replaces it in place)."""
        cls._passes[transform.name] = transform
        logger.debug("Registered transform pass: %s", transform.name)

    @classmethod
    def get(cls, name: str) -> Optional[TransformPass]:
        """Get a pass by name. Returns ``None`` if not found."""
        return cls._passes.get(name)

    @classmethod
    def ordered(cls, names: Optional[List[str]] = None) -> List[TransformPass]:
        """Passes in declared order, optionally restricted to ``names``.

        Raises:
            KeyError: If a requested name is not registered
        """
        if names is None:
            return list(cls._passes.values())
        missing = [n for n in names if n not in cls._passes]
        if missing:
            raise KeyError(f"Unknown transform pass(es): {', '.join(missing)}")
        return [cls._passes[n] for n in names]

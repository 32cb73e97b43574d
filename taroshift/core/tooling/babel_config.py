"""Render ``babel.config.js`` for the migrated project.

Only written when the project has none, so hand-tuned configs survive.
"""

import logging
import os
from pathlib import Path
from typing import Optional

from jinja2 import Environment, FileSystemLoader

from ..marker import DependencyFeature, DependencyMarkerSet

logger = logging.getLogger(__name__)

BABEL_CONFIG_NAME = "babel.config.js"
TEMPLATE_NAME = "babel.config.js.j2"
TEMPLATES_DIR = Path(__file__).parent.parent.parent / "templates"


def render_babel_config(markers: DependencyMarkerSet, typescript: bool = False) -> str:
    env = Environment(
        loader=FileSystemLoader(str(TEMPLATES_DIR)),
        autoescape=False,
        keep_trailing_newline=True,
    )
    template = env.get_template(TEMPLATE_NAME)
    return template.render(
        typescript=typescript,
        should_enable_legacy_decorator_support=DependencyFeature.LEGACY_DECORATORS in markers,
        should_use_const_enum_plugin=DependencyFeature.CONST_ENUM in markers,
    )


def write_babel_config(
    project_dir: str,
    markers: DependencyMarkerSet,
    typescript: bool = False,
) -> Optional[str]:
    """Create ``babel.config.js`` if absent.

    Returns:
        Path written, or None when a config already existed
    """
    path = os.path.join(project_dir, BABEL_CONFIG_NAME)
    if os.path.exists(path):
        logger.info("%s exists; leaving it as is", path)
        return None
    with open(path, "w", encoding="utf-8") as f:
        f.write(render_babel_config(markers, typescript))
    logger.info("Created %s", path)
    return path

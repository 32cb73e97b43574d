"""Runtime settings.

Defaults live on the models below. A ``taroshift.yaml`` in the project
directory (or the file passed with ``--config``) overlays them, and
``TAROSHIFT_*`` environment variables (``.env`` files included) win over
both.
"""

import logging
import os
from typing import Dict, List, Literal, Optional

import yaml
from dotenv import load_dotenv
from pydantic import BaseModel, Field

from .core.transforms import DEFAULT_PASS_ORDER

logger = logging.getLogger(__name__)

CONFIG_FILE_NAME = "taroshift.yaml"

ENV_OVERRIDES = {
    "TAROSHIFT_LOG_LEVEL": ("log_level",),
    "TAROSHIFT_WORKERS": ("transform", "workers"),
    "TAROSHIFT_PACKAGE_MANAGER": ("dependencies", "package_manager"),
    "TAROSHIFT_NPM_REGISTRY": ("dependencies", "npm_registry"),
    "TAROSHIFT_REGISTRY_FILE": ("dependencies", "registry_file"),
}


class TransformSettings(BaseModel):
    workers: Optional[int] = Field(default=None, ge=1, description="Worker pool size")
    passes: List[str] = Field(default_factory=lambda: list(DEFAULT_PASS_ORDER))
    define_constants: Dict[str, str] = Field(
        default_factory=lambda: {"process.env.TARO_FRAMEWORK": "JSON.stringify('react')"},
        description="Entries ensured in the build config's defineConstants",
    )


class DependencySettings(BaseModel):
    registry_file: Optional[str] = Field(default=None, description="Override for the bundled registry")
    package_manager: Optional[Literal["npm", "yarn"]] = Field(
        default=None, description="Apply the plan with this package manager; report only when unset"
    )
    npm_registry: Optional[str] = None


class Settings(BaseModel):
    log_level: str = "INFO"
    transform: TransformSettings = Field(default_factory=TransformSettings)
    dependencies: DependencySettings = Field(default_factory=DependencySettings)


def _apply_env(data: dict) -> dict:
    for var, path in ENV_OVERRIDES.items():
        value = os.getenv(var)
        if not value:
            continue
        target = data
        for key in path[:-1]:
            target = target.setdefault(key, {})
        target[path[-1]] = value
    return data


def load_settings(project_dir: str = ".", config_path: Optional[str] = None) -> Settings:
    """Build settings from defaults, the YAML file and the environment.

    Args:
        project_dir: Where to look for ``taroshift.yaml``
        config_path: Explicit settings file (must exist)

    Raises:
        FileNotFoundError: ``config_path`` given but missing
        ValueError: The file is not a mapping or fails validation
    """
    load_dotenv()

    path = config_path or os.path.join(project_dir, CONFIG_FILE_NAME)
    data: dict = {}
    if config_path or os.path.isfile(path):
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
        if not isinstance(data, dict):
            raise ValueError(f"{path}: settings must be a mapping, got {type(data).__name__}")
        logger.debug("Loaded settings from %s", path)

    return Settings.model_validate(_apply_env(data))

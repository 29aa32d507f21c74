"""
Configuration for minipack builds.

Settings come from a minipack.json file, looked up in the project directory
first and in ~/.minipack/config.json second. Command line flags override them.
"""
import json
import os
from typing import Optional

from pydantic import BaseModel, ConfigDict, ValidationError

from minipack.errors import BundleError

CONFIG_FILE = "minipack.json"
USER_CONFIG_FILE = os.path.join("~", ".minipack", "config.json")
BUILD_DIR = "__minipack_build__"


class BundleConfig(BaseModel):
    """Build settings."""
    model_config = ConfigDict(extra="forbid")

    entry: Optional[str] = None
    output: Optional[str] = None
    banner: bool = True

    def merged(self, **overrides):
        """Return a copy with every override that is not None applied."""
        changes = {key: value for key, value in overrides.items() if value is not None}
        return self.model_copy(update=changes)

    def output_path(self):
        return self.output or os.path.join(BUILD_DIR, "bundle.py")


def config_paths(directory="."):
    return [os.path.join(directory, CONFIG_FILE), os.path.expanduser(USER_CONFIG_FILE)]


def load_config(path=None, directory="."):
    """
    Load build settings.

    Args:
        path: Explicit config file; must exist when given
        directory: Project directory searched when no path is given

    Returns:
        BundleConfig, with defaults when no config file exists
    """
    if path is None:
        found = [p for p in config_paths(directory) if os.path.exists(p)]
        if not found:
            return BundleConfig()
        path = found[0]
    elif not os.path.exists(path):
        raise BundleError(f"Config file '{path}' not found", path=path)

    try:
        with open(path, "r", encoding="utf-8") as f:
            data = json.load(f)
        return BundleConfig.model_validate(data)
    except json.JSONDecodeError as e:
        raise BundleError(
            f"Invalid JSON: {e.msg}",
            path=path,
            line_number=e.lineno,
            column=e.colno,
        ) from e
    except ValidationError as e:
        raise BundleError(
            f"Invalid configuration: {e.errors()[0]['msg']}",
            path=path,
            suggestion="Supported keys are entry, output and banner",
        ) from e

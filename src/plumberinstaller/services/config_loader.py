"""Configuration loader for the Plumber installer."""

from pathlib import Path
from typing import Any, Dict, Optional

import yaml

from plumberinstaller.constants import (
    ENV_FILE,
    MIN_COMPOSE_VERSION,
    REACHABILITY_TIMEOUT,
    REPO_DIR,
    REPO_URL,
    VERSIONS_FILE,
)
from plumberinstaller.errors import InstallerError
from plumberinstaller.models import InstallerSettings


class ConfigLoader:
    """Loads the optional YAML settings file and resolves installer settings."""

    SUPPORTED_KEYS = {
        "repo_url",
        "repo_dir",
        "env_file",
        "versions_file",
        "min_compose_version",
        "reachability_timeout",
        "command_timeout",
        "verbose",
        "log_file",
    }
    DEFAULTS: Dict[str, Any] = {
        "repo_url": REPO_URL,
        "repo_dir": REPO_DIR,
        "env_file": ENV_FILE,
        "versions_file": VERSIONS_FILE,
        "min_compose_version": MIN_COMPOSE_VERSION,
        "reachability_timeout": REACHABILITY_TIMEOUT,
        "command_timeout": None,
    }

    def load(self, config_path: Optional[str]) -> Dict[str, Any]:
        if not config_path:
            return {}

        path = Path(config_path)
        if not path.exists():
            raise InstallerError(f"Config file not found: {config_path}")

        try:
            parsed = yaml.safe_load(path.read_text(encoding="utf-8"))
        except (yaml.YAMLError, OSError) as exc:
            raise InstallerError(f"Invalid config file '{config_path}': {exc}") from exc

        if parsed is None:
            return {}
        if not isinstance(parsed, dict):
            raise InstallerError("Config file must contain a YAML mapping at the root.")

        unknown = sorted(set(parsed.keys()) - self.SUPPORTED_KEYS)
        if unknown:
            unknown_list = ", ".join(unknown)
            raise InstallerError(f"Unknown configuration keys: {unknown_list}")

        return parsed

    def build_settings(self, config: Dict[str, Any]) -> InstallerSettings:
        values = dict(self.DEFAULTS)
        values.update({key: config[key] for key in self.DEFAULTS if config.get(key) is not None})

        for key in ("reachability_timeout", "command_timeout"):
            if values[key] is None:
                continue
            try:
                values[key] = float(values[key])
            except (TypeError, ValueError) as exc:
                raise InstallerError(f"'{key}' must be a number, got {values[key]!r}.") from exc

        for key in ("repo_url", "repo_dir", "env_file", "versions_file", "min_compose_version"):
            values[key] = str(values[key])

        return InstallerSettings(**values)

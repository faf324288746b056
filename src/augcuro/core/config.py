#!/usr/bin/env python3
"""
AUGCURO CONFIGURATION
---------------------
Loads engine settings and batch action files from YAML. Also owns the
path-resolution table used to locate the external augtool binary.

Author: AugCuro Team
Date: 2026-10-17
"""

import os
import logging
from dataclasses import dataclass, field, fields
from pathlib import Path
from typing import Dict, Any, List, Optional, Union

from ruamel.yaml import YAML, YAMLError

from augcuro.core.models import ActionRequest

logger = logging.getLogger("augcuro.config")

DEFAULT_PATHS = {"augtool": "/usr/bin/augtool"}
TOOL_ENV_OVERRIDE = "AUGCURO_AUGTOOL"


@dataclass
class AugcuroConfig:
    """
    Engine settings. Every field has a working default so the engine
    runs without any config file at all.
    """
    paths: Dict[str, str] = field(default_factory=lambda: dict(DEFAULT_PATHS))
    backup_suffix: str = ".augcuro-before-edit"   # Pre-edit snapshot sibling
    new_file_suffix: str = ".augnew"              # What `augtool --new` writes
    quote_arguments: bool = False                 # Opt-in hardening of path/value
    log_level: str = "INFO"

    def resolve_path(self, name: str) -> str:
        """Path-resolution table lookup. Unknown names resolve to the bare name."""
        if name == "augtool" and os.environ.get(TOOL_ENV_OVERRIDE):
            return os.environ[TOOL_ENV_OVERRIDE]
        return self.paths.get(name, name)


def _read_yaml(path: Union[str, Path], what: str) -> Any:
    resolved = Path(path).expanduser().resolve()
    try:
        with open(resolved, 'r', encoding='utf-8') as f:
            return YAML(typ='safe').load(f)
    except (FileNotFoundError, IsADirectoryError, YAMLError) as e:
        logger.error(f"Critical Failure: Unable to load {what} from {resolved}")
        raise RuntimeError(f"Failed to load {what}: {str(e)}")


def load_config(path: Optional[Union[str, Path]] = None) -> AugcuroConfig:
    """
    Builds an AugcuroConfig from an optional YAML file.
    Unknown keys are ignored with a warning; paths are merged over the defaults.
    """
    config = AugcuroConfig()
    if path is None:
        return config

    data = _read_yaml(path, "config") or {}
    if not isinstance(data, dict):
        raise RuntimeError(f"Failed to load config: top level of {path} must be a mapping")

    known = {f.name for f in fields(AugcuroConfig)}
    for key, value in data.items():
        if key not in known:
            logger.warning(f"Ignoring unknown config key '{key}' in {path}")
            continue
        if key == "paths":
            if not isinstance(value, dict):
                raise RuntimeError("Failed to load config: 'paths' must be a mapping")
            config.paths.update({str(k): str(v) for k, v in value.items()})
        elif key == "quote_arguments":
            if not isinstance(value, bool):
                raise RuntimeError("Failed to load config: 'quote_arguments' must be true or false")
            config.quote_arguments = value
        else:
            setattr(config, key, str(value))

    return config


def load_requests(path: Union[str, Path]) -> List[ActionRequest]:
    """
    Reads a batch file of the form:

        actions:
          - path: /files/etc/hosts/1/ipaddr
            value: 192.168.1.5
            lens: Hosts
            file: /etc/hosts
    """
    data = _read_yaml(path, "actions") or {}
    actions = data.get("actions") if isinstance(data, dict) else None
    if not isinstance(actions, list):
        raise RuntimeError(f"Failed to load actions: {path} has no 'actions' list")

    requests = []
    for index, entry in enumerate(actions):
        if not isinstance(entry, dict) or "path" not in entry or "value" not in entry:
            raise RuntimeError(f"Failed to load actions: entry {index} needs 'path' and 'value'")
        try:
            requests.append(ActionRequest(
                path=str(entry["path"]),
                value=str(entry["value"]),
                lens=str(entry.get("lens") or ""),
                file=str(entry.get("file") or ""),
            ))
        except ValueError as e:
            raise RuntimeError(f"Failed to load actions: entry {index}: {str(e)}")
    return requests

# -*- coding: utf-8 -*-
"""
CLI configuration: a YAML mapping merged under the command-line flags.

Lookup order when no --config is given: ./configs/default.yaml, then the
configs/ directory of a source checkout. A missing file means no config; an
unreadable one is reported on stderr and ignored.
"""

from __future__ import annotations

import sys
from pathlib import Path
from typing import Any, Dict, Optional

import yaml

DEFAULTS: Dict[str, Any] = {
    "output_format": "xml",
    "output_dir": None,
    "overwrite": False,
    "timeout": 30,
    "quiet": False,
    "allow_remote_contexts": False,
    "environment": {},
}

OUTPUT_FORMATS = ("xml", "json")

DEFAULT_CONFIG_PATHS = (
    Path("configs") / "default.yaml",
    Path(__file__).resolve().parents[2] / "configs" / "default.yaml",
)


def _warn(msg: str) -> None:
    sys.stderr.write(f"[cli] WARN: {msg}\n")


def load_config(path: Optional[Path] = None) -> Dict[str, Any]:
    """Read a config file. Returns {} if there is none or it cannot be used."""
    if path is None:
        path = next((p for p in DEFAULT_CONFIG_PATHS if p.exists()), None)
        if path is None:
            return {}
    try:
        data = yaml.safe_load(Path(path).read_text(encoding="utf-8"))
    except (OSError, yaml.YAMLError) as e:
        _warn(f"cannot read config {path}: {e}")
        return {}
    if data is None:
        return {}
    if not isinstance(data, dict):
        _warn(f"config {path} is not a mapping, ignored")
        return {}

    fmt = data.get("output_format")
    if fmt is not None and str(fmt).lower() not in OUTPUT_FORMATS:
        _warn(f"config {path}: unknown output_format {fmt!r}, using {DEFAULTS['output_format']}")
        data.pop("output_format")
    timeout = data.get("timeout")
    if timeout is not None:
        try:
            if isinstance(timeout, bool) or int(timeout) <= 0:
                raise ValueError(timeout)
            data["timeout"] = int(timeout)
        except (TypeError, ValueError):
            _warn(f"config {path}: timeout must be a positive integer, using {DEFAULTS['timeout']}")
            data.pop("timeout")
    env =data.get("environment")
    if env is not None and not isinstance(env, dict):
        _warn(f"config {path}: environment must be a mapping, ignored")
        data.pop("environment")
    return data


def resolve_options(cfg: Dict[str, Any], **cli: Any) -> Dict[str, Any]:
    """Defaults < config file < CLI flags (flags left as None do not override)."""
    merged = dict(DEFAULTS)
    merged.update({k: v for k, v in cfg.items() if v is not None})
    merged.update({k: v for k, v in cli.items() if v is not None})
    merged["output_format"] = str(merged["output_format"]).lower()
    return merged

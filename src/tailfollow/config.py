from __future__ import annotations
from dataclasses import dataclass, fields
from typing import Any, Mapping, Optional
import codecs

import yaml

from .errors import ArgumentError


@dataclass
class FollowConfig:
    persistent: bool = True
    start_offset: Optional[int] = None  # None: start at current end of file

    poll_interval: float = 0.2
    chunk_size: int = 64 * 1024
    encoding: str = "utf-8"
    errors: str = "replace"

    reset_success_on_rotation: bool = False
    detect_truncation: bool = False


_BOOL_FIELDS = ("persistent", "reset_success_on_rotation", "detect_truncation")
_KNOWN = {f.name for f in fields(FollowConfig)}


def _validate(cfg: FollowConfig) -> FollowConfig:
    for name in _BOOL_FIELDS:
        if not isinstance(getattr(cfg, name), bool):
            raise ArgumentError(f"'{name}' must be a boolean, got {getattr(cfg, name)!r}")

    so = cfg.start_offset
    if so is not None and (isinstance(so, bool) or not isinstance(so, int) or so < 0):
        raise ArgumentError(f"'start_offset' must be a non-negative integer, got {so!r}")

    pi = cfg.poll_interval
    if isinstance(pi, bool) or not isinstance(pi, (int, float)) or pi <= 0:
        raise ArgumentError(f"'poll_interval' must be a positive number, got {pi!r}")

    cs = cfg.chunk_size
    if isinstance(cs, bool) or not isinstance(cs, int) or cs <= 0:
        raise ArgumentError(f"'chunk_size' must be a positive integer, got {cs!r}")

    try:
        codecs.lookup(cfg.encoding)
        codecs.lookup_error(cfg.errors)
        newline = "\r\n".encode(cfg.encoding)
    except (LookupError, TypeError, ValueError) as e:
        raise ArgumentError(f"Invalid decoding options: {e}")

    # lines are split on raw b"\n" / b"\r\n" before decoding
    if newline != b"\r\n":
        raise ArgumentError(
            f"Encoding {cfg.encoding!r} is not ASCII-compatible; "
            f"newlines must encode as single bytes"
        )

    return cfg


def coerce_config(config: Any) -> FollowConfig:
    """Accept None, a FollowConfig, or a mapping of FollowConfig fields."""
    if config is None:
        return FollowConfig()
    if isinstance(config, FollowConfig):
        return _validate(config)
    if not isinstance(config, Mapping):
        raise ArgumentError(f"config must be a mapping, got {type(config).__name__}")

    unknown = sorted(set(config) - _KNOWN)
    if unknown:
        raise ArgumentError(f"Unknown config option(s): {', '.join(map(str, unknown))}")

    return _validate(FollowConfig(**config))


def load_config(path: str) -> FollowConfig:
    try:
        with open(path, "r", encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except FileNotFoundError:
        raise FileNotFoundError(
            f"Configuration file not found: {path}\n"
            f"Please ensure the file exists or specify a different config with --config"
        )
    except yaml.YAMLError as e:
        raise ValueError(f"Invalid YAML in configuration file {path}: {e}")

    if not isinstance(data, dict):
        raise ValueError(f"Configuration file {path} must contain a mapping")

    # Options may live at the top level or under a `follow:` section
    if "follow" in data:
        section = data["follow"] or {}
    else:
        section = {k: v for k, v in data.items() if k != "version"}
    if not isinstance(section, dict):
        raise ValueError(f"'follow' section in {path} must be a mapping")

    return coerce_config(section)

"""Typed configuration schema and loader for the dviwriter package."""

from __future__ import annotations

import os
from collections.abc import Mapping
from importlib import resources as importlib_resources
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, ConfigDict, conint, constr

# ---------------------------------------------------------------------------
# Pydantic models
# ---------------------------------------------------------------------------

_INT32_MAX = 2**31 - 1


class UnitSettings(BaseModel):
    """Numerator, denominator and magnification recorded in the preamble."""

    num: conint(gt=0, le=_INT32_MAX)
    den: conint(gt=0, le=_INT32_MAX)
    mag: conint(gt=0, le=_INT32_MAX)

    model_config = ConfigDict(extra="forbid")


class PreambleSettings(BaseModel):
    """Generator comment settings."""

    comment_prefix: str
    comment_env: str
    comment: constr(max_length=255) | None = None

    model_config = ConfigDict(extra="forbid")


class PostambleSettings(BaseModel):
    """Summary values and trailer padding written by the postamble."""

    max_height_depth: conint(ge=0, le=_INT32_MAX)
    max_width: conint(ge=0, le=_INT32_MAX)
    pad_to_word: bool

    model_config = ConfigDict(extra="forbid")


class ConfigModel(BaseModel):
    """Top-level configuration model."""

    schema_version: conint(ge=1)
    units: UnitSettings
    preamble: PreambleSettings
    postamble: PostambleSettings

    model_config = ConfigDict(extra="forbid")


# ---------------------------------------------------------------------------
# Loader utilities
# ---------------------------------------------------------------------------


def deep_merge_dicts(a: dict[str, Any], b: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge mapping ``b`` onto ``a`` returning a new dict."""

    result: dict[str, Any] = dict(a)
    for key, b_val in b.items():
        if key in result and isinstance(result[key], dict) and isinstance(b_val, dict):
            result[key] = deep_merge_dicts(result[key], b_val)
        else:
            result[key] = b_val
    return result


def load_config(
    path: str | os.PathLike[str] | None = None,
    *,
    env: Mapping[str, str] | None = None,
) -> ConfigModel:
    """Load configuration from defaults and optional user overrides.

    Precedence of sources: package ``defaults.yml`` < user-provided YAML <
    environment variable named by ``preamble.comment_env``.
    """

    with (
        importlib_resources.files("dviwriter.config")
        .joinpath("defaults.yml")
        .open("r", encoding="utf-8") as f
    ):
        defaults = yaml.safe_load(f) or {}

    if path is not None:
        with Path(path).open("r", encoding="utf-8") as f:
            overrides = yaml.safe_load(f) or {}
        merged = deep_merge_dicts(defaults, overrides)
    else:
        merged = defaults

    cfg = ConfigModel.model_validate(merged)

    environ = env if env is not None else os.environ
    comment_env = cfg.preamble.comment_env
    if comment_env in environ:
        cfg.preamble.comment = environ[comment_env]

    return cfg


__all__ = [
    "ConfigModel",
    "UnitSettings",
    "PreambleSettings",
    "PostambleSettings",
    "deep_merge_dicts",
    "load_config",
]

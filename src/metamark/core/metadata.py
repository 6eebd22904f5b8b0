"""Frontmatter resolution: YAML first, TOML fallback, converted to MetaValue trees"""

import datetime
import tomllib
from typing import Any

import yaml

from metamark.core.errors import MetadataError
from metamark.core.models import Metadata, MetaValue
from metamark.core.utils.logger import get_logger


logger = get_logger(__name__)

MAX_EXACT_INT = 2 ** 53
MAX_NESTING = 64


class _NotAMapping(Exception):
    pass


def _load_yaml(text: str) -> dict:
    data = yaml.safe_load(text)
    if data is None:
        return {}
    if not isinstance(data, dict):
        raise _NotAMapping(f"expected a mapping, got {type(data).__name__}")
    return data


def _lossy(reason: str, strict: bool) -> str:
    """Apply the permissive fallback: '' with a warning, or MetadataError when strict."""
    if strict:
        raise MetadataError(f"Unsupported metadata value: {reason}")
    logger.warning("Lossy metadata conversion (%s); using empty string", reason)
    return ""


def _convert_key(key: Any, strict: bool) -> str:
    if isinstance(key, str):
        return key
    return _lossy(f"non-string key {key!r}", strict)


def convert_value(value: Any, strict: bool = False) -> MetaValue:
    """Map a YAML/TOML value onto str, float, bool, list or dict.

    Containers are checked against the ones already open on the current path:
    a repeat (a recursive YAML alias) or nesting beyond MAX_NESTING raises
    MetadataError.
    """
    return _convert(value, strict, ())


def _convert(value: Any, strict: bool, path: tuple[int, ...]) -> MetaValue:
    if isinstance(value, bool):
        return value
    if isinstance(value, int):
        if abs(value) > MAX_EXACT_INT:
            if strict:
                raise MetadataError(f"Integer {value} cannot be stored exactly as a number")
            logger.warning("Integer %d widened with precision loss", value)
        return float(value)
    if isinstance(value, float):
        return value
    if isinstance(value, str):
        return value
    if isinstance(value, (datetime.date, datetime.time)):
        return value.isoformat()
    if isinstance(value, (list, tuple, dict)):
        if id(value) in path:
            raise MetadataError("Cyclic metadata value")
        if len(path) >= MAX_NESTING:
            raise MetadataError(f"Metadata nesting exceeds {MAX_NESTING} levels")
        path = path + (id(value),)
        if isinstance(value, dict):
            return {_convert_key(k, strict): _convert(v, strict, path) for k, v in value.items()}
        return [_convert(v, strict, path) for v in value]
    return _lossy(f"{type(value).__name__} value", strict)


def _load(text: str) -> tuple[dict, str]:
    """Return (raw mapping, source format), trying YAML before TOML."""
    try:
        return _load_yaml(text), "yaml"
    except (yaml.YAMLError, _NotAMapping) as yaml_err:
        logger.debug("Frontmatter is not YAML (%s); trying TOML", yaml_err)
    try:
        return tomllib.loads(text), "toml"
    except tomllib.TOMLDecodeError as e:
        raise MetadataError(f"Failed to parse metadata as YAML or TOML: {e}") from e


def resolve_metadata(text: str, strict: bool = False) -> Metadata:
    """Resolve the text between frontmatter delimiters into Metadata.

    YAML is tried first and wins whenever it yields a mapping; TOML is only
    consulted when YAML fails. If both fail the TOML diagnostic is reported.
    """
    try:
        raw, source = _load(text)
    except RecursionError as e:
        raise MetadataError("Metadata is nested too deeply to read") from e

    data = convert_value(raw, strict)
    logger.debug("Resolved %d metadata key(s) from %s", len(data), source)
    return Metadata(data=data)

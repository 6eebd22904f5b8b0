"""Application configuration: settings schema and config.yaml loader"""

import os
from pathlib import Path
from typing import Any

import yaml
from pydantic import BaseModel, Field


CONFIG_FILE = "config.yaml"
ENV_PREFIX = "METAMARK_"


class Settings(BaseModel):
    app_name:        str  = "metamark"
    max_depth:       int  = Field(default=64, ge=1, le=200, description="Max component/list nesting before a parse error")
    strict_metadata: bool = Field(default=False, description="Reject lossy frontmatter values instead of using ''")
    output_dir:      str  = Field(default="dist", description="Directory for exported files")
    output_format:   str  = Field(default="json", pattern="^(json|mmk)$", description="json or mmk")
    json_indent:     int  = Field(default=2, ge=0, description="JSON indent; 0 = compact")
    log_level:       str  = Field(default="WARNING", pattern="^(DEBUG|INFO|WARNING|ERROR|CRITICAL)$")


def load_config(overrides: dict[str, Any] = None) -> Settings:
    """Load Settings from config.yaml, then METAMARK_<FIELD> env vars, then non-None CLI overrides."""
    data: dict[str, Any] = {}
    if Path(CONFIG_FILE).exists():
        try:
            data = yaml.safe_load(Path(CONFIG_FILE).read_text()) or {}
        except yaml.YAMLError as e:
            raise ValueError(f"Invalid {CONFIG_FILE}: {e}") from e
        if not isinstance(data, dict):
            raise ValueError(f"Invalid {CONFIG_FILE}: expected a mapping, got {type(data).__name__}")

    for name in Settings.model_fields:
        if val := os.getenv(f"{ENV_PREFIX}{name.upper()}"):
            data[name] = val

    if overrides:
        data.update({k: v for k, v in overrides.items() if v is not None})
    return Settings(**data)

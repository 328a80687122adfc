"""Application configuration: settings schema, config.toml loader and sample writer"""

import os
import tomllib
from pathlib import Path
from typing import Any, Optional

from pydantic import BaseModel, Field, ValidationError

from supamarker.errors import ConfigError


CONFIG_FILE = "config.toml"

# Environment variables fill whatever the config file leaves unset
ENV_VARS = {
    "supabase_url":         "SUPABASE_URL",
    "supabase_service_key": "SUPABASE_SERVICE_KEY",
    "bucket":               "SUPABASE_BUCKET",
    "table":                "SUPABASE_TABLE",
}

SAMPLE_CONFIG = '''\
supabase_url = "https://xxxxx.supabase.co"
supabase_service_key = "service_role_key"
bucket = "blog"
table = "posts"
'''


class Settings(BaseModel):
    supabase_url:         str = Field(min_length=1, description="Project URL, e.g. https://xxxxx.supabase.co")
    supabase_service_key: str = Field(min_length=1, description="Service role key")
    bucket:               str = Field(default="blog",  min_length=1, description="Storage bucket for markdown files")
    table:                str = Field(default="posts", min_length=1, description="Table holding post metadata")


def _read_file(path: Path) -> dict[str, Any]:
    try:
        return tomllib.loads(path.read_text(encoding="utf-8"))
    except tomllib.TOMLDecodeError as e:
        raise ConfigError(f"Invalid {path}: {e}") from e


def load_config(path: Optional[Path] = None) -> Settings:
    """Load Settings from the TOML file (explicit path or ./config.toml), then env vars for missing keys."""
    data: dict[str, Any] = {}
    if path is not None:
        if not path.is_file():
            raise ConfigError(f"Config file not found: {path}")
        data = _read_file(path)
    elif Path(CONFIG_FILE).is_file():
        data = _read_file(Path(CONFIG_FILE))

    for name, env in ENV_VARS.items():
        if not data.get(name) and (val := os.getenv(env)):
            data[name] = val

    if not data.get("supabase_url") or not data.get("supabase_service_key"):
        raise ConfigError(
            "Missing Supabase credentials: set supabase_url and supabase_service_key "
            "in the config file or SUPABASE_URL and SUPABASE_SERVICE_KEY in the environment"
        )
    try:
        return Settings(**data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e


def gen_config(path: Path = Path(CONFIG_FILE)) -> Path:
    """Write SAMPLE_CONFIG to path; refuses to overwrite an existing file."""
    if path.exists():
        raise ConfigError(f"Config already exists: {path}")
    path.parent.mkdir(parents=True, exist_ok=True)
    path.write_text(SAMPLE_CONFIG, encoding="utf-8")
    return path

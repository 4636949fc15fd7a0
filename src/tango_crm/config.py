"""Runtime settings loaded from YAML and TANGO_CRM_* environment variables."""

import os
from pathlib import Path
from typing import Literal, Optional

import yaml
from pydantic import BaseModel, Field

ENV_PREFIX = "TANGO_CRM_"


class Settings(BaseModel):
    """Store selection and defaults applied by the opportunity and growth services."""

    db_path: Path = Field(default=Path("tango_crm.db"), description="SQLite database file")
    store_backend: Literal["sqlite", "rest"] = "sqlite"
    rest_url: Optional[str] = Field(default=None, description="PostgREST / Supabase project URL")
    rest_api_key: Optional[str] = None

    default_timezone: str = Field(
        default="UTC",
        description="IANA zone used when a write does not carry the user's timezone",
    )
    reporting_timezone: str = Field(
        default="UTC",
        description="Zone in which month/quarter/year reporting windows are framed",
    )
    growth_precision: int = Field(default=2, ge=0, le=10)
    default_probability: int = Field(default=50, ge=0, le=100)
    log_level: str = "WARNING"

    @classmethod
    def from_env(cls, environ: Optional[dict] = None, **overrides) -> "Settings":
        """Build settings from TANGO_CRM_* variables; explicit overrides win."""
        data = _read_env(environ)
        data.update({k: v for k, v in overrides.items() if v is not None})
        return cls.model_validate(data)

    @classmethod
    def from_yaml(cls, path: str | Path, environ: Optional[dict] = None) -> "Settings":
        """
        Load settings from a YAML file. Supports nested (store/defaults) or flat structure.
        TANGO_CRM_* environment variables override values from the file.
        """
        data = yaml.safe_load(Path(path).read_text()) or {}
        store = data.get("store", {})
        defaults = data.get("defaults", {})

        def _get(key: str, nested: dict, top: dict, default=None):
            return nested.get(key, top.get(key, default))

        flat: dict = {}
        flat["db_path"] = _get("db_path", store, data)
        flat["store_backend"] = _get("backend", store, data) or _get("store_backend", store, data)
        flat["rest_url"] = _get("rest_url", store, data)
        flat["rest_api_key"] = _get("rest_api_key", store, data)
        flat["default_timezone"] = _get("default_timezone", defaults, data)
        flat["reporting_timezone"] = _get("reporting_timezone", defaults, data)
        flat["growth_precision"] = _get("growth_precision", defaults, data)
        flat["default_probability"] = _get("default_probability", defaults, data)
        flat["log_level"] = _get("log_level", defaults, data)
        merged = {k: v for k, v in flat.items() if v is not None}
        merged.update(_read_env(environ))
        return cls.model_validate(merged)


def _read_env(environ: Optional[dict]) -> dict:
    env = os.environ if environ is None else environ
    data: dict = {}
    for name in Settings.model_fields:
        value = env.get(f"{ENV_PREFIX}{name.upper()}")
        if value not in (None, ""):
            data[name] = value
    return data

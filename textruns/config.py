from __future__ import annotations

from pathlib import Path
from typing import Any, Dict, Literal, Optional

import yaml
from pydantic import BaseModel, ConfigDict, Field, model_validator

_RESOLVED_FIELDS = ("min_length", "max_length")


class ScanConfig(BaseModel):
    """
    Resolved options for one scan session.

    Resolution happens at construction, so every instance already satisfies:
    - min_length == len(search) when a search term is set
    - max_length >= min_length

    The lengths as given (before resolution) are kept in `requested` so that
    overrides can be re-resolved from what the user actually asked for.
    """

    model_config = ConfigDict(frozen=True)

    min_length: int = 6  # <= 0 emits every run, empty ones included
    max_length: int = Field(256, ge=1)
    ascii_only: bool = False
    search: str = ""
    match_limit: int = 1  # <= 0 disables the limit
    show_offset: bool = True

    # "source" resets the match counter per input, "global" counts across the run.
    # Reaching the limit halts everything in both cases.
    limit_scope: Literal["source", "global"] = "source"
    stop_on_malformed: bool = False
    chunk_size: int = Field(64 * 1024, ge=1)

    requested: Dict[str, Any] = Field(default_factory=dict, exclude=True, repr=False)

    @model_validator(mode="before")
    @classmethod
    def _resolve_lengths(cls, data: Any) -> Any:
        if not isinstance(data, dict):
            return data
        data = dict(data)
        data["requested"] = {k: data[k] for k in _RESOLVED_FIELDS if k in data}
        search = data.get("search") or ""
        if search:
            data["min_length"] = len(search)
        min_len = data.get("min_length", 6)
        max_len = data.get("max_length", 256)
        if isinstance(min_len, int) and isinstance(max_len, int) and max_len < min_len:
            data["max_length"] = min_len
        return data

    def unresolved(self) -> Dict[str, Any]:
        """Field values with min/max lengths as originally given."""
        data = self.model_dump(exclude=set(_RESOLVED_FIELDS))
        data.update(self.requested)
        return data


class OutputCfg(BaseModel):
    format: Literal["text", "jsonl"] = "text"
    summary: bool = False


class AppConfig(BaseModel):
    schema_version: str = "1.0"
    scan: ScanConfig = ScanConfig()
    output: OutputCfg = OutputCfg()


def load_config(path: Optional[str]) -> AppConfig:
    if not path:
        return AppConfig()
    data = yaml.safe_load(Path(path).read_text(encoding="utf-8")) or {}
    return AppConfig.model_validate(data)


def apply_overrides(cfg: AppConfig, **overrides: Any) -> AppConfig:
    """
    Returns a new AppConfig with CLI overrides applied on top of `cfg`.

    Overrides set to None are treated as "not given". Keys are ScanConfig
    field names, plus `format` and `summary` for the output section.
    """
    scan_data = cfg.scan.unresolved()
    out_data = cfg.output.model_dump()

    for key, value in overrides.items():
        if value is None:
            continue
        if key in OutputCfg.model_fields:
            out_data[key] = value
        elif key in ScanConfig.model_fields:
            scan_data[key] = value
        else:
            raise KeyError(f"Unknown config override: {key}")

    return AppConfig(
        schema_version=cfg.schema_version,
        scan=ScanConfig.model_validate(scan_data),
        output=OutputCfg.model_validate(out_data),
    )


def config_to_snapshot(cfg: AppConfig) -> Dict[str, Any]:
    return cfg.model_dump()

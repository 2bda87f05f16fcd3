from __future__ import annotations

import json
from pathlib import Path
from typing import Any, Dict, Mapping, Optional

from .model import PipelineOptions


class ConfigError(RuntimeError):
    pass


_KEYS = {
    "append": str,
    "out_dir": str,
    "terms": list,
    "normalize": bool,
    "stdout": bool,
}


class ConfigLoader:
    def load(self, config_path: str | Path) -> Dict[str, Any]:
        path = Path(config_path)
        try:
            data = json.loads(path.read_text(encoding="utf-8"))
        except OSError as e:
            raise ConfigError(f"Cannot read config <{path}>: {e}") from e
        except json.JSONDecodeError as e:
            raise ConfigError(f"Cannot parse config JSON <{path}>: {e}") from e

        if not isinstance(data, dict):
            raise ConfigError("config root must be a JSON object")

        for key, value in data.items():
            if key not in _KEYS:
                raise ConfigError(f"unknown config key: {key}")
            if not isinstance(value, _KEYS[key]):
                raise ConfigError(f"config key {key} must be of type {_KEYS[key].__name__}")
        if "terms" in data and not all(isinstance(t, str) for t in data["terms"]):
            raise ConfigError("config key terms must be a list of strings")
        return data

    def resolve(
        self,
        file_values: Mapping[str, Any],
        overrides: Mapping[str, Any],
        default_append: str,
    ) -> PipelineOptions:
        # command line wins over the file; None means "not given"
        merged: Dict[str, Any] = dict(file_values)
        for key, value in overrides.items():
            if value is None:
                continue
            if key == "terms":
                merged["terms"] = list(merged.get("terms", [])) + list(value)
            elif isinstance(value, bool) and not value and key in merged:
                continue
            else:
                merged[key] = value

        out_dir: Optional[Path] = Path(merged["out_dir"]) if merged.get("out_dir") else None
        return PipelineOptions(
            append=merged.get("append", default_append),
            out_dir=out_dir,
            terms=tuple(merged.get("terms", ())),
            normalize=bool(merged.get("normalize", False)),
            stdout=bool(merged.get("stdout", False)),
        )

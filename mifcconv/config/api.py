from __future__ import annotations

from pathlib import Path
from typing import Any, Mapping, Optional

from .config import ConfigError, ConfigLoader
from .model import PipelineOptions

__all__ = ["ConfigError", "PipelineOptions", "load_options"]


def load_options(
    config_path: Optional[str | Path] = None,
    overrides: Optional[Mapping[str, Any]] = None,
    default_append: str = "mifc",
) -> PipelineOptions:
    """Public API (Config)

    Contract:
    - Optional JSON file with keys append, out_dir, terms, normalize, stdout.
    - Unknown keys or wrong types -> ConfigError.
    - overrides (command line) win; None values and unset flags fall back to the file.
    - terms from file and command line are concatenated.
    """
    loader = ConfigLoader()
    file_values = loader.load(config_path) if config_path else {}
    return loader.resolve(file_values, overrides or {}, default_append)

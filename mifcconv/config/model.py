from __future__ import annotations

from dataclasses import dataclass
from pathlib import Path
from typing import Optional, Tuple


@dataclass(frozen=True)
class PipelineOptions:
    append: str = "mifc"
    out_dir: Optional[Path] = None
    terms: Tuple[str, ...] = ()
    normalize: bool = False
    stdout: bool = False

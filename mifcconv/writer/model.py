from dataclasses import dataclass
from typing import Optional


@dataclass(frozen=True)
class WriteResult:
    output_path: Optional[str]  # None when writing to stdout
    rows_written: int

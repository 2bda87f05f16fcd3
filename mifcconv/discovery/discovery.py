from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import FrozenSet, Iterable, Iterator

logger = logging.getLogger(__name__)

CSV_EXTENSIONS: FrozenSet[str] = frozenset({".csv"})
WORKBOOK_EXTENSIONS: FrozenSet[str] = frozenset({".xlsx", ".xlsm", ".csv"})


class DiscoveryError(RuntimeError):
    pass


class Discovery:
    def __init__(self, extensions: Iterable[str]) -> None:
        self.extensions = frozenset(e.lower() for e in extensions)

    def iter_paths(self, inputs: Iterable[str | Path]) -> Iterator[Path]:
        for entry in inputs:
            p = Path(entry)
            if p.is_dir():
                yield from self._walk(p)
            elif p.exists():
                if self._accept(p):
                    yield p
                else:
                    logger.info("ignoring <%s>: unsupported file type", p)
            else:
                logger.warning("input <%s> does not exist; skipping", p)

    def _walk(self, root: Path) -> Iterator[Path]:
        for dirpath, dirnames, filenames in os.walk(root):
            # sorted in place so the walk order is stable
            dirnames.sort()
            for name in sorted(filenames):
                p = Path(dirpath) / name
                if self._accept(p):
                    yield p

    def _accept(self, p: Path) -> bool:
        if p.suffix.lower() not in self.extensions:
            return False
        # Excel lock files ("~$book.xlsx")
        return not p.stem.startswith("~")

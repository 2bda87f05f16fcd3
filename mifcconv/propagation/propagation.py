from __future__ import annotations

import dataclasses
import logging
from typing import Dict, Iterator, List, Tuple

from mifcconv.mifc.api import CanonicalRecord
from .model import GroupState

logger = logging.getLogger(__name__)

EMPTY = "EMPTY"
ACCUMULATING = "ACCUMULATING"
DRAINING = "DRAINING"
DONE = "DONE"


class PropagationError(RuntimeError):
    pass


class GroupPropagationBuffer:
    """Per-file accumulator for shared-resource rows.

    Standard rows only leave their chip id behind. Propagating records wait
    here until `drain()`, which copies each of them onto every chip of its
    group. Propagation points (group, target) are replayed in the order
    their first record arrived. One buffer serves exactly one input file.
    """

    def __init__(self) -> None:
        self.state = EMPTY
        self._groups: Dict[str, GroupState] = {}
        # insertion-ordered set of (group, target)
        self._points: Dict[Tuple[str, str], None] = {}

    def register_chip(self, group: str, chip_id: str) -> None:
        self._group(group).chips.add(chip_id)

    def store(self, group: str, target: str, record: CanonicalRecord) -> None:
        self._group(group).pending.setdefault(target, []).append(record)
        self._points.setdefault((group, target), None)

    def chips(self, group: str) -> List[str]:
        g = self._groups.get(group)
        return g.sorted_chips() if g else []

    def pending_count(self) -> int:
        return sum(len(recs) for g in self._groups.values() for recs in g.pending.values())

    def drain(self) -> Iterator[CanonicalRecord]:
        if self.state in (DRAINING, DONE):
            raise PropagationError(f"buffer already {self.state.lower()}")
        self.state = DRAINING

        for group, target in self._points:
            info = self._groups[group]
            records = info.pending.pop(target)
            chips = info.sorted_chips()
            if not chips:
                logger.debug("group %r has %r rows but no chips; nothing to replicate", group, target)
                continue
            logger.debug("replicating %d %r record(s) onto %d chip(s) of group %r",
                         len(records), target, len(chips), group)
            for record in records:
                for chip_id in chips:
                    yield dataclasses.replace(record, chip_id=chip_id)

        self._points.clear()
        self._groups.clear()
        self.state = DONE

    def _group(self, group: str) -> GroupState:
        if self.state in (DRAINING, DONE):
            raise PropagationError(f"cannot accept rows while {self.state.lower()}")
        self.state = ACCUMULATING
        g = self._groups.get(group)
        if g is None:
            g = self._groups[group] = GroupState()
        return g

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Dict, List, Set

from mifcconv.mifc.api import CanonicalRecord


@dataclass
class GroupState:
    chips: Set[str] = field(default_factory=set)
    # target name -> records in arrival order
    pending: Dict[str, List[CanonicalRecord]] = field(default_factory=dict)

    def sorted_chips(self) -> List[str]:
        return sorted(self.chips)

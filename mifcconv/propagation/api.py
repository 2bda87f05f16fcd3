from __future__ import annotations

from .model import GroupState
from .propagation import (
    ACCUMULATING,
    DONE,
    DRAINING,
    EMPTY,
    GroupPropagationBuffer,
    PropagationError,
)

__all__ = [
    "ACCUMULATING",
    "DONE",
    "DRAINING",
    "EMPTY",
    "GroupPropagationBuffer",
    "GroupState",
    "PropagationError",
    "new_buffer",
]


def new_buffer() -> GroupPropagationBuffer:
    """Public API (GroupPropagationBuffer)

    Contract:
    - One buffer per input file, never shared.
    - register_chip(group, chip) is idempotent; store(group, target, record) appends.
    - drain() yields, per propagation point (group, target) in the order its first
      record arrived, every stored record once per registered chip of the group
      (chips ascending), with only chip_id rewritten.
    - Groups without chips yield nothing.
    """
    return GroupPropagationBuffer()

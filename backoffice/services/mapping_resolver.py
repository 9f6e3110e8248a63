"""
Mapping set resolution.

Pure set arithmetic over (item_id, section_id) pairs; no database access.
Orders follow the input sequences so that positions handed out for new
mappings are deterministic.
"""

from dataclasses import dataclass, field
from typing import Iterable, List, Sequence, Tuple

Pair = Tuple[int, int]  # (item_id, section_id)


@dataclass
class MappingDelta:
    to_add: List[Pair] = field(default_factory=list)
    to_remove: List[Pair] = field(default_factory=list)
    unchanged: List[Pair] = field(default_factory=list)

    @property
    def is_empty(self) -> bool:
        return not self.to_add and not self.to_remove


def _dedupe(pairs: Iterable[Pair]) -> List[Pair]:
    seen = set()
    result = []
    for pair in pairs:
        if pair not in seen:
            seen.add(pair)
            result.append(pair)
    return result


def cross_pairs(item_ids: Sequence[int], section_ids: Sequence[int]) -> List[Pair]:
    """Item-major cross product of the two id lists, duplicates removed."""
    return _dedupe((item_id, section_id) for item_id in item_ids for section_id in section_ids)


def resolve_mappings(desired: Iterable[Pair], current: Iterable[Pair]) -> MappingDelta:
    """
    Split desired vs persisted pairs into additions, removals and unchanged.

    - to_add: desired pairs not yet persisted (desired order)
    - to_remove: persisted pairs no longer desired (current order)
    - unchanged: pairs in both (desired order)
    """
    desired = _dedupe(desired)
    current = _dedupe(current)
    desired_set = set(desired)
    current_set = set(current)

    return MappingDelta(
        to_add=[pair for pair in desired if pair not in current_set],
        to_remove=[pair for pair in current if pair not in desired_set],
        unchanged=[pair for pair in desired if pair in current_set],
    )


def split_existing(requested: Iterable[Pair], current: Iterable[Pair]) -> MappingDelta:
    """
    Additive variant used by publish: nothing is ever removed.

    Requested pairs already persisted land in unchanged, the rest in to_add.
    """
    delta = resolve_mappings(requested, current)
    delta.to_remove = []
    return delta


def select_existing(requested: Iterable[Pair], current: Iterable[Pair]) -> MappingDelta:
    """
    Subtractive variant used by unpublish.

    Requested pairs that are persisted land in to_remove (requested order);
    requested pairs that were never published are ignored.
    """
    current_set = set(current)
    return MappingDelta(to_remove=[pair for pair in _dedupe(requested) if pair in current_set])

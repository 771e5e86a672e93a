"""
Cycle detection for recursive equality checks.
"""

from typing import TYPE_CHECKING, NamedTuple


if TYPE_CHECKING:
    from typing import Any, Dict, Tuple


class VisitedKey(NamedTuple):
    low_id: int
    high_id: int
    value_type: type

    @classmethod
    def of(cls, a: 'Any', b: 'Any') -> 'VisitedKey':
        # Sort the ids so (a, b) and (b, a) collapse to one entry
        id_a, id_b = id(a), id(b)
        if id_a > id_b:
            id_a, id_b = id_b, id_a
        return cls(id_a, id_b, type(a))


class VisitedSet:
    """Pairs of objects that have already been descended into during a single top-level comparison

    A pair that has been seen once is considered equal on every later visit for the rest of that comparison. This is
    what guarantees termination on self-referential objects, it is not a re-check of the pair.

    Both objects of every pair are kept alive until this set is discarded. Otherwise, temporaries (eg: numpy row views)
    could be freed mid-comparison and their id() reused by unrelated objects.
    """

    def __init__(self):
        self._pairs: 'Dict[VisitedKey, Tuple[Any, Any]]' = {}

    def seen_or_add(self, a: 'Any', b: 'Any') -> 'bool':
        """Returns True if (a, b) was already visited, otherwise records it and returns False"""
        key = VisitedKey.of(a, b)
        if key in self._pairs:
            return True
        self._pairs[key] = (a, b)
        return False

    def __contains__(self, pair: 'Tuple[Any, Any]') -> 'bool':
        return VisitedKey.of(*pair) in self._pairs

    def __len__(self) -> 'int':
        return len(self._pairs)

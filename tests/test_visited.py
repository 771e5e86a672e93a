"""
Tests for the explained_equality.visited file.
"""

import gc
import weakref
from explained_equality.visited import VisitedKey, VisitedSet


class _Obj:
    pass


def test_visited_key():
    a, b = _Obj(), _Obj()
    assert VisitedKey.of(a, b) == VisitedKey.of(b, a)
    assert VisitedKey.of(a, b).low_id == min(id(a), id(b))
    assert VisitedKey.of(a, b).value_type is _Obj
    assert VisitedKey.of(a, a) != VisitedKey.of(a, b)


def test_seen_or_add():
    a, b, c = [1], [1], [1]
    visited = VisitedSet()

    assert not visited.seen_or_add(a, b)
    assert visited.seen_or_add(a, b)
    assert visited.seen_or_add(b, a)
    assert not visited.seen_or_add(a, c)
    assert not visited.seen_or_add(a, a)

    assert len(visited) == 3
    assert (b, a) in visited
    assert (b, c) not in visited


def test_keeps_pairs_alive():
    """Visited objects can't be freed (and have their id reused) while the set is alive"""
    visited = VisitedSet()
    obj = _Obj()
    ref = weakref.ref(obj)

    visited.seen_or_add(obj, _Obj())
    del obj
    gc.collect()
    assert ref() is not None

    del visited
    gc.collect()
    assert ref() is None

"""
Tests for the explained_equality.pytypes file.
"""

import collections
import dataclasses
import decimal
import functools
import pathlib
import types
import weakref
import numpy as np
import pytest
from enum import Enum
from explained_equality.pytypes import (Kind, deref, is_nan, kind_of, record_fields, register_reference,
    register_wrapper, unwrap)


@dataclasses.dataclass
class _Record:
    b: int
    a: int = 0


_Point = collections.namedtuple('_Point', ['y', 'x'])


class _Color(Enum):
    RED = 1


class _Plain:
    def __init__(self):
        self.first = 1
        self.second = 2


class _Mixed:
    __slots__ = ('slot', '__dict__')

    def __init__(self):
        self.slot = 1
        self.extra = 2


class _Proxy:
    def __init__(self, value):
        self.value = value


_TARGET = _Plain()


@pytest.mark.parametrize('value, kind', [
    (None, Kind.ABSENT),
    (True, Kind.BOOLEAN),
    (np.bool_(False), Kind.BOOLEAN),
    (1, Kind.NUMBER),
    (1.5, Kind.NUMBER),
    (complex(1, 1), Kind.NUMBER),
    (np.float32(1), Kind.NUMBER),
    (np.uint8(1), Kind.NUMBER),
    ('a', Kind.TEXT),
    (b'a', Kind.TEXT),
    (bytearray(b'a'), Kind.TEXT),
    ((1, 2), Kind.ARRAY),
    (_Point(1, 2), Kind.RECORD),
    ([], Kind.SEQUENCE),
    (np.zeros(2), Kind.SEQUENCE),
    (collections.deque(), Kind.SEQUENCE),
    ({}, Kind.MAPPING),
    (collections.OrderedDict(), Kind.MAPPING),
    (types.MappingProxyType({}), Kind.MAPPING),
    (set(), Kind.SET),
    (frozenset(), Kind.SET),
    ({}.keys(), Kind.SET),
    (weakref.ref(_TARGET), Kind.REFERENCE),
    (collections.UserList(), Kind.DYNAMIC),
    (collections.UserDict(), Kind.DYNAMIC),
    (collections.UserString(''), Kind.DYNAMIC),
    (len, Kind.CALLABLE),
    (lambda: None, Kind.CALLABLE),
    (functools.partial(len), Kind.CALLABLE),
    ([].append, Kind.CALLABLE),
    (_TARGET.__init__, Kind.CALLABLE),
    (_Record(1), Kind.RECORD),
    (_Plain(), Kind.RECORD),
    (_Mixed(), Kind.RECORD),
    (_Record, Kind.LEAF),
    (int, Kind.LEAF),
    (_Color.RED, Kind.LEAF),
    (decimal.Decimal('1.5'), Kind.LEAF),
    (pathlib.PurePosixPath('a'), Kind.LEAF),
    (range(3), Kind.LEAF),
    (np.dtype('float64'), Kind.LEAF),
    (object(), Kind.LEAF),
])
def test_kind_of(value, kind):
    assert kind_of(value) is kind


def test_record_fields():
    """Fields come out in declaration order"""
    assert record_fields(_Record(1)) == ['b', 'a']
    assert record_fields(_Point(1, 2)) == ['y', 'x']
    assert record_fields(_Plain()) == ['first', 'second']
    assert record_fields(_Mixed()) == ['slot', 'extra']


def test_is_nan():
    assert is_nan(float('nan'))
    assert is_nan(np.float32('nan'))
    assert is_nan(complex(float('nan'), 0))
    assert is_nan(decimal.Decimal('NaN'))
    assert is_nan(decimal.Decimal('sNaN'))
    assert not is_nan(decimal.Decimal('1.5'))
    assert not is_nan(1.0)
    assert not is_nan(float('inf'))
    assert not is_nan('nan')
    assert not is_nan(None)


def test_registries():
    """Tests registering new wrappers and references"""
    with pytest.raises(TypeError):
        register_wrapper(_Proxy(1), lambda p: p.value)
    with pytest.raises(TypeError):
        register_reference(_Proxy, 'value')
    with pytest.raises(TypeError):
        unwrap(_Proxy(1))
    with pytest.raises(TypeError):
        deref([1])

    assert kind_of(_Proxy(1)) is Kind.RECORD

    register_wrapper(_Proxy, lambda p: p.value)
    assert kind_of(_Proxy(1)) is Kind.DYNAMIC
    assert unwrap(_Proxy([1])) == [1]

    # Registering again replaces the previous registration
    register_reference(_Proxy, lambda p: p.value)
    register_wrapper(_Proxy, lambda p: p.value * 2)
    assert unwrap(_Proxy(2)) == 4
    assert kind_of(_Proxy(1)) is Kind.DYNAMIC


def test_deref_builtin_references():
    def make_cell(value):
        return (lambda: value).__closure__[0]

    assert deref(weakref.ref(_TARGET)) is _TARGET
    assert deref(make_cell(_TARGET)) is _TARGET
    assert deref(types.CellType()) is None

    dead = _Plain()
    dead_ref = weakref.ref(dead)
    del dead
    assert deref(dead_ref) is None

"""
Classification of python objects into the structural kinds used by :func:`~explained_equality.equality.explain`

Kinds are checked in this order:
    - ABSENT: None
    - DYNAMIC: registered wrapper types (UserDict, UserList, UserString by default)
    - REFERENCE: registered single-target pointers (weakref.ref and cells by default)
    - BOOLEAN: bool, np.bool_
    - NUMBER: int, float, complex, np.number
    - TEXT: str, bytes, bytearray
    - LEAF: known opaque value types (type, Enum, range, Decimal, datetime, paths, ...)
    - CALLABLE: functions, lambdas, methods, builtins, functools.partial
    - RECORD: namedtuples
    - ARRAY: tuple
    - SEQUENCE: list, np.ndarray, other mutable sequences
    - MAPPING: any collections.abc.Mapping
    - SET: any collections.abc.Set
    - RECORD: dataclass instances and objects with a __dict__ or __slots__
    - LEAF: everything else
"""

import dataclasses
import datetime
import decimal
import fractions
import functools
import pathlib
import re
import types
import uuid
import weakref
import numpy as np
from collections import UserDict, UserList, UserString
from collections.abc import Mapping, MutableSequence, Set
from enum import Enum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Callable, List, Tuple


class Kind(Enum):
    ABSENT = 'absent'
    BOOLEAN = 'boolean'
    NUMBER = 'number'
    TEXT = 'text'
    ARRAY = 'array'
    SEQUENCE = 'sequence'
    RECORD = 'record'
    MAPPING = 'mapping'
    SET = 'set'
    REFERENCE = 'reference'
    DYNAMIC = 'dynamic'
    CALLABLE = 'callable'
    LEAF = 'leaf'


# Kinds compared by their rendering rather than by descending into them
LEAF_KINDS = frozenset((Kind.BOOLEAN, Kind.NUMBER, Kind.TEXT, Kind.LEAF))

# Kinds that go through the cycle detector before being descended into
ADDRESSABLE_KINDS = frozenset((Kind.ARRAY, Kind.SEQUENCE, Kind.RECORD, Kind.MAPPING, Kind.SET))

_NUMBER_TYPES = (int, float, complex, np.number)
_TEXT_TYPES = (str, bytes, bytearray)
_NAN_TYPES = (float, complex, np.floating, np.complexfloating)

# Objects that have a __dict__ or __slots__, but should still only ever be compared by value
_LEAF_TYPES = (type, Enum, range, slice, decimal.Decimal, fractions.Fraction, datetime.date, datetime.time,
    datetime.timedelta, datetime.tzinfo, pathlib.PurePath, uuid.UUID, re.Pattern, types.ModuleType, np.dtype, np.generic)

_CALLABLE_TYPES = (types.FunctionType, types.BuiltinFunctionType, types.MethodType, types.MethodWrapperType,
    functools.partial)

# Slots that never hold a field value
_IGNORED_SLOTS = ('__dict__', '__weakref__')


def _unwrap_data(wrapper: 'Any') -> 'Any':
    return wrapper.data


def _deref_cell(cell: 'Any') -> 'Any':
    try:
        return cell.cell_contents
    except ValueError:  # Empty cell
        return None


# Registries of (type, accessor) pairs, checked in registration order
_WRAPPERS: 'List[Tuple[type, Callable[[Any], Any]]]' = [
    (UserDict, _unwrap_data),
    (UserList, _unwrap_data),
    (UserString, _unwrap_data),
]
_REFERENCES: 'List[Tuple[type, Callable[[Any], Any]]]' = [
    (weakref.ref, lambda ref: ref()),
    (types.CellType, _deref_cell),
]


def register_wrapper(cls: 'type', unwrap: 'Callable[[Any], Any]') -> 'None':
    """Registers `cls` as a DYNAMIC kind: a type-erased wrapper whose concrete value is returned by `unwrap(obj)`

    Divergences found inside of the unwrapped values are reported with an '(Interface)' path segment.
    """
    _register(_WRAPPERS, cls, unwrap, 'unwrap')


def register_reference(cls: 'type', deref: 'Callable[[Any], Any]') -> 'None':
    """Registers `cls` as a REFERENCE kind: a pointer whose single target is returned by `deref(obj)`

    `deref` should return None for a reference with no target. Divergences found inside of the targets are reported
    with a '(Pointer)' path segment.
    """
    _register(_REFERENCES, cls, deref, 'deref')


def _register(registry, cls, accessor, accessor_name):
    if not isinstance(cls, type):
        raise TypeError("Can only register types, not %s" % repr(type(cls).__name__))
    if not callable(accessor):
        raise TypeError("`%s` must be callable, not %s" % (accessor_name, repr(type(accessor).__name__)))

    # Newer registrations for the same type replace older ones
    registry[:] = [(t, f) for t, f in registry if t is not cls]
    registry.insert(0, (cls, accessor))


def _lookup(registry, value):
    for cls, accessor in registry:
        if isinstance(value, cls):
            return accessor
    return None


def unwrap(value: 'Any') -> 'Any':
    """Returns the concrete value inside of a DYNAMIC wrapper"""
    accessor = _lookup(_WRAPPERS, value)
    if accessor is None:
        raise TypeError("Object of type %s is not a registered wrapper" % repr(type(value).__name__))
    return accessor(value)


def deref(value: 'Any') -> 'Any':
    """Returns the target of a REFERENCE, or None if it has none"""
    accessor = _lookup(_REFERENCES, value)
    if accessor is None:
        raise TypeError("Object of type %s is not a registered reference" % repr(type(value).__name__))
    return accessor(value)


def is_namedtuple(value: 'Any') -> 'bool':
    return isinstance(value, tuple) and isinstance(getattr(type(value), '_fields', None), tuple)


def _has_slots(value):
    return any('__slots__' in cls.__dict__ for cls in type(value).__mro__ if cls is not object)


def kind_of(value: 'Any') -> 'Kind':
    """Returns the structural :class:`Kind` of the given object"""
    if value is None:
        return Kind.ABSENT
    if _lookup(_WRAPPERS, value) is not None:
        return Kind.DYNAMIC
    if _lookup(_REFERENCES, value) is not None:
        return Kind.REFERENCE

    # Check for bool first that way bool's are never treated as int's
    if isinstance(value, (bool, np.bool_)):
        return Kind.BOOLEAN
    if isinstance(value, _NUMBER_TYPES):
        return Kind.NUMBER
    if isinstance(value, _TEXT_TYPES):
        return Kind.TEXT
    if isinstance(value, _LEAF_TYPES):
        return Kind.LEAF
    if isinstance(value, _CALLABLE_TYPES):
        return Kind.CALLABLE

    # Containers
    if is_namedtuple(value):
        return Kind.RECORD
    if isinstance(value, tuple):
        return Kind.ARRAY
    if isinstance(value, (list, np.ndarray, MutableSequence)):
        return Kind.SEQUENCE
    if isinstance(value, Mapping):
        return Kind.MAPPING
    if isinstance(value, Set):
        return Kind.SET

    # Generic objects
    if dataclasses.is_dataclass(value) or hasattr(value, '__dict__') or _has_slots(value):
        return Kind.RECORD
    return Kind.LEAF


def is_nan(value: 'Any') -> 'bool':
    """True if `value` is a float or complex (python or numpy) with a NaN component, or a NaN Decimal"""
    if isinstance(value, decimal.Decimal):
        return value.is_nan()
    return isinstance(value, _NAN_TYPES) and bool(np.isnan(value))


def record_fields(value: 'Any') -> 'List[str]':
    """Returns the field names of a RECORD in declaration order

    Dataclasses use their declared fields, namedtuples their `_fields`. Other objects use their `__slots__` (from the
    base class down) followed by their instance `__dict__` in insertion order.
    """
    if dataclasses.is_dataclass(value):
        return [f.name for f in dataclasses.fields(value)]
    if is_namedtuple(value):
        return list(type(value)._fields)

    names = []
    for cls in reversed(type(value).__mro__):
        slots = cls.__dict__.get('__slots__', ())
        if isinstance(slots, str):
            slots = (slots,)
        for slot in slots:
            if slot in _IGNORED_SLOTS:
                continue

            # Private slots are stored under their mangled name
            if slot.startswith('__') and not slot.endswith('__'):
                slot = '_%s%s' % (cls.__name__.lstrip('_'), slot)
            if slot not in names:
                names.append(slot)

    names.extend(k for k in getattr(value, '__dict__', {}) if k not in names)
    return names

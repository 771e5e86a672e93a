"""
Utils for determining equality of objects, and explaining where and why two objects are not equal

Handled kinds (see :mod:`~explained_equality.pytypes` for how objects are classified):
    - None
    - bool, int, float, np.number, complex, str, bytes, bytearray, and other opaque values (compared by repr())
    - tuple (elementwise)
    - list, numpy ndarray (dtype, length/shape, then same-storage shortcut, then elementwise)
    - dataclasses, namedtuples, and other objects with attributes (fieldwise, in declaration order)
    - dict and other mappings (length, then same-storage shortcut, then keywise over the first object's keys)
    - set, frozenset (length, then same-storage shortcut, then membership)
    - weakref.ref, cells and registered references (same target, else compare targets)
    - UserDict, UserList, UserString and registered wrappers (compare unwrapped values)
    - functions and other callables (never equal)

Mapping keys and set members only match keys/members of the exact same type, so {1} and {True} are not equal. A
NaN key or member is always a divergence, even though a hash lookup would find the very same NaN object.

Only the first difference found (depth-first, in index/declaration order) is ever reported.

NOTE: int's are compared with ==, since very large ones can not always be converted to decimal strings. Other
opaque values of the same type are equal if and only if their repr() is equal. This means two distinct objects
with an identical custom __repr__ are considered equal, while 0.0 and -0.0 are not.

NOTE: NaN (float, complex, numpy or Decimal) is never equal to anything, including another NaN or even itself.
Callables are never equal to anything, including themselves.
"""

import ast
import logging
import re
import numpy as np
from .divergence import (Divergence, EqualityCheckingError, EqualityError, absence, callables, dtype_mismatch,
    key_missing, length_mismatch, nan, type_mismatch, value_mismatch, wrapped_absence)
from .pytypes import (ADDRESSABLE_KINDS, LEAF_KINDS, Kind, deref, is_nan, kind_of, record_fields, unwrap)
from .visited import VisitedSet
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, List, Optional, Tuple


logger = logging.getLogger(__name__)

# Matches one '.attribute' or '[key]' part of a selector
_SELECTOR_PART = re.compile(r"\.([A-Za-z_]\w*)|\[([^\[\]]+)\]")

# Stands in for attributes/keys that do not exist
_MISSING = object()


def explain(a: 'Any', b: 'Any', selector: 'Optional[str]' = None) -> 'Optional[Divergence]':
    """
    Determines whether a and b are structurally equal, and if not, where and why they first differ.

    In all messages, `a` is referred to as 'x' and `b` as 'y'. For example:

        >>> explain({'k': [1, 2]}, {'k': [1, 3]}).message
        'values[k][1] are not equal, where in x is 2 but in y is 3'

    Args:
        a (Any): object to check equality
        b (Any): object to check equality
        selector (Optional[str]): if not None, then a string that determines the 'selector' to use on both objects for
            determining equality. It should start with either a letter (case-sensitive), underscore '_', dot '.' or
            bracket '['. For example, `selector='[2]'` only compares `a[2]` and `b[2]`, and `selector='items[0]'`
            only compares `a.items[0]` and `b.items[0]`. Bracketed keys are parsed as python literals if possible,
            otherwise used as plain strings. The selector is prefixed to the path of any divergence. Defaults to None.

    Returns:
        Optional[Divergence]: None if the objects are equal, otherwise the first divergence found
    """
    segments: 'Tuple[str, ...]' = ()
    if selector is not None:
        a, b, segments = _apply_selector(a, b, selector)

    # Wrap everything in a try/catch in case there is an error, so it will be easier to spot
    try:
        divergence = _check_top_level(a, b)
    except EqualityCheckingError:
        raise
    except Exception as err:
        raise EqualityCheckingError("Could not determine equality between objects of types %s and %s" %
            (repr(type(a).__name__), repr(type(b).__name__))) from err

    if divergence is None:
        return None

    divergence = divergence.with_prefix(segments)
    logger.debug("Values diverged: %s", divergence.message)
    return divergence


def equal(a: 'Any', b: 'Any', selector: 'Optional[str]' = None, raise_err: 'bool' = False) -> 'bool':
    """
    Determines whether a and b are structurally equal. See :func:`explain` for the `selector` argument.

    Args:
        raise_err (bool): if True, then an ``EqualityError`` will be raised whenever `a` and `b` are unequal, with a
            message describing where and why they were determined to be unequal. Defaults to False.
    """
    divergence = explain(a, b, selector=selector)
    if divergence is None:
        return True
    if raise_err:
        raise EqualityError(divergence)
    return False


def assert_equal(a: 'Any', b: 'Any', selector: 'Optional[str]' = None) -> 'None':
    """Raises an ``EqualityError`` describing the first divergence between `a` and `b`, if there is one"""
    equal(a, b, selector=selector, raise_err=True)


def _check_top_level(a, b):
    """Top-level absence and type checks, then the recursive walk with a fresh visited set"""
    if a is None or b is None:
        if a is None and b is None:
            return None
        return absence('x' if a is None else 'y')

    if type(a) is not type(b):
        return type_mismatch(a, b)

    return _walk(a, b, VisitedSet(), 0)


def _walk(a: 'Any', b: 'Any', visited: 'VisitedSet', depth: 'int') -> 'Optional[Divergence]':
    """Compares a and b, returning the first divergence found within them"""
    if a is None or b is None:
        if a is None and b is None:
            return None
        return absence('x' if a is None else 'y')

    kind = kind_of(a)

    # Leaves are compared by value, no matter what the other side is
    if kind in LEAF_KINDS or kind_of(b) in LEAF_KINDS:
        return _compare_leaves(a, b)

    if type(a) is not type(b):
        return type_mismatch(a, b)

    if kind in ADDRESSABLE_KINDS and visited.seen_or_add(a, b):
        logger.debug("Already visited this %s pair, assuming equal (depth=%d)", repr(type(a).__name__), depth)
        return None

    if kind is Kind.ARRAY:
        # Tuples are fixed-length, but the type alone does not say which length
        if len(a) != len(b):
            return length_mismatch(len(a), len(b))
        return _compare_elements(a, b, visited, depth)

    elif kind is Kind.SEQUENCE:
        return _compare_sequences(a, b, visited, depth)

    elif kind is Kind.RECORD:
        return _compare_records(a, b, visited, depth)

    elif kind is Kind.MAPPING:
        return _compare_mappings(a, b, visited, depth)

    elif kind is Kind.SET:
        return _compare_sets(a, b)

    elif kind is Kind.REFERENCE:
        target_a, target_b = deref(a), deref(b)
        if target_a is target_b:
            return None
        divergence = _walk(target_a, target_b, visited, depth + 1)
        return None if divergence is None else divergence.prepend('(Pointer)')

    elif kind is Kind.DYNAMIC:
        value_a, value_b = unwrap(a), unwrap(b)
        if (value_a is None) != (value_b is None):
            return wrapped_absence('x' if value_a is None else 'y')
        divergence = _walk(value_a, value_b, visited, depth + 1)
        return None if divergence is None else divergence.prepend('(Interface)')

    elif kind is Kind.CALLABLE:
        # Can't do better than this
        return callables()

    raise EqualityCheckingError("Unhandled kind %s for object of type %s" % (kind, repr(type(a).__name__)))


def _compare_leaves(a, b):
    """NaN check, then type check, then checks the repr() of both objects"""
    if is_nan(a) or is_nan(b):
        return nan('x' if is_nan(a) else 'y', repr(a), repr(b))

    if type(a) is not type(b):
        return type_mismatch(a, b)

    # Very large ints can exceed the int to decimal string conversion limit
    if isinstance(a, int):
        if a != b:
            return value_mismatch(_int_repr(a), _int_repr(b))
        return None

    a_repr, b_repr = repr(a), repr(b)
    if a_repr != b_repr:
        return value_mismatch(a_repr, b_repr)
    return None


def _int_repr(value):
    try:
        return repr(value)
    except ValueError:
        return hex(value)


def _compare_elements(a, b, visited, depth):
    """Elementwise check of two objects known to be of the same length"""
    for i in range(len(a)):
        divergence = _walk(a[i], b[i], visited, depth + 1)
        if divergence is not None:
            return divergence.prepend('[%d]' % i)
    return None


def _compare_sequences(a, b, visited, depth):
    if isinstance(a, np.ndarray):
        if a.dtype != b.dtype:
            return dtype_mismatch(a.dtype, b.dtype)
        if a.shape != b.shape:
            return length_mismatch(a.shape, b.shape, measure='shape')
        if _same_storage(a, b):
            return None

        # 0-d arrays have no elements to index, just the one value
        if a.ndim == 0:
            return _walk(a[()], b[()], visited, depth + 1)
        return _compare_elements(a, b, visited, depth)

    if len(a) != len(b):
        return length_mismatch(len(a), len(b))
    if a is b:
        return None
    return _compare_elements(a, b, visited, depth)


def _same_storage(a, b):
    """True if the two (equally shaped) arrays are views of the exact same memory"""
    if a is b:
        return True
    return a.__array_interface__['data'][0] == b.__array_interface__['data'][0] and a.strides == b.strides \
        and a.dtype == b.dtype


def _compare_records(a, b, visited, depth):
    names = record_fields(a)
    names.extend(n for n in record_fields(b) if n not in names)

    for name in names:
        field_a, field_b = getattr(a, name, _MISSING), getattr(b, name, _MISSING)
        if field_a is _MISSING and field_b is _MISSING:
            continue
        if field_a is _MISSING or field_b is _MISSING:
            return key_missing('x' if field_a is _MISSING else 'y').prepend('.%s' % name)

        divergence = _walk(field_a, field_b, visited, depth + 1)
        if divergence is not None:
            return divergence.prepend('.%s' % name)
    return None


def _compare_mappings(a, b, visited, depth):
    if len(a) != len(b):
        return length_mismatch(len(a), len(b))
    if a is b:
        return None

    divergence = _nan_member(a, 'x') or _nan_member(b, 'y')
    if divergence is not None:
        return divergence
    typed_keys_b = _typed_members(b)

    # Keys only in b must mean some key in a is missing in b, since the lengths match
    for k in a:
        segment = '[%s]' % (k,)
        value_a, value_b = a.get(k, _MISSING), b.get(k, _MISSING)
        if value_a is _MISSING:
            return key_missing('x').prepend(segment)
        if value_b is _MISSING or (type(k), k) not in typed_keys_b:
            return key_missing('y').prepend(segment)

        divergence = _walk(value_a, value_b, visited, depth + 1)
        if divergence is not None:
            return divergence.prepend(segment)
    return None


def _compare_sets(a, b):
    if len(a) != len(b):
        return length_mismatch(len(a), len(b))
    if a is b:
        return None

    divergence = _nan_member(a, 'x') or _nan_member(b, 'y')
    if divergence is not None:
        return divergence
    typed_members_b = _typed_members(b)

    for member in a:
        if (type(member), member) not in typed_members_b:
            return key_missing('y').prepend('[%s]' % (member,))
    return None


def _typed_members(container):
    """Set of (type, member) pairs, so that lookups only match members of the exact same type (1, 1.0 and True
    all hash and compare equal on their own)"""
    return {(type(member), member) for member in container}


def _nan_member(container, side):
    """NaN divergence at the first NaN key/member of the container, if any. Hash lookups would find a NaN by identity"""
    for member in container:
        if is_nan(member):
            rendering = repr(member)
            x, y = (rendering, None) if side == 'x' else (None, rendering)
            return nan(side, x, y).prepend('[%s]' % (member,))
    return None


def _apply_selector(a, b, selector):
    """Applies the selector string to both objects, returning (a_selected, b_selected, path_segments)"""
    parts = _parse_selector(selector)
    segments = tuple(segment for segment, _, _ in parts)
    return _select(a, parts, selector, 'x'), _select(b, parts, selector, 'y'), segments


def _select(obj, parts, selector, name):
    try:
        for _, is_attr, key in parts:
            obj = getattr(obj, key) if is_attr else obj[key]
    except Exception as err:
        raise EqualityCheckingError("Could not use `selector` with value %s on object `%s`" %
            (repr(selector), name)) from err
    return obj


def _parse_selector(selector: 'str') -> 'List[Tuple[str, bool, Any]]':
    """Splits a selector into a list of (path_segment, is_attribute, attribute_name_or_key) tuples"""
    if not isinstance(selector, str):
        raise TypeError("`selector` arg must be str, not %s" % repr(type(selector).__name__))
    if selector == '':
        return []
    if selector[0].isalpha() or selector[0] == '_':
        selector = '.' + selector
    elif selector[0] not in '.[':
        raise ValueError("`selector` string must start with a '.', '_', '[', or alphabetic character: %s" % repr(selector))

    parts = []
    pos = 0
    while pos < len(selector):
        match = _SELECTOR_PART.match(selector, pos)
        if match is None:
            raise ValueError("Could not parse `selector` %s at position %d" % (repr(selector), pos))

        attr, key_str = match.groups()
        if attr is not None:
            parts.append(('.' + attr, True, attr))
        else:
            key = _parse_key(key_str)
            parts.append(('[%s]' % (key,), False, key))
        pos = match.end()

    return parts


def _parse_key(key_str):
    try:
        return ast.literal_eval(key_str)
    except (ValueError, SyntaxError):
        return key_str

"""
Tests for the explained_equality.divergence file.
"""

import pytest
from explained_equality.divergence import (MAX_REPR_LEN, Divergence, DivergenceKind, EqualityError, absence,
    key_missing, length_mismatch, limit_str, type_mismatch, value_mismatch)


def test_path_building():
    """Segments are prepended while unwinding, so the outermost one ends up first"""
    divergence = value_mismatch('2', '3').prepend('[1]').prepend('.items').prepend('(Pointer)')
    assert divergence.path == ('(Pointer)', '.items', '[1]')
    assert divergence.location == '(Pointer).items[1]'
    assert divergence.message == 'values(Pointer).items[1] are not equal, where in x is 2 but in y is 3'
    assert str(divergence) == divergence.message

    assert divergence.with_prefix(['[0]', '.a']).path == ('[0]', '.a', '(Pointer)', '.items', '[1]')


def test_records_are_immutable():
    divergence = absence('x')
    prepended = divergence.prepend('[0]')
    assert divergence.path == ()
    assert prepended.path == ('[0]',)

    with pytest.raises(AttributeError):
        divergence.reason = 'something else'


def test_reasons():
    assert absence('x').message == 'values in x is None but in y is not'
    assert absence('y').message == 'values in y is None but in x is not'
    assert absence('y').kind is DivergenceKind.ABSENCE

    divergence = type_mismatch(1, 'a')
    assert divergence.message == 'values have different types, where in x is int but in y is str'
    assert (divergence.x, divergence.y) == ('int', 'str')

    divergence = length_mismatch(1, 0)
    assert divergence.message == 'values do not have the same length, where in x is 1 but in y is 0'
    assert (divergence.x, divergence.y) == ('1', '0')

    assert key_missing('y').prepend('[k]').message == 'values[k] is missing in y'


def test_long_values_are_limited():
    long_repr = repr('a' * (MAX_REPR_LEN * 2))
    divergence = value_mismatch(long_repr, "'b'")

    assert len(divergence.x) == MAX_REPR_LEN + len('...')
    assert divergence.x.endswith('...')
    assert divergence.y == "'b'"
    assert limit_str('abc', limit=2) == 'ab...'
    assert limit_str('abc', limit=3) == 'abc'


def test_equality_error():
    divergence = Divergence(DivergenceKind.VALUE, 'are not equal, where in x is 1 but in y is 2', ('[0]',), '1', '2')
    err = EqualityError(divergence)

    assert isinstance(err, AssertionError)
    assert err.divergence is divergence
    assert str(err) == 'values[0] are not equal, where in x is 1 but in y is 2'

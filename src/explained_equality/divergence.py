"""
Structured records of the first place two objects were found to differ, and the errors built from them
"""

import dataclasses
from enum import Enum
from typing import TYPE_CHECKING


if TYPE_CHECKING:
    from typing import Any, Iterable, Optional, Tuple


MAX_REPR_LEN = 1000

# Prefix of every rendered divergence message
MESSAGE_PREFIX = 'values'


class DivergenceKind(Enum):
    ABSENCE = 'absence'
    TYPE = 'type'
    LENGTH = 'length'
    KEY_MISSING = 'key_missing'
    VALUE = 'value'
    NAN = 'nan'
    CALLABLE = 'callable'


@dataclasses.dataclass(frozen=True)
class Divergence:
    """The first difference found between two objects

    Attributes:
        kind (DivergenceKind): what sort of difference was found
        reason (str): the reason clause, naming which side (x is the first object, y the second) held what
        path (Tuple[str, ...]): locator segments from the outermost object down to where the difference was found,
            eg: ('.items', '[2]', '(Pointer)')
        x (Optional[str]): rendering of the observed value in x, if the reason involves one
        y (Optional[str]): rendering of the observed value in y, if the reason involves one
    """
    kind: 'DivergenceKind'
    reason: 'str'
    path: 'Tuple[str, ...]' = ()
    x: 'Optional[str]' = None
    y: 'Optional[str]' = None

    def prepend(self, segment: 'str') -> 'Divergence':
        """Returns a copy of this divergence found one level further down, at `segment`"""
        return dataclasses.replace(self, path=(segment,) + self.path)

    def with_prefix(self, segments: 'Iterable[str]') -> 'Divergence':
        return dataclasses.replace(self, path=tuple(segments) + self.path)

    @property
    def location(self) -> 'str':
        return ''.join(self.path)

    @property
    def message(self) -> 'str':
        return '%s%s %s' % (MESSAGE_PREFIX, self.location, self.reason)

    def __str__(self) -> 'str':
        return self.message


def limit_str(s: 'str', limit: 'int' = MAX_REPR_LEN) -> 'str':
    return s if len(s) <= limit else (s[:limit] + '...')


def _other(side):
    return 'y' if side == 'x' else 'x'


def absence(absent_side: 'str') -> 'Divergence':
    """One side is None, the other is not"""
    return Divergence(DivergenceKind.ABSENCE, 'in %s is None but in %s is not' % (absent_side, _other(absent_side)))


def wrapped_absence(absent_side: 'str') -> 'Divergence':
    """One wrapper holds None, the other does not"""
    return Divergence(DivergenceKind.ABSENCE, 'do not have the same wrapped value, where in %s is None but in %s is not'
        % (absent_side, _other(absent_side)))


def type_mismatch(a: 'Any', b: 'Any') -> 'Divergence':
    x, y = type(a).__name__, type(b).__name__
    return Divergence(DivergenceKind.TYPE, 'have different types, where in x is %s but in y is %s' % (x, y), x=x, y=y)


def length_mismatch(x_len: 'Any', y_len: 'Any', measure: 'str' = 'length') -> 'Divergence':
    x, y = str(x_len), str(y_len)
    return Divergence(DivergenceKind.LENGTH, 'do not have the same %s, where in x is %s but in y is %s' % (measure, x, y),
        x=x, y=y)


def key_missing(missing_side: 'str') -> 'Divergence':
    """Reported at the path of the key/member/attribute that is missing"""
    return Divergence(DivergenceKind.KEY_MISSING, 'is missing in %s' % missing_side)


def value_mismatch(x_repr: 'str', y_repr: 'str') -> 'Divergence':
    x, y = limit_str(x_repr), limit_str(y_repr)
    return Divergence(DivergenceKind.VALUE, 'are not equal, where in x is %s but in y is %s' % (x, y), x=x, y=y)


def nan(nan_side: 'str', x_repr: 'Optional[str]', y_repr: 'Optional[str]') -> 'Divergence':
    x = None if x_repr is None else limit_str(x_repr)
    y = None if y_repr is None else limit_str(y_repr)
    return Divergence(DivergenceKind.NAN, 'in %s is NaN' % nan_side, x=x, y=y)


def dtype_mismatch(a_dtype: 'Any', b_dtype: 'Any') -> 'Divergence':
    x, y = str(a_dtype), str(b_dtype)
    return Divergence(DivergenceKind.TYPE, 'have different dtypes, where in x is %s but in y is %s' % (x, y), x=x, y=y)


def callables() -> 'Divergence':
    return Divergence(DivergenceKind.CALLABLE, 'are callables, which are never considered equal')


class EqualityError(AssertionError):
    """Error raised whenever an :func:`~explained_equality.equality.equal` check finds a divergence and
    `raise_err=True`, or an :func:`~explained_equality.equality.assert_equal` check fails"""

    def __init__(self, divergence: 'Divergence'):
        self.divergence = divergence
        super().__init__(divergence.message)


class EqualityCheckingError(Exception):
    """Error raised whenever there is an unexpected problem attempting to check equality between two objects"""

from .divergence import Divergence, DivergenceKind, EqualityError, EqualityCheckingError
from .equality import explain, equal, assert_equal
from .pytypes import Kind, kind_of, register_wrapper, register_reference

__all__ = ['Divergence', 'DivergenceKind', 'EqualityError', 'EqualityCheckingError', 'explain', 'equal', 'assert_equal',
    'Kind', 'kind_of', 'register_wrapper', 'register_reference']

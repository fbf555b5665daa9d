"""
###############################
Typing (:mod:`dualexpr.typing`)
###############################

This module provides type definitions commonly used between modules.

.. autodata:: SCALAR_TYPES

.. autoclass:: Evaluable
    :show-inheritance:
    :members:

"""

from abc import abstractmethod
from typing import Final, Protocol, runtime_checkable

import numpy as np

Scalar = int | float | np.integer | np.floating

SCALAR_TYPES: Final = (int, float, np.integer, np.floating)
"""Types accepted wherever a real number is expected."""


def isscalar(value: object) -> bool:
    """Return ``True`` if `value` is a real number accepted as a scalar operand."""
    return isinstance(value, SCALAR_TYPES) and not isinstance(value, bool)


@runtime_checkable
class Evaluable(Protocol):
    """Protocol shared by dual numbers and expression nodes.

    Objects implementing this protocol carry a value and a derivative vector of
    length :attr:`dimension`, both of which can be read on demand.
    """

    __slots__ = ()

    @property
    @abstractmethod
    def dimension(self) -> int | None: ...

    @abstractmethod
    def value(self) -> float: ...

    @abstractmethod
    def derivative(self, index: int) -> float: ...

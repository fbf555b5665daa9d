"""
####################################################
Automatic differentiation (:mod:`dualexpr.autodiff`)
####################################################

.. currentmodule:: dualexpr.autodiff

This module provides forward-mode automatic differentiation with eagerly evaluated
dual numbers.

Differential operators
----------------------

.. autosummary::
    :toctree: generated/

    deriv
    grad
    jacobian
    value_and_grad

Dual numbers
------------

.. autosummary::
    :toctree: generated/

    Dual

"""

from .autodiff import deriv, grad, jacobian, value_and_grad
from .dual import Dual

__all__ = [
    "deriv",
    "grad",
    "jacobian",
    "value_and_grad",
    "Dual",
]

"""
#######################################
Expression trees (:mod:`dualexpr.expr`)
#######################################

.. currentmodule:: dualexpr.expr

This module provides lazily evaluated expression trees. Arithmetic on nodes only
records the operation; values and derivatives are computed when the tree is read or
materialized.

Nodes
-----

.. autosummary::
    :toctree: generated/

    Node
    Constant
    Leaf
    Add
    Sub
    Mul
    Div
    Exp
    Log
    Pow

Construction
------------

.. autosummary::
    :toctree: generated/

    constant
    lazy
    size

Materialization
---------------

.. autosummary::
    :toctree: generated/

    evaluate
    gradient
    materialize

"""

from .materialize import evaluate, gradient, materialize
from .nodes import (
    Add,
    Constant,
    Div,
    Exp,
    Leaf,
    Log,
    Mul,
    Node,
    Pow,
    Sub,
    constant,
    lazy,
    size,
)

__all__ = [
    "evaluate",
    "gradient",
    "materialize",
    "Add",
    "Constant",
    "Div",
    "Exp",
    "Leaf",
    "Log",
    "Mul",
    "Node",
    "Pow",
    "Sub",
    "constant",
    "lazy",
    "size",
]

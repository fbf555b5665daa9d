from .autodiff import Dual
from .context import Context, getcontext, localcontext, setcontext
from .errors import DimensionMismatch, DomainError, IndexOutOfRange
from .function import exp, log, pow, sqrt
from .expr import evaluate, gradient, lazy, materialize

__all__ = [
    "Dual",
    "Context",
    "getcontext",
    "localcontext",
    "setcontext",
    "DimensionMismatch",
    "DomainError",
    "IndexOutOfRange",
    "exp",
    "log",
    "pow",
    "sqrt",
    "evaluate",
    "gradient",
    "lazy",
    "materialize",
]

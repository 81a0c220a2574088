# ad/__init__.py
# Forward-mode differentiation with tagged differentials

from .errors import DifferentiationError, NoDifferentiationRule, InvalidSelector
from .config import ADConfig, get_config, use_config
from .core import (
    Differential,
    TagAllocator,
    use_allocator,
    Primitive,
    defjvp,
    defjvp_rule,
    Perturbed,
    derivative,
    nth_derivative,
    grad,
    grads,
    grads_list,
    hvp,
    value,
)
from .ops import *  # noqa: F401,F403
from .ops import __all__ as _ops_all
from .operator import Operator, D, identity, partial

# Taylor module
from . import taylor
from .taylor import taylor_series_terms, grad_hessian, hessian

__all__ = [
    # Errors / config
    'DifferentiationError',
    'NoDifferentiationRule',
    'InvalidSelector',
    'ADConfig',
    'get_config',
    'use_config',
    # Core
    'Differential',
    'TagAllocator',
    'use_allocator',
    'Primitive',
    'defjvp',
    'defjvp_rule',
    'Perturbed',
    'derivative',
    'nth_derivative',
    'grad',
    'grads',
    'grads_list',
    'hvp',
    'value',
    # Operators
    'Operator',
    'D',
    'identity',
    'partial',
    # Taylor
    'taylor',
    'taylor_series_terms',
    'grad_hessian',
    'hessian',
] + list(_ops_all)

# diffalg/__init__.py
# Differential algebra: forward-mode derivatives without perturbation confusion

from .ad import *  # noqa: F401,F403
from .ad import __all__

__version__ = "0.1.0"

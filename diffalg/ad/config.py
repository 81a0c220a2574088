"""
AD Configuration Utilities

Shared settings for the differentiation core. Defaults can be overridden
from the environment:

    DIFFALG_OPERATOR_EXP_ORDER   number of series terms kept by exp(operator)
    DIFFALG_LOG_LEVEL            level applied to the ``diffalg`` logger
"""

import logging
import os
from contextlib import contextmanager
from typing import Optional


class ADConfig:
    """Shared configuration for the differentiation core"""

    def __init__(self, operator_exp_order: int = 6, log_level: Optional[str] = None):
        if operator_exp_order < 0:
            raise ValueError(f"operator_exp_order must be >= 0, got {operator_exp_order}")
        self.operator_exp_order = int(operator_exp_order)
        self.log_level = log_level

    def __repr__(self):
        return (f"ADConfig(operator_exp_order={self.operator_exp_order}, "
                f"log_level={self.log_level!r})")

    def replace(self, **overrides) -> "ADConfig":
        """Return a copy with the given fields changed."""
        fields = {"operator_exp_order": self.operator_exp_order, "log_level": self.log_level}
        unknown = set(overrides) - set(fields)
        if unknown:
            raise TypeError(f"unknown config field(s): {sorted(unknown)}")
        fields.update(overrides)
        return ADConfig(**fields)

    @staticmethod
    def from_env(environ=None) -> "ADConfig":
        """
        Build a config from ``DIFFALG_*`` environment variables.

        Args:
            environ: Mapping to read from (defaults to ``os.environ``)

        Returns:
            ADConfig with defaults for every variable that is not set
        """
        env = os.environ if environ is None else environ
        order = env.get("DIFFALG_OPERATOR_EXP_ORDER")
        return ADConfig(
            operator_exp_order=int(order) if order else 6,
            log_level=env.get("DIFFALG_LOG_LEVEL") or None,
        )

    def apply_logging(self):
        """Set the package logger level if one is configured."""
        if self.log_level:
            logging.getLogger("diffalg").setLevel(self.log_level.upper())


# Global active config (read by operator.exp and friends)
global_config = ADConfig.from_env()
global_config.apply_logging()


def get_config() -> ADConfig:
    """Return the active configuration."""
    return global_config


@contextmanager
def use_config(config: Optional[ADConfig] = None, **overrides):
    """
    Context manager to temporarily change the active configuration:
        with use_config(operator_exp_order=10):
            ...
    """
    from . import config as _config_mod  # module access so swaps are visible everywhere
    prev = _config_mod.global_config
    try:
        base = config or prev
        _config_mod.global_config = base.replace(**overrides) if overrides else base
        yield _config_mod.global_config
    finally:
        _config_mod.global_config = prev

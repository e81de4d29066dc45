from __future__ import annotations

from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as _pkg_version

# Version
try:
    __version__ = _pkg_version("tilefactors")
except PackageNotFoundError:
    __version__ = "0+unknown"

# Public API re-exports
from .config import load_settings
from .factors import Factors
from .residual import ResidualFactors, ResidualPair, residual_index
from .runtime import APPLY, CFG
from .sampling import RandomSampler, SequentialSampler, SpaceSampler
from .utility import (
    ContractError,
    SearchLimitExceeded,
    TilefactorsError,
    UserInputError,
    divisors,
    isqrt,
)

__all__ = [
    "APPLY",
    "CFG",
    "ContractError",
    "Factors",
    "RandomSampler",
    "ResidualFactors",
    "ResidualPair",
    "SearchLimitExceeded",
    "SequentialSampler",
    "SpaceSampler",
    "TilefactorsError",
    "UserInputError",
    "__version__",
    "divisors",
    "isqrt",
    "load_settings",
    "residual_index",
]

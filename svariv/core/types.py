# svariv/core/types.py

"""
Core type annotations for the SVAR-IV toolbox.

Type aliases document the expected dimensionality of the arrays that flow
between the estimation collaborators and the inference engine.
"""

from enum import IntEnum
from pathlib import Path
from typing import Any, Dict, Literal, Tuple, Union

import numpy as np
import pandas as pd

# NumPy array type aliases
Vector = np.ndarray  # 1D array
Matrix = np.ndarray  # 2D array
Tensor3D = np.ndarray  # 3D array, leading axis is the horizon

CovarianceMatrix = np.ndarray  # Symmetric, positive semi-definite

# Data accepted by the reduced-form estimator
TimeSeriesData = Union[np.ndarray, pd.Series]
TimeSeriesDataFrame = Union[np.ndarray, pd.DataFrame]

# Pair of (lower, upper) bounds as reported in the numeric result arrays
Bounds = Tuple[float, float]

# Configuration types
ConfigDict = Dict[str, Any]
LogLevel = Literal["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]

FilePath = Union[str, Path]


class IntervalCase(IntEnum):
    """Classification of the weak-IV robust confidence set.

    The integer values match the case numbers reported in the result arrays.
    """
    BOUNDED = 1
    EXCLUDED_INTERVAL = 2
    EMPTY = 3
    WHOLE_LINE = 4

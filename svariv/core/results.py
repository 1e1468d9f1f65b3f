'''
Standardized result containers for the SVAR-IV toolbox.

This module provides the dataclass base for all inference outputs. Result
objects store arrays, diagnostics and metadata in a consistent format and
support pretty printing, dictionary export and pickling to an explicit path.
'''

import pickle
from dataclasses import dataclass, field, fields, is_dataclass
from datetime import datetime
from pathlib import Path
from typing import Any, Dict, Optional, Sequence

import numpy as np
import pandas as pd

from .types import FilePath


@dataclass
class ModelResult:
    """Base class for all model results.

    Attributes:
        model_name: Name of the procedure that generated the results
        creation_time: Timestamp when the result was created
        metadata: Additional metadata about the result
    """

    model_name: str
    creation_time: datetime = field(default_factory=datetime.now)
    metadata: Dict[str, Any] = field(default_factory=dict)

    def __post_init__(self) -> None:
        """Validate result object after initialization."""
        if not isinstance(self.metadata, dict):
            self.metadata = dict(self.metadata)

    def to_dict(self) -> Dict[str, Any]:
        """Convert the result object to a dictionary.

        Nested result objects are converted recursively, arrays become lists
        and timestamps become ISO strings.

        Returns:
            Dict[str, Any]: Dictionary representation of the result object
        """
        result_dict: Dict[str, Any] = {}
        for f in fields(self):
            result_dict[f.name] = _to_plain(getattr(self, f.name))
        return result_dict

    def to_pickle(self, path: FilePath) -> None:
        """Save the result object as a pickle file.

        Args:
            path: Path to save the pickle file
        """
        with open(path, 'wb') as f:
            pickle.dump(self, f)

    @classmethod
    def from_pickle(cls, path: FilePath) -> 'ModelResult':
        """Load a result object from a pickle file.

        Args:
            path: Path to the pickle file

        Returns:
            ModelResult: Loaded result object

        Raises:
            TypeError: If the loaded object is not an instance of this class
        """
        with open(path, 'rb') as f:
            result = pickle.load(f)

        if not isinstance(result, cls):
            raise TypeError(f"Loaded object is not a {cls.__name__}, got {type(result)}")

        return result

    def summary(self) -> str:
        """Generate a text summary of the model results.

        Returns:
            str: A formatted string containing the model results summary
        """
        header = f"Model: {self.model_name}\n"
        header += "=" * (len(header) - 1) + "\n\n"

        timestamp = f"Created: {self.creation_time.strftime('%Y-%m-%d %H:%M:%S')}\n\n"

        metadata_str = ""
        if self.metadata:
            metadata_str = "Metadata:\n"
            for key, value in self.metadata.items():
                metadata_str += f"  {key}: {value}\n"
            metadata_str += "\n"

        return header + timestamp + metadata_str

    def __str__(self) -> str:
        return self.summary()

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(model_name='{self.model_name}')"


def _to_plain(value: Any) -> Any:
    if isinstance(value, ModelResult):
        return value.to_dict()
    if is_dataclass(value) and not isinstance(value, type):
        return {f.name: _to_plain(getattr(value, f.name)) for f in fields(value)}
    if isinstance(value, np.ndarray):
        return value.tolist()
    if isinstance(value, (pd.DataFrame, pd.Series)):
        return value.to_dict()
    if isinstance(value, datetime):
        return value.isoformat()
    if isinstance(value, np.generic):
        return value.item()
    if isinstance(value, dict):
        return {k: _to_plain(v) for k, v in value.items()}
    if isinstance(value, (list, tuple)):
        return [_to_plain(v) for v in value]
    return value


def irf_table(columns: Dict[str, np.ndarray], var_names: Optional[Sequence[str]] = None) -> pd.DataFrame:
    """Build a long-format DataFrame from per-(variable, horizon) arrays.

    Args:
        columns: Mapping from column name to an array of shape (n, horizons+1)
        var_names: Names of the n variables, defaulting to y1..yn

    Returns:
        pd.DataFrame: One row per (variable, horizon), indexed by both
    """
    arrays = {name: np.asarray(values) for name, values in columns.items()}
    n, H = next(iter(arrays.values())).shape
    if var_names is None:
        var_names = [f"y{i + 1}" for i in range(n)]

    index = pd.MultiIndex.from_product(
        [list(var_names), range(H)], names=["variable", "horizon"]
    )
    return pd.DataFrame({name: values.reshape(-1) for name, values in arrays.items()}, index=index)


def save_result(result: ModelResult, path: FilePath) -> Path:
    """Persist a result as a single pickle payload at an explicit path.

    Args:
        result: Result object to save
        path: Destination file

    Returns:
        Path: The path that was written
    """
    if not isinstance(result, ModelResult):
        raise TypeError(f"result must be a ModelResult, got {type(result)}")
    path = Path(path)
    result.to_pickle(path)
    return path


def load_result(path: FilePath, expected_type: Optional[type] = None) -> ModelResult:
    """Load a result written by save_result.

    Args:
        path: File to read
        expected_type: Result class the payload must be an instance of

    Raises:
        TypeError: If the payload is not of the expected type
    """
    cls = expected_type or ModelResult
    return cls.from_pickle(path)

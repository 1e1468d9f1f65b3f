# svariv/core/validation.py

"""
Validation utilities for the SVAR-IV toolbox.

These helpers enforce the dimensional and numerical preconditions of the
inference engine before any computation starts, so that structural problems
fail fast with a DimensionError, NumericalError or ParameterError carrying the
offending array name and shape.
"""

import numbers
from typing import Optional

import numpy as np
from scipy import linalg

from svariv.core.exceptions import (
    raise_dimension_error, raise_numerical_error, raise_parameter_error
)
from svariv.core.types import Matrix, Vector


def validate_matrix_shape(
    matrix: np.ndarray,
    expected_rows: Optional[int] = None,
    expected_cols: Optional[int] = None,
    matrix_name: str = "matrix"
) -> Matrix:
    """Validate that a matrix has the expected dimensions.

    Args:
        matrix: Matrix to validate
        expected_rows: Expected number of rows, or None for any
        expected_cols: Expected number of columns, or None for any
        matrix_name: Name of the matrix for error messages

    Returns:
        np.ndarray: The validated matrix as a float array

    Raises:
        TypeError: If matrix is None
        DimensionError: If matrix dimensions don't match expected dimensions
    """
    if matrix is None:
        raise TypeError(f"{matrix_name} cannot be None")

    matrix = np.asarray(matrix, dtype=float)

    if matrix.ndim != 2:
        raise_dimension_error(
            f"{matrix_name} must be 2-dimensional, got {matrix.ndim} dimensions",
            array_name=matrix_name,
            expected_shape="2D matrix",
            actual_shape=matrix.shape
        )

    if expected_rows is not None and matrix.shape[0] != expected_rows:
        raise_dimension_error(
            f"{matrix_name} has {matrix.shape[0]} rows, expected {expected_rows}",
            array_name=matrix_name,
            expected_shape=f"({expected_rows}, {expected_cols if expected_cols is not None else 'any'})",
            actual_shape=matrix.shape
        )

    if expected_cols is not None and matrix.shape[1] != expected_cols:
        raise_dimension_error(
            f"{matrix_name} has {matrix.shape[1]} columns, expected {expected_cols}",
            array_name=matrix_name,
            expected_shape=f"({expected_rows if expected_rows is not None else 'any'}, {expected_cols})",
            actual_shape=matrix.shape
        )

    return matrix


def validate_square_matrix(
    matrix: np.ndarray,
    size: Optional[int] = None,
    matrix_name: str = "matrix"
) -> Matrix:
    """Validate that a matrix is square (and optionally of a given size).

    Raises:
        DimensionError: If matrix is not square or has the wrong size
    """
    matrix = validate_matrix_shape(matrix, matrix_name=matrix_name)

    if matrix.shape[0] != matrix.shape[1]:
        raise_dimension_error(
            f"{matrix_name} must be square, got shape {matrix.shape}",
            array_name=matrix_name,
            expected_shape=f"({matrix.shape[0]}, {matrix.shape[0]})",
            actual_shape=matrix.shape
        )

    if size is not None and matrix.shape[0] != size:
        raise_dimension_error(
            f"{matrix_name} must be {size} x {size}, got shape {matrix.shape}",
            array_name=matrix_name,
            expected_shape=(size, size),
            actual_shape=matrix.shape
        )

    return matrix


def validate_vector(
    vector: np.ndarray,
    expected_length: Optional[int] = None,
    vector_name: str = "vector"
) -> Vector:
    """Validate that an array is a vector with the expected length.

    Column vectors of shape (k, 1) and row vectors of shape (1, k) are
    flattened to shape (k,).

    Raises:
        TypeError: If vector is None
        DimensionError: If the array is not a vector or has the wrong length
    """
    if vector is None:
        raise TypeError(f"{vector_name} cannot be None")

    vector = np.asarray(vector, dtype=float)

    if vector.ndim == 2 and 1 in vector.shape:
        vector = vector.ravel()

    if vector.ndim != 1:
        raise_dimension_error(
            f"{vector_name} must be a vector, got shape {vector.shape}",
            array_name=vector_name,
            expected_shape=f"({expected_length if expected_length is not None else 'k'},)",
            actual_shape=vector.shape
        )

    if expected_length is not None and vector.shape[0] != expected_length:
        raise_dimension_error(
            f"{vector_name} has length {vector.shape[0]}, expected {expected_length}",
            array_name=vector_name,
            expected_shape=(expected_length,),
            actual_shape=vector.shape
        )

    return vector


def validate_symmetric(
    matrix: np.ndarray,
    matrix_name: str = "matrix",
    tol: float = 1e-8
) -> Matrix:
    """Validate that a square matrix is symmetric up to a relative tolerance.

    Raises:
        DimensionError: If matrix is not square
        NumericalError: If matrix is not symmetric
    """
    matrix = validate_square_matrix(matrix, matrix_name=matrix_name)

    scale = max(1.0, float(np.max(np.abs(matrix)))) if matrix.size else 1.0
    asymmetry = float(np.max(np.abs(matrix - matrix.T))) if matrix.size else 0.0
    if asymmetry > tol * scale:
        raise_numerical_error(
            f"{matrix_name} is not symmetric (max asymmetry: {asymmetry})",
            operation="symmetry check",
            error_type="asymmetric matrix",
            values=asymmetry
        )

    return matrix


def validate_positive_definite(
    matrix: np.ndarray,
    matrix_name: str = "matrix",
    tol: float = 1e-8
) -> Matrix:
    """Validate that a matrix is symmetric positive definite.

    Args:
        matrix: Matrix to validate
        matrix_name: Name of the matrix for error messages
        tol: Tolerance for the symmetry check

    Returns:
        np.ndarray: The validated matrix

    Raises:
        DimensionError: If matrix is not square
        NumericalError: If matrix is not symmetric positive definite
    """
    matrix = validate_symmetric(matrix, matrix_name=matrix_name, tol=tol)

    try:
        # Cholesky only succeeds for positive definite matrices
        linalg.cholesky(matrix, lower=True)
    except linalg.LinAlgError as e:
        min_eig = float(np.min(linalg.eigvalsh(matrix)))
        raise_numerical_error(
            f"{matrix_name} is not positive definite (min eigenvalue: {min_eig})",
            operation="positive definite check",
            error_type="non-positive eigenvalue",
            values=min_eig,
            details=str(e)
        )

    return matrix


def validate_probability(value: float, param_name: str) -> float:
    """Validate that a value lies strictly between 0 and 1.

    Raises:
        ParameterError: If value is not in (0, 1)
    """
    if not isinstance(value, numbers.Real) or not 0 < value < 1:
        raise_parameter_error(
            f"{param_name} must be strictly between 0 and 1, got {value}",
            param_name=param_name,
            param_value=value,
            constraint="0 < value < 1"
        )
    return float(value)


def validate_index(value: int, upper: int, param_name: str) -> int:
    """Validate a 1-based index into 1..upper.

    Raises:
        ParameterError: If value is not an integer in 1..upper
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral):
        raise_parameter_error(
            f"{param_name} must be an integer, got {type(value).__name__}",
            param_name=param_name,
            param_value=value,
            constraint=f"integer in 1..{upper}"
        )
    if not 1 <= value <= upper:
        raise_parameter_error(
            f"{param_name} must satisfy 1 <= {param_name} <= {upper}, got {value}",
            param_name=param_name,
            param_value=value,
            constraint=f"integer in 1..{upper}"
        )
    return int(value)


def validate_nonzero(value: float, param_name: str) -> float:
    """Validate that a real value is finite and nonzero.

    Raises:
        ParameterError: If value is zero, non-finite or not a real number
    """
    if not isinstance(value, numbers.Real) or not np.isfinite(value) or value == 0:
        raise_parameter_error(
            f"{param_name} must be a finite nonzero real number, got {value}",
            param_name=param_name,
            param_value=value,
            constraint="finite and nonzero"
        )
    return float(value)


def validate_non_negative_int(value: int, param_name: str, minimum: int = 0) -> int:
    """Validate that a value is an integer not smaller than ``minimum``.

    Raises:
        ParameterError: If value is not an integer or is below ``minimum``
    """
    if isinstance(value, bool) or not isinstance(value, numbers.Integral) or value < minimum:
        raise_parameter_error(
            f"{param_name} must be an integer >= {minimum}, got {value}",
            param_name=param_name,
            param_value=value,
            constraint=f"integer >= {minimum}"
        )
    return int(value)

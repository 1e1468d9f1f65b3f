# svariv/models/svar/weak_iv.py

"""
Weak-instrument robust confidence sets for SVAR-IV impulse responses.

For the normalized impulse response lambda of variable j at horizon h, the
Anderson-Rubin type test statistic is a ratio of quadratic forms in lambda,
so the set of values not rejected at the chosen confidence level is
{lambda : a lambda² + b lambda + c <= 0}. Depending on the signs of a and of
the discriminant Delta = b² - 4ac this set is

    case 1  a > 0, Delta > 0   a bounded interval
    case 2  a < 0, Delta > 0   the union of two rays around an excluded interval
    case 3  a > 0, Delta < 0   empty
    case 4  otherwise          the whole real line

Every degenerate set is a valid statistical outcome; none raises.

Classes:
    BoundedInterval, ExcludedInterval, EmptySet, WholeLine: Typed confidence sets
    QuadraticSolution: Coefficients, cases and bounds for every (variable, horizon)

Functions:
    critical_value: Squared two-sided normal critical value
    classify_quadratic: Case of a quadratic set from sign(a) and sign(Delta)
    solve_quadratic_set: Typed confidence set of a single quadratic
    robust_quadratic: Per (variable, horizon) coefficients, cases and bounds
"""

import logging
from dataclasses import dataclass
from typing import Tuple, Union

import numpy as np
from scipy import stats

from svariv.core.types import Bounds, IntervalCase, Matrix
from svariv.core.validation import validate_probability
from .ma_representation import gamma_projections
from .reduced_form import CovarianceBlocks

# Set up module-level logger
logger = logging.getLogger("svariv.models.svar.weak_iv")


def critical_value(confidence: float) -> float:
    """
    Squared two-sided standard normal critical value.

    critval = Phi^-1(1 - (1 - confidence)/2)², the 1-confidence quantile of a
    chi-squared distribution with one degree of freedom.

    Raises:
        ParameterError: If confidence is not strictly between 0 and 1
    """
    confidence = validate_probability(confidence, "confidence")
    return float(stats.norm.ppf(1 - (1 - confidence) / 2) ** 2)


@dataclass(frozen=True)
class BoundedInterval:
    """Closed interval [lower, upper]."""
    lower: float
    upper: float

    @property
    def case(self) -> IntervalCase:
        return IntervalCase.BOUNDED

    @property
    def bounds(self) -> Bounds:
        return (self.lower, self.upper)

    @property
    def is_bounded(self) -> bool:
        return True

    def contains(self, value: float) -> bool:
        return self.lower <= value <= self.upper


@dataclass(frozen=True)
class ExcludedInterval:
    """
    Union of two rays (-inf, lower] and [upper, inf).

    lower and upper are the bounds of the excluded open interval.
    """
    lower: float
    upper: float

    @property
    def case(self) -> IntervalCase:
        return IntervalCase.EXCLUDED_INTERVAL

    @property
    def bounds(self) -> Bounds:
        return (self.lower, self.upper)

    @property
    def is_bounded(self) -> bool:
        return False

    def contains(self, value: float) -> bool:
        return value <= self.lower or value >= self.upper


@dataclass(frozen=True)
class EmptySet:
    """Empty confidence set."""

    @property
    def case(self) -> IntervalCase:
        return IntervalCase.EMPTY

    @property
    def bounds(self) -> Bounds:
        return (np.nan, np.nan)

    @property
    def is_bounded(self) -> bool:
        return False

    def contains(self, value: float) -> bool:
        return False


@dataclass(frozen=True)
class WholeLine:
    """The whole real line."""

    @property
    def case(self) -> IntervalCase:
        return IntervalCase.WHOLE_LINE

    @property
    def bounds(self) -> Bounds:
        return (-np.inf, np.inf)

    @property
    def is_bounded(self) -> bool:
        return False

    def contains(self, value: float) -> bool:
        return not np.isnan(value)


ConfidenceSet = Union[BoundedInterval, ExcludedInterval, EmptySet, WholeLine]


def classify_quadratic(a: float, delta: float) -> IntervalCase:
    """
    Classify the set {x : a x² + b x + c <= 0} from sign(a) and sign(Delta).

    a = 0, Delta = 0 and NaN inputs all fall into the whole-line case.
    """
    if a > 0 and delta > 0:
        return IntervalCase.BOUNDED
    if a < 0 and delta > 0:
        return IntervalCase.EXCLUDED_INTERVAL
    if a > 0 and delta < 0:
        return IntervalCase.EMPTY
    return IntervalCase.WHOLE_LINE


def solve_quadratic_set(a: float, b: float, delta: float) -> ConfidenceSet:
    """Resolve the quadratic inequality into a typed confidence set."""
    case = classify_quadratic(a, delta)
    if case == IntervalCase.BOUNDED:
        root = np.sqrt(delta)
        return BoundedInterval((-b - root) / (2 * a), (-b + root) / (2 * a))
    if case == IntervalCase.EXCLUDED_INTERVAL:
        # a < 0 flips the order of the roots
        root = np.sqrt(delta)
        return ExcludedInterval((-b + root) / (2 * a), (-b - root) / (2 * a))
    if case == IntervalCase.EMPTY:
        return EmptySet()
    return WholeLine()


def _classify_arrays(a: np.ndarray, delta: np.ndarray) -> np.ndarray:
    case = np.full(a.shape, int(IntervalCase.WHOLE_LINE), dtype=int)
    case[(a > 0) & (delta < 0)] = int(IntervalCase.EMPTY)
    case[(a < 0) & (delta > 0)] = int(IntervalCase.EXCLUDED_INTERVAL)
    case[(a > 0) & (delta > 0)] = int(IntervalCase.BOUNDED)
    return case


def _bounds_arrays(a: np.ndarray, b: np.ndarray, delta: np.ndarray,
                   case: np.ndarray) -> Tuple[np.ndarray, np.ndarray]:
    lower = np.full(a.shape, -np.inf)
    upper = np.full(a.shape, np.inf)

    with np.errstate(invalid="ignore", divide="ignore"):
        root = np.sqrt(np.where(delta > 0, delta, 0.0))
        small = (-b - root) / (2 * a)
        large = (-b + root) / (2 * a)

    bounded = case == IntervalCase.BOUNDED
    lower[bounded] = small[bounded]
    upper[bounded] = large[bounded]

    excluded = case == IntervalCase.EXCLUDED_INTERVAL
    lower[excluded] = large[excluded]
    upper[excluded] = small[excluded]

    empty = case == IntervalCase.EMPTY
    lower[empty] = np.nan
    upper[empty] = np.nan

    return lower, upper


@dataclass(frozen=True)
class QuadraticSolution:
    """
    Weak-IV robust confidence sets for every (variable, horizon).

    All arrays have shape (n, horizons+1). ``case`` holds the IntervalCase
    values of the formula; ``lower``/``upper`` hold the legacy numeric bounds,
    with the normalization variable pinned to the scale at horizon 0.

    Attributes:
        a, b, c: Quadratic coefficients
        delta: Discriminant b² - 4ac
        case: Case of each set (1..4)
        lower, upper: Bounds of the set (excluded interval in case 2)
        nvar: 1-based index of the normalization variable
        scale: Impact response of the normalization variable
    """
    a: Matrix
    b: Matrix
    c: Matrix
    delta: Matrix
    case: np.ndarray
    lower: Matrix
    upper: Matrix
    nvar: int
    scale: float

    def confidence_set(self, variable: int, horizon: int) -> ConfidenceSet:
        """
        Typed confidence set of one (0-based variable, horizon) cell.

        At horizon 0 the normalization variable is {scale} by construction.
        """
        if variable == self.nvar - 1 and horizon == 0:
            return BoundedInterval(self.scale, self.scale)
        return solve_quadratic_set(
            self.a[variable, horizon], self.b[variable, horizon], self.delta[variable, horizon]
        )


def robust_quadratic(
    C: np.ndarray,
    G: np.ndarray,
    gamma: np.ndarray,
    blocks: CovarianceBlocks,
    T: int,
    nvar: int,
    scale: float,
    critval: float
) -> QuadraticSolution:
    """
    Compute the weak-IV robust sets for all variables and horizons.

    With x the scale and i the normalization variable,

        a = T Gamma_i² - critval W2[i,i]
        b = -2 T x (e_j'C Gamma) Gamma_i + 2 critval x (Gamma'⊗e_j') G W12[:,i]
            + 2 critval x e_j'C W2[:,i]
        c = (sqrt(T) x e_j'C Gamma)² - critval x² (Gamma'⊗e_j') G W1 G'(Gamma⊗e_j)
            - 2 critval x² (Gamma'⊗e_j') G W12 C'e_j - critval x² e_j'C W2 C'e_j

    Args:
        C: MA coefficients, non-cumulative or cumulative, (horizons+1, n, n)
        G: Matching Jacobians, (horizons+1, n², n²p)
        gamma: Covariance between residuals and instrument, (n,)
        blocks: Partition of WHat
        T: Number of periods
        nvar: 1-based index of the normalization variable
        scale: Impact response of the normalization variable
        critval: Squared normal critical value

    Returns:
        QuadraticSolution: Coefficients, cases and bounds
    """
    i = nvar - 1
    x = scale
    W1, W12, W2 = blocks.W1, blocks.W12, blocks.W2
    H, n, _ = C.shape

    CG, D = gamma_projections(C, G, gamma)

    a = np.full((H, n), T * gamma[i] ** 2 - critval * W2[i, i])

    b = (-2 * T * x * CG * gamma[i]
         + 2 * critval * x * (D @ W12[:, i])
         + 2 * critval * x * (C @ W2[:, i]))

    c = ((np.sqrt(T) * x * CG) ** 2
         - critval * x ** 2 * np.einsum("hjm,mk,hjk->hj", D, W1, D)
         - 2 * critval * x ** 2 * np.einsum("hjm,mk,hjk->hj", D, W12, C)
         - critval * x ** 2 * np.einsum("hjk,kl,hjl->hj", C, W2, C))

    # Variables on the first axis
    a, b, c = a.T.copy(), b.T.copy(), c.T.copy()
    delta = b ** 2 - 4 * a * c

    case = _classify_arrays(a, delta)
    lower, upper = _bounds_arrays(a, b, delta, case)

    lower[i, 0] = x
    upper[i, 0] = x

    # The pinned cell has Delta = 0 analytically and is left out of the count
    unbounded = case != IntervalCase.BOUNDED
    unbounded[i, 0] = False
    if unbounded.any():
        logger.warning(
            f"{int(unbounded.sum())} of {case.size - 1} weak-IV robust confidence sets "
            f"are not bounded intervals"
        )

    return QuadraticSolution(
        a=a, b=b, c=c, delta=delta, case=case,
        lower=lower, upper=upper, nvar=nvar, scale=x
    )

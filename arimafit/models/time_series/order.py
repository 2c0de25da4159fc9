"""
ARIMA model order and fitting strategy definitions.
"""

from dataclasses import dataclass
from enum import Enum
from typing import Optional, Tuple, Union

from arimafit.core.exceptions import InvalidOrderError
from arimafit.core.validation import validate_non_negative_int


class Constant(str, Enum):
    """Whether a model includes a constant (a non-zero mean)."""
    INCLUDE = "include"
    EXCLUDE = "exclude"

    @property
    def include(self) -> bool:
        return self is Constant.INCLUDE


class Drift(str, Enum):
    """Whether a model includes a linear drift term."""
    INCLUDE = "include"
    EXCLUDE = "exclude"

    @property
    def include(self) -> bool:
        return self is Drift.INCLUDE


class FittingStrategy(str, Enum):
    """Objective used to estimate the coefficients.

    CSS minimizes the conditional sum of squares, ML maximizes the exact
    Gaussian likelihood, and CSS_ML runs CSS first and uses its optimum as the
    starting point of an ML fit.
    """
    CSS = "css"
    ML = "ml"
    CSS_ML = "css-ml"

    @property
    def description(self) -> str:
        return _STRATEGY_DESCRIPTIONS[self]

    @classmethod
    def parse(cls, value: Union["FittingStrategy", str]) -> "FittingStrategy":
        """Accept an enum member or its string value, case-insensitively."""
        if isinstance(value, cls):
            return value
        try:
            return cls(str(value).lower().replace("_", "-"))
        except ValueError:
            raise ValueError(
                f"Unknown fitting strategy {value!r}; expected one of "
                f"{', '.join(m.value for m in cls)}"
            ) from None


_STRATEGY_DESCRIPTIONS = {
    FittingStrategy.CSS: "minimize conditional sum-of-squares",
    FittingStrategy.ML: "exact maximum likelihood",
    FittingStrategy.CSS_ML: "minimize conditional sum-of-squares to find starting values "
                            "then maximum likelihood",
}


@dataclass(frozen=True)
class ArimaOrder:
    """Order of a seasonal ARIMA(p, d, q)(P, D, Q) model with trend terms.

    Attributes:
        p: Non-seasonal autoregressive order
        d: Non-seasonal differencing order
        q: Non-seasonal moving average order
        P: Seasonal autoregressive order
        D: Seasonal differencing order
        Q: Seasonal moving average order
        constant: Whether to estimate a mean. Defaults to INCLUDE for models
            without differencing and EXCLUDE otherwise
        drift: Whether to estimate a linear drift

    Raises:
        InvalidOrderError: If an order is negative or not an integer, if a
            constant is requested for a differenced model, or if drift is
            requested with more than one order of differencing
    """
    p: int = 0
    d: int = 0
    q: int = 0
    P: int = 0
    D: int = 0
    Q: int = 0
    constant: Optional[Constant] = None
    drift: Drift = Drift.EXCLUDE

    def __post_init__(self) -> None:
        for name in ("p", "d", "q", "P", "D", "Q"):
            object.__setattr__(self, name, validate_non_negative_int(
                getattr(self, name), name, error_cls=InvalidOrderError))

        differencing = self.d + self.D
        constant = self.constant
        if constant is None:
            constant = Constant.INCLUDE if differencing == 0 else Constant.EXCLUDE
        constant = Constant(constant)
        drift = Drift(self.drift)
        object.__setattr__(self, "constant", constant)
        object.__setattr__(self, "drift", drift)

        if constant.include and differencing > 0:
            raise InvalidOrderError(
                "A constant cannot be estimated for a differenced series",
                param_name="constant",
                param_value=constant.value,
                constraint="d + D == 0",
                details="Differencing removes the mean; include drift instead."
            )
        if drift.include and differencing > 1:
            raise InvalidOrderError(
                "Drift cannot be estimated with more than one order of differencing",
                param_name="drift",
                param_value=drift.value,
                constraint="d + D <= 1"
            )

    @classmethod
    def of(cls, non_seasonal: Tuple[int, int, int],
           seasonal: Tuple[int, int, int] = (0, 0, 0),
           constant: Optional[Constant] = None,
           drift: Drift = Drift.EXCLUDE) -> "ArimaOrder":
        """Build an order from ``(p, d, q)`` and ``(P, D, Q)`` tuples."""
        p, d, q = non_seasonal
        P, D, Q = seasonal
        return cls(p, d, q, P, D, Q, constant=constant, drift=drift)

    @property
    def is_seasonal(self) -> bool:
        return self.P > 0 or self.D > 0 or self.Q > 0

    @property
    def n_regressors(self) -> int:
        return int(self.drift.include) + int(self.constant.include)

    @property
    def n_coefficients(self) -> int:
        """Length of the flat coefficient vector."""
        return self.p + self.q + self.P + self.Q + self.n_regressors

    def lost_observations(self, seasonal_frequency: int) -> int:
        """Observations consumed by differencing."""
        return self.d + self.D * seasonal_frequency

    def conditioning_length(self, seasonal_frequency: int) -> int:
        """Leading residuals of the differenced series fixed at zero by CSS."""
        return self.p + self.P * seasonal_frequency

    def __str__(self) -> str:
        text = f"ARIMA({self.p},{self.d},{self.q})"
        if self.is_seasonal:
            text += f"({self.P},{self.D},{self.Q})"
        if self.constant.include:
            text += " with constant"
        if self.drift.include:
            text += " with drift"
        return text

"""Invariants of motion under a nonlinear (Danilov-Nagaitsev) lens.

For a lens embedded in a linear lattice with Twiss parameters (alpha, beta)
at its location, lens strength tn and scale cn, the transverse coordinates
are first normalized:

    xn  = x / (cn * sqrt(beta))
    pxn = px * sqrt(beta) / cn + alpha * x / (cn * sqrt(beta))

(same for y, py). With elliptic coordinates

    xi  = (|zn + 1| + |zn - 1|) / 2,    eta = (|zn + 1| - |zn - 1|) / 2,
    zn  = xn + i yn,
    f(xi)  = xi  * sqrt(xi**2 - 1) * arccosh(xi)
    g(eta) = eta * sqrt(1 - eta**2) * (arccos(eta) - pi/2)

the two invariants are

    H = (xn**2 + yn**2 + pxn**2 + pyn**2) / 2 + tn * (f + g) / (xi**2 - eta**2)
    I = (xn*pyn - yn*pxn)**2 + xn**2 + pxn**2
        + 2 * tn * (eta**2 * f + xi**2 * g) / (xi**2 - eta**2)

Both are singular at the lens poles zn = +-1, where nan/inf is returned.

Reference:
    V. Danilov and S. Nagaitsev, Phys. Rev. ST Accel. Beams 13, 084002 (2010)
"""

from __future__ import annotations

from dataclasses import dataclass
from typing import TYPE_CHECKING, Callable, Optional, Tuple

import numpy as np

from beamdiag.config.defaults import (
    DEFAULT_INVARIANT_ALPHA,
    DEFAULT_INVARIANT_BETA,
    DEFAULT_INVARIANT_CN,
    DEFAULT_INVARIANT_TN,
    DIAG_PREFIX,
)
from beamdiag.config.validation import validate_invariant_parameters, warn_if_unsafe

if TYPE_CHECKING:
    from beamdiag.config.parameters import ParameterStore

# calculator(x, y, px, py, alpha, beta, tn, cn) -> (H, I)
InvariantCalculator = Callable[..., Tuple[np.ndarray, np.ndarray]]


@dataclass(frozen=True)
class InvariantParameters:
    """Nonlinear lens model parameters, fixed for one diagnostic call.

    Attributes:
        alpha: Twiss alpha at the lens
        beta: Twiss beta at the lens (> 0)
        tn: Dimensionless lens strength
        cn: Lens scale parameter (!= 0)
    """

    alpha: float = DEFAULT_INVARIANT_ALPHA
    beta: float = DEFAULT_INVARIANT_BETA
    tn: float = DEFAULT_INVARIANT_TN
    cn: float = DEFAULT_INVARIANT_CN

    @classmethod
    def from_store(
        cls,
        store: Optional["ParameterStore"],
        prefix: str = DIAG_PREFIX,
    ) -> "InvariantParameters":
        """Read the four parameters from a run configuration store.

        Missing keys take the constants of beamdiag.config.defaults and are
        recorded in the store.
        """
        values = {}
        for name, default in (
            ("alpha", DEFAULT_INVARIANT_ALPHA),
            ("beta", DEFAULT_INVARIANT_BETA),
            ("tn", DEFAULT_INVARIANT_TN),
            ("cn", DEFAULT_INVARIANT_CN),
        ):
            if store is None:
                values[name] = float(default)
            else:
                values[name] = float(store.query_add(f"{prefix}.{name}", default))
        return cls(**values)

    def validate(self) -> "InvariantParameters":
        """Raise ConfigurationError if invalid, warn if unsafe; return self."""
        validate_invariant_parameters(self)
        warn_if_unsafe(self)
        return self

    def as_tuple(self) -> Tuple[float, float, float, float]:
        return (self.alpha, self.beta, self.tn, self.cn)


def nonlinear_lens_invariants(x, y, px, py, alpha, beta, tn, cn):
    """Compute the invariants (H, I) of a nonlinear lens.

    Works elementwise on scalars or NumPy arrays of equal shape.

    Args:
        x, y: Transverse positions
        px, py: Transverse momenta
        alpha, beta: Twiss parameters at the lens
        tn: Dimensionless lens strength
        cn: Lens scale parameter

    Returns:
        Tuple (H, I) with the broadcast shape of the inputs
    """
    x = np.asarray(x, dtype=np.float64)
    y = np.asarray(y, dtype=np.float64)
    px = np.asarray(px, dtype=np.float64)
    py = np.asarray(py, dtype=np.float64)

    sqrt_beta = np.sqrt(beta)
    scale = cn * sqrt_beta

    xn = x / scale
    yn = y / scale
    pxn = px * sqrt_beta / cn + alpha * x / scale
    pyn = py * sqrt_beta / cn + alpha * y / scale

    # elliptic coordinates; clip rounding noise off the domain edges
    r_plus = np.hypot(xn + 1.0, yn)
    r_minus = np.hypot(xn - 1.0, yn)
    xi = np.maximum(0.5 * (r_plus + r_minus), 1.0)
    eta = np.clip(0.5 * (r_plus - r_minus), -1.0, 1.0)

    f_xi = xi * np.sqrt(xi**2 - 1.0) * np.arccosh(xi)
    g_eta = eta * np.sqrt(1.0 - eta**2) * (np.arccos(eta) - 0.5 * np.pi)
    denom = xi**2 - eta**2

    with np.errstate(divide="ignore", invalid="ignore"):
        potential_h = (f_xi + g_eta) / denom
        potential_i = (eta**2 * f_xi + xi**2 * g_eta) / denom

    H = 0.5 * (xn**2 + yn**2 + pxn**2 + pyn**2) + tn * potential_h
    I = (xn * pyn - yn * pxn) ** 2 + xn**2 + pxn**2 + 2.0 * tn * potential_i
    return H, I


class NonlinearLensInvariants:
    """nonlinear_lens_invariants with the model parameters bound once.

    Example:
        >>> lens = NonlinearLensInvariants(InvariantParameters(tn=0.0, cn=1.0))
        >>> H, I = lens(0.0, 0.0, 0.0, 0.0)
    """

    def __init__(
        self,
        params: InvariantParameters,
        calculator: InvariantCalculator = nonlinear_lens_invariants,
    ):
        self.params = params
        self.calculator = calculator

    def __call__(self, x, y, px, py):
        return self.calculator(x, y, px, py, *self.params.as_tuple())

    def __repr__(self) -> str:
        return f"NonlinearLensInvariants({self.params!r})"

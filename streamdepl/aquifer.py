import numpy as np

from streamdepl.solutions import sdf
from streamdepl.streamdepl_exceptions import InvalidParameter


def _as_float(field, value):
    """coerce a parameter to a finite float or raise InvalidParameter"""
    try:
        v = float(value)
    except (TypeError, ValueError):
        raise InvalidParameter(field, value, "not a number")
    if not np.isfinite(v):
        raise InvalidParameter(field, value, "not finite")
    return v


def check_boundaries(boundaries, dist, field="boundaries"):
    """Validate impermeable boundary distances for a well at `dist`

    Parameters
    ----------
    boundaries: list-like of floats or None
        distance to each boundary [L]
    dist: float
        distance between the well and the stream [L]
    field: string
        name used in error messages

    Returns
    -------
    boundaries: tuple of floats
        in the order supplied, empty if boundaries is None
    """
    if boundaries is None:
        return ()
    if np.isscalar(boundaries):
        boundaries = [boundaries]
    checked = []
    for i, W in enumerate(boundaries):
        name = f"{field}[{i}]"
        W = _as_float(name, W)
        if W <= 0:
            raise InvalidParameter(name, W, "must be > 0")
        # image well would sit on the stream
        if np.isclose(2.0 * W, dist, rtol=1e-12, atol=0.0):
            raise InvalidParameter(
                name, W, f"coincides with half the well distance {dist}"
            )
        checked.append(W)
    return tuple(checked)


class AquiferParameters:
    """Validated, read-only aquifer and well geometry parameters

    Units are not specified but must be consistent with the pumping
    schedule (e.g. feet and days).

    Parameters
    ----------
    T: float
        transmissivity [L**2/T], > 0
    S: float
        storage coefficient or specific yield [unitless], > 0
    dist: float
        distance between the well and the stream [L], >= 0
    boundaries: list of floats, optional
        distance to each impermeable aquifer boundary [L], each > 0
        and not equal to dist/2
    """

    __slots__ = ("_T", "_S", "_dist", "_boundaries")

    def __init__(self, T, S, dist, boundaries=None) -> None:
        T = _as_float("T", T)
        if T <= 0:
            raise InvalidParameter("T", T, "must be > 0")
        S = _as_float("S", S)
        if S <= 0:
            raise InvalidParameter("S", S, "must be > 0")
        dist = _as_float("dist", dist)
        if dist < 0:
            raise InvalidParameter("dist", dist, "must be >= 0")
        self._T = T
        self._S = S
        self._dist = dist
        self._boundaries = check_boundaries(boundaries, dist)

    @property
    def T(self):
        return self._T

    @property
    def S(self):
        return self._S

    @property
    def dist(self):
        return self._dist

    @property
    def boundaries(self):
        return self._boundaries

    @property
    def sdf(self):
        """stream depletion factor dist**2 * S / T [T]"""
        return sdf(self._T, self._S, self._dist)

    def __eq__(self, other):
        if not isinstance(other, AquiferParameters):
            return NotImplemented
        return (self.T, self.S, self.dist, self.boundaries) == (
            other.T,
            other.S,
            other.dist,
            other.boundaries,
        )

    def __hash__(self):
        return hash((self.T, self.S, self.dist, self.boundaries))

    def __repr__(self):
        return (
            f"AquiferParameters(T={self.T}, S={self.S}, dist={self.dist}, "
            f"boundaries={list(self.boundaries)})"
        )

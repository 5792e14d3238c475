"""Depletion method variants and the unit step response dispatch

The set of methods is closed: `unit_step_response` matches on the
variant type rather than calling into the method object, so every
solution is wired up in one place.
"""

import numpy as np
import pandas as pd

from streamdepl.aquifer import _as_float, check_boundaries
from streamdepl.solutions import (
    _check_urf_table,
    glover_alluvial_depletion,
    glover_depletion,
    sdf_depletion,
    urf_depletion,
)
from streamdepl.streamdepl_exceptions import InvalidParameter, StreamDeplException


class GloverInfinite:
    """Glover and Balmer (1954) solution for an infinite aquifer"""

    name = "glover_depletion"

    def __repr__(self):
        return "GloverInfinite()"


class GloverAlluvialImage:
    """Glover solution for an alluvial aquifer bounded by impermeable
    boundaries, represented by image wells

    Parameters
    ----------
    boundaries: list of floats, optional
        distance to each boundary [L]. If None, the boundaries on the
        AquiferParameters are used.
    """

    name = "glover_alluvial_depletion"

    def __init__(self, boundaries=None) -> None:
        if boundaries is not None:
            if np.isscalar(boundaries):
                boundaries = [boundaries]
            boundaries = tuple(boundaries)
        self.boundaries = boundaries

    def __repr__(self):
        return f"GloverAlluvialImage(boundaries={self.boundaries})"


class JenkinsSDF:
    """Jenkins (1968) Stream Depletion Factor method

    Parameters
    ----------
    sdf: float, optional
        stream depletion factor [T]. If None it is computed from the
        AquiferParameters as dist**2 * S / T.
    """

    name = "sdf_depletion"

    def __init__(self, sdf=None) -> None:
        if sdf is not None:
            sdf = _as_float("sdf", sdf)
            if sdf <= 0:
                raise InvalidParameter("sdf", sdf, "must be > 0")
        self.sdf = sdf

    def __repr__(self):
        return f"JenkinsSDF(sdf={self.sdf})"


class UnitResponseFunction:
    """Tabulated unit response function

    Parameters
    ----------
    times: list-like of floats
        strictly increasing table times, dimensionless
        (t * T / (S * dist**2)) unless dimensionless is False
    fractions: list-like of floats
        depletion fraction of a unit sustained pumping rate at each time
    dimensionless: bool
        if False, table times are in model time units. Defaults to True.
    """

    name = "urf_depletion"

    def __init__(self, times, fractions, dimensionless=True) -> None:
        times, fractions = _check_urf_table(times, fractions)
        times = times.copy()
        fractions = fractions.copy()
        times.flags.writeable = False
        fractions.flags.writeable = False
        self.times = times
        self.fractions = fractions
        self.dimensionless = bool(dimensionless)

    @classmethod
    def from_csv(
        cls, filename, time_col="time", fraction_col="fraction", dimensionless=True
    ):
        """Read a unit response table from a CSV file

        Parameters
        ----------
        filename: string or pathlib.Path
            CSV file with (at least) a time and a fraction column
        time_col: string
            name of the time column. Defaults to 'time'.
        fraction_col: string
            name of the fraction column. Defaults to 'fraction'.
        dimensionless: bool
            passed through to the constructor
        """
        df = pd.read_csv(filename)
        missing = [c for c in (time_col, fraction_col) if c not in df.columns]
        if len(missing) > 0:
            raise StreamDeplException(
                f"columns {', '.join(missing)} not found in {filename}"
            )
        return cls(
            df[time_col].values, df[fraction_col].values, dimensionless=dimensionless
        )

    def __repr__(self):
        return (
            f"UnitResponseFunction({len(self.times)} entries, "
            f"dimensionless={self.dimensionless})"
        )


def unit_step_response(method, elapsed, params):
    """Depletion fraction for a unit pumping rate sustained from time 0

    Parameters
    ----------
    method: GloverInfinite, GloverAlluvialImage, JenkinsSDF or UnitResponseFunction
        depletion method variant
    elapsed: float, optionally np.array or list
        elapsed time since pumping started [T]; zero response for
        elapsed <= 0
    params: AquiferParameters
        aquifer properties and well geometry

    Returns
    -------
    fraction: float or np.array
        depletion fraction, scalar for scalar elapsed
    """
    if isinstance(method, GloverInfinite):
        return glover_depletion(params.T, params.S, elapsed, params.dist, 1.0)
    elif isinstance(method, GloverAlluvialImage):
        if method.boundaries is None:
            boundaries = params.boundaries
        else:
            boundaries = check_boundaries(method.boundaries, params.dist)
        return glover_alluvial_depletion(
            params.T, params.S, elapsed, params.dist, 1.0, boundaries=boundaries
        )
    elif isinstance(method, JenkinsSDF):
        return sdf_depletion(
            params.T, params.S, elapsed, params.dist, 1.0, sdf_value=method.sdf
        )
    elif isinstance(method, UnitResponseFunction):
        return urf_depletion(
            params.T,
            params.S,
            elapsed,
            params.dist,
            1.0,
            urf_time=method.times,
            urf_fraction=method.fractions,
            dimensionless=method.dimensionless,
        )
    raise StreamDeplException(f"unknown depletion method: {method!r}")


ALL_METHODS = {
    GloverInfinite.name: GloverInfinite,
    GloverAlluvialImage.name: GloverAlluvialImage,
    JenkinsSDF.name: JenkinsSDF,
    UnitResponseFunction.name: UnitResponseFunction,
}


def make_method(depl_method, boundaries=None, sdf=None, urf=None):
    """Build a depletion method variant from its configuration name

    Parameters
    ----------
    depl_method: string
        one of the keys of ALL_METHODS
    boundaries: list of floats, optional
        boundary distances for glover_alluvial_depletion. If None the
        AquiferParameters boundaries are used at evaluation time.
    sdf: float, optional
        stream depletion factor for sdf_depletion
    urf: UnitResponseFunction or string or pathlib.Path, optional
        table (or CSV file holding it) for urf_depletion
    """
    key = depl_method.lower()
    if key not in ALL_METHODS:
        raise StreamDeplException(
            f"unknown depletion method: {depl_method}\n"
            + "available methods are: "
            + ", ".join(ALL_METHODS.keys())
        )
    if key == GloverInfinite.name:
        return GloverInfinite()
    elif key == GloverAlluvialImage.name:
        return GloverAlluvialImage(boundaries)
    elif key == JenkinsSDF.name:
        return JenkinsSDF(sdf)
    if urf is None:
        raise StreamDeplException(
            "urf_depletion requires a unit response table or urf_file"
        )
    if isinstance(urf, UnitResponseFunction):
        return urf
    return UnitResponseFunction.from_csv(urf)

import numpy as np
import scipy.special as sps

from streamdepl.streamdepl_exceptions import OutOfRangeTable, StreamDeplException

""" File of stream depletion analytical solutions
    as part of the streamdepl suite.

"""


def _time_dist_error(funcname):
    """Function for trying to call both time and distance
    as arrays in a function
    """
    raise StreamDeplException(
        "cannot have both time and distance as arrays\n"
        + f"in the {funcname} method.  Need to externally loop\n"
        + "over one of the arrays and pass the other"
    )


def _make_arrays(a):
    """private function to force values to
    arrays from lists or scalars
    """
    return np.atleast_1d(a).astype(float)


def _unpack(a):
    """return a scalar for single-valued results"""
    if len(a) == 1:
        return a[0]
    return a


def _check_nones(all_vars, var_dict):
    """Function to check if any of the required parameters are
    set to None (default) value.

    Parameters
    ----------
    all_vars: dictionary
        dictionary of variable values passed from calling
        routine, can be generated using locals()
    var_dict: dictionary
        key is the function name and value is a list of
        required parameter names.
    """
    fxn_name = list(var_dict.keys())[0]

    nonevars = {
        k: v
        for k, v in all_vars.items()
        if (k in var_dict[fxn_name]) & (v is None)
    }
    if len(nonevars) > 0:
        raise StreamDeplException(
            f"The function: {fxn_name} requires the following\n"
            + "additional arguments which were missing\n"
            + "in the function call:\n"
            + ", ".join(nonevars.keys())
        )


def erfc(x):
    """Complementary error function

    Thin wrapper on scipy.special.erfc that returns a float for scalar
    input. Values are 1.0 at x=0 and underflow to exactly 0.0 for large
    x (including inf).

    Parameters
    ----------
    x: float, optionally np.array or list
        argument, non-negative for all depletion solutions

    Returns
    -------
    erfc: float or np.array
    """
    scalar = np.isscalar(x)
    x = _make_arrays(x)
    if np.any(np.isnan(x)):
        raise StreamDeplException("erfc argument is NaN")
    y = sps.erfc(x)
    if scalar:
        return float(y[0])
    return y


def _depletion_fraction(sdf_value, time):
    """fraction of a unit sustained pumping rate captured from the stream
    after `time`, for a stream depletion factor `sdf_value`

    erfc(sqrt(sdf / (4 t))), zero for t <= 0. Every erfc-based solution
    goes through here so they agree exactly.
    """
    sdf_value, time = np.broadcast_arrays(
        _make_arrays(sdf_value), _make_arrays(time)
    )
    frac = np.zeros(time.shape)
    on = time > 0
    frac[on] = erfc(np.sqrt(sdf_value[on] / (4.0 * time[on])))
    return frac


def _check_urf_table(urf_time, urf_fraction):
    """validate a unit response function table and return it as arrays"""
    urf_time = np.atleast_1d(np.asarray(urf_time, dtype=float))
    urf_fraction = np.atleast_1d(np.asarray(urf_fraction, dtype=float))
    if urf_time.ndim != 1 or urf_fraction.ndim != 1:
        raise OutOfRangeTable("time and fraction must be one-dimensional")
    if len(urf_time) == 0:
        raise OutOfRangeTable("table is empty")
    if len(urf_time) != len(urf_fraction):
        raise OutOfRangeTable(
            f"{len(urf_time)} times but {len(urf_fraction)} fractions"
        )
    if np.any(np.isnan(urf_time)) or np.any(np.isnan(urf_fraction)):
        raise OutOfRangeTable("table contains NaN values")
    if np.any(np.diff(urf_time) <= 0):
        raise OutOfRangeTable("table times are not strictly increasing")
    return urf_time, urf_fraction


def _urf_fraction(urf_time, urf_fraction, time, time_scale=1.0):
    """linear interpolation of a unit response table at time / time_scale

    zero for t <= 0 and below the first table time, the final
    fraction beyond the last table time
    """
    time_scale, time = np.broadcast_arrays(
        _make_arrays(time_scale), _make_arrays(time)
    )
    frac = np.zeros(time.shape)
    on = time > 0
    # a zero time scale sends every positive time to the end of the table
    with np.errstate(divide="ignore"):
        scaled = time[on] / time_scale[on]
    frac[on] = np.interp(
        scaled, urf_time, urf_fraction, left=0.0, right=urf_fraction[-1]
    )
    return frac


# define stream depletion methods here
def glover_depletion(T, S, time, dist, Q, **kwargs):
    """
    Calculate Glover and Balmer (1954) solution for stream depletion

    Depletion solution for a well near a river where the river fully
    penetrates the aquifer and there is no streambed resistance.

    Glover, R.E. and Balmer, G.G., 1954, River depletion from pumping
    a well near a river, Eos Transactions of the American Geophysical Union,
    v. 35, no. 3, pg. 468-470, https://doi.org/10.1029/TR035i003p00468.

    Parameters
    ----------
    T: float
        transmissivity [L**2/T]
    S: float
        storage [unitless]
    time: float, optionally np.array or list
        time at which to calculate results [T]
    dist: float, optionally np.array or list
        distance at which to calculate results in [L]
    Q: float
        pumping rate (+ is extraction) [L**3/T]
    **kwargs: included to all depletion methods for extra values required in some calls

    Returns
    -------
    depletion: float
        depletion values at at input parameter times/distances
    """
    # turn lists into np.array so they get handled correctly
    time = _make_arrays(time)
    dist = _make_arrays(dist)
    if len(dist) > 1 and len(time) > 1:
        _time_dist_error("glover_depletion")

    return _unpack(Q * _depletion_fraction(sdf(T, S, dist), time))


def glover_alluvial_depletion(
    T, S, time, dist, Q, boundaries=None, **kwargs
):
    """
    Glover solution for a bounded alluvial aquifer using image wells

    Each impermeable boundary at distance W adds the depletion from an
    image well located 2W - dist from the stream. Boundaries are summed
    in the order supplied. With no boundaries this is exactly
    `glover_depletion`.

    Glover, R.E., 1977, Transient ground water hydraulics: Water Resources
    Publications, Fort Collins, Colorado.

    Parameters
    ----------
    T: float
        transmissivity [L**2/T]
    S: float
        storage [unitless]
    time: float, optionally np.array or list
        time at which to calculate results [T]
    dist: float, optionally np.array or list
        distance between the well and the stream [L]
    Q: float
        pumping rate (+ is extraction) [L**3/T]
    boundaries: list of floats, optional
        distance to each impermeable aquifer boundary [L]
    **kwargs: included to all depletion methods for extra values required in some calls

    Returns
    -------
    depletion: float
        depletion values at at input parameter times/distances
    """
    time = _make_arrays(time)
    dist = _make_arrays(dist)
    if len(dist) > 1 and len(time) > 1:
        _time_dist_error("glover_alluvial_depletion")

    frac = _depletion_fraction(sdf(T, S, dist), time)
    if boundaries is not None:
        for W in boundaries:
            frac = frac + _depletion_fraction(sdf(T, S, 2.0 * W - dist), time)
    return _unpack(Q * frac)


def sdf(T, S, dist, **kwargs):
    """
    internal function for Stream Depletion Factor

    Stream Depletion Factor was defined by Jenkins (1968) and described
    in Jenkins as the time when the volume of stream depletion is
    28 percent of the net volume pumped from the well.
    SDF = dist**2 * S/T.

    Jenkins, C.T., Computation of rate and volume of stream depletion
    by wells: U.S. Geological Survey Techniques of Water-Resources
    Investigations, Chapter D1, Book 4, https://pubs.usgs.gov/twri/twri4d1/.

    Parameters
    ----------
    T: float
        transmissivity [L**2/T]
    S: float
        storage [unitless]
    dist: float, optionally np.array or list
        distance at which to calculate results in [L]
    **kwargs: included to all depletion methods for extra values required in some calls

    Returns
    -------
    SDF: float
        Stream depletion factor [T]
    """
    if isinstance(dist, list):
        dist = np.array(dist)
    return dist**2 * S / T


def sdf_depletion(T, S, time, dist, Q, sdf_value=None, **kwargs):
    """
    Jenkins (1968) stream depletion using the Stream Depletion Factor

    Depletion is Q * erfc(sqrt(SDF / (4 t))). SDF is computed from
    T, S and dist unless it is supplied directly as `sdf_value`, which
    is how SDF maps are usually published.

    Parameters
    ----------
    T: float
        transmissivity [L**2/T]
    S: float
        storage [unitless]
    time: float, optionally np.array or list
        time at which to calculate results [T]
    dist: float, optionally np.array or list
        distance between the well and the stream [L]
    Q: float
        pumping rate (+ is extraction) [L**3/T]
    sdf_value: float, optional
        stream depletion factor [T], overrides T, S and dist
    **kwargs: included to all depletion methods for extra values required in some calls

    Returns
    -------
    depletion: float
        depletion values at at input parameter times/distances
    """
    time = _make_arrays(time)
    if sdf_value is None:
        dist = _make_arrays(dist)
        if len(dist) > 1 and len(time) > 1:
            _time_dist_error("sdf_depletion")
        sdf_value = sdf(T, S, dist)
    return _unpack(Q * _depletion_fraction(sdf_value, time))


def urf_depletion(
    T,
    S,
    time,
    dist,
    Q,
    urf_time=None,
    urf_fraction=None,
    dimensionless=True,
    **kwargs,
):
    """
    Stream depletion from a tabulated unit response function (URF)

    The table gives the depletion fraction of a unit sustained pumping
    rate against time. Values between table entries are linearly
    interpolated, times before the first entry give zero depletion and
    times after the last entry give the final fraction.

    Parameters
    ----------
    T: float
        transmissivity [L**2/T]
    S: float
        storage [unitless]
    time: float, optionally np.array or list
        time at which to calculate results [T]
    dist: float, optionally np.array or list
        distance between the well and the stream [L]
    Q: float
        pumping rate (+ is extraction) [L**3/T]
    urf_time: list-like of floats
        table times, strictly increasing. Dimensionless
        (t * T / (S * dist**2)) unless dimensionless is False [-] or [T]
    urf_fraction: list-like of floats
        depletion fraction at each table time [-]
    dimensionless: bool
        if False, table times are in the same units as time.
        Defaults to True.
    **kwargs: included to all depletion methods for extra values required in some calls

    Returns
    -------
    depletion: float
        depletion values at at input parameter times/distances
    """
    _check_nones(locals(), {"urf_depletion": ["urf_time", "urf_fraction"]})
    urf_time, urf_fraction = _check_urf_table(urf_time, urf_fraction)

    time = _make_arrays(time)
    dist = _make_arrays(dist)
    if len(dist) > 1 and len(time) > 1:
        _time_dist_error("urf_depletion")

    if dimensionless:
        time_scale = sdf(T, S, dist)
    else:
        time_scale = 1.0
    return _unpack(
        Q * _urf_fraction(urf_time, urf_fraction, time, time_scale)
    )


def _calc_deltaQ(Q):
    """internal function to parse the Q time series to find changes and their associated times

    Parameters
    ----------
    Q: pandas Series
        time series of pumping

    Returns
    -------
    deltaQ: pandas Series
        times and changes in Q over time, only nonzero changes kept
    """
    # find the differences in pumping
    dq = Q.astype(float).copy()
    dq.iloc[1:] = np.diff(Q)
    # get the locations of changes
    return dq.loc[dq != 0].copy()


# List depletion methods so they can be called
# programatically
ALL_DEPL_METHODS = {
    "glover_depletion": glover_depletion,
    "glover_alluvial_depletion": glover_alluvial_depletion,
    "sdf_depletion": sdf_depletion,
    "urf_depletion": urf_depletion,
}

GPM2CFD = 60 * 24 / 7.48  # factor to convert from GPM to CFD
CFD2GPM = 1 / GPM2CFD  # factor to convert from CFD to GPM
SEC2DAY = 60 * 60 * 24  # factor to conver x/sec to x/day
AF2CF = 43560.0  # cubic feet per acre-foot
GPD2CFD = 1 / 7.481  # gal/day/ft transmissivity to ft**2/day
DAYS_PER_MONTH = 30.42  # average month length

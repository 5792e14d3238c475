import numpy as np
import pandas as pd

from streamdepl.aquifer import AquiferParameters
from streamdepl.methods import make_method, unit_step_response
from streamdepl.solutions import DAYS_PER_MONTH, _calc_deltaQ
from streamdepl.streamdepl_exceptions import (
    EmptySchedule,
    InvalidParameter,
    NonPositivePeriodLength,
)
from streamdepl.utilities import month_starts, monthly_volumes_to_rates

# relative size of negative values treated as roundoff in superposition
ROUNDOFF_TOL = 1e-12


class PumpingSchedule:
    """Monthly pumping rates, one entry per period starting at period 0

    Parameters
    ----------
    rates: list-like or pandas Series of floats
        pumping rate in each period [L**3/T], finite and >= 0. Zero
        means no pumping in that period. A Series is taken in order,
        its index is ignored.
    period_length: float
        length of each period [T]. Defaults to 30.42 days.
    start_date: date-like, optional
        any date in the first month, used to date results
    """

    __slots__ = ("_rates", "_period_length", "_start_date")

    def __init__(self, rates, period_length=DAYS_PER_MONTH, start_date=None):
        if isinstance(rates, pd.Series):
            rates = rates.values
        try:
            rates = np.array(rates, dtype=float)
        except (TypeError, ValueError):
            raise InvalidParameter("rates", rates, "not numeric")
        rates = np.atleast_1d(rates)
        if rates.ndim != 1:
            raise InvalidParameter("rates", rates.shape, "must be one-dimensional")
        bad = np.where(~np.isfinite(rates) | (rates < 0))[0]
        if len(bad) > 0:
            i = int(bad[0])
            raise InvalidParameter(f"rates[{i}]", rates[i], "must be finite and >= 0")
        rates.flags.writeable = False
        self._rates = rates
        self._period_length = period_length
        if start_date is not None:
            start_date = month_starts(start_date, 1)[0]
        self._start_date = start_date

    @classmethod
    def from_monthly_volumes(
        cls, volumes, days_per_month=DAYS_PER_MONTH, conversion=None
    ):
        """Build a schedule from dated monthly pumped volumes

        Parameters
        ----------
        volumes: pandas Series
            volume pumped each month (acre-ft by default), indexed by
            any date within the month. Months missing between the
            first and last entries are no-pumping months. Repeated
            months are summed.
        days_per_month: float
            month length and period length. Defaults to 30.42 days.
        conversion: float, optional
            volume units to rate volume units. Defaults to cubic feet
            per acre-foot.
        """
        kwargs = {} if conversion is None else {"conversion": conversion}
        if len(volumes) == 0:
            return cls([], period_length=days_per_month)
        months = pd.DatetimeIndex(volumes.index).to_period("M").to_timestamp()
        monthly = volumes.groupby(months).sum().sort_index()
        first, last = monthly.index[0], monthly.index[-1]
        n = (last.year - first.year) * 12 + last.month - first.month + 1
        full = month_starts(first, n)
        monthly = monthly.reindex(full, fill_value=0.0)
        rates = monthly_volumes_to_rates(monthly.values, days_per_month, **kwargs)
        return cls(rates, period_length=days_per_month, start_date=full[0])

    @property
    def rates(self):
        return self._rates.copy()

    @property
    def period_length(self):
        return self._period_length

    @property
    def start_date(self):
        return self._start_date

    @property
    def deltaQ(self):
        """nonzero step changes in rate, indexed by the period they start"""
        return _calc_deltaQ(self.to_series())

    def to_series(self):
        return pd.Series(
            self._rates.copy(),
            index=pd.RangeIndex(len(self._rates), name="period"),
            name="Q",
        )

    def __len__(self):
        return len(self._rates)

    def __iter__(self):
        return iter(zip(range(len(self._rates)), self._rates.tolist()))

    def __repr__(self):
        return (
            f"PumpingSchedule({len(self)} periods, "
            f"period_length={self._period_length})"
        )


class TimeSeriesResult:
    """Stream depletion rate for each evaluation period, read-only

    Parameters
    ----------
    depletion: list-like of floats
        depletion rate at the end of each period [L**3/T]
    period_length: float
        length of each period [T]
    start_date: pandas Timestamp, optional
        first day of period 0
    method: string, optional
        name of the depletion method used
    """

    __slots__ = ("_depletion", "_period_length", "_start_date", "_method")

    def __init__(self, depletion, period_length, start_date=None, method=None):
        depletion = np.array(depletion, dtype=float)
        depletion.flags.writeable = False
        self._depletion = depletion
        self._period_length = period_length
        self._start_date = start_date
        self._method = method

    @property
    def depletion(self):
        return self._depletion.copy()

    @property
    def time_index(self):
        return np.arange(len(self._depletion))

    @property
    def period_length(self):
        return self._period_length

    @property
    def start_date(self):
        return self._start_date

    @property
    def method(self):
        return self._method

    @property
    def max_depletion(self):
        return float(np.max(self._depletion))

    @property
    def total_volume(self):
        """total depleted volume over the horizon [L**3]"""
        return float(np.sum(self.volumes()))

    def volumes(self):
        """depleted volume in each period [L**3]"""
        return self._depletion * self._period_length

    def to_series(self):
        """depletion as a pandas Series, dated by month if start_date is set"""
        if self._start_date is not None:
            index = month_starts(self._start_date, len(self._depletion))
        else:
            index = pd.RangeIndex(len(self._depletion), name="period")
        return pd.Series(self._depletion.copy(), index=index, name="depletion")

    def __len__(self):
        return len(self._depletion)

    def __iter__(self):
        return iter(zip(range(len(self._depletion)), self._depletion.tolist()))

    def __getitem__(self, idx):
        """depletion rate at a period index, or a copy of the rates for a slice"""
        if isinstance(idx, slice):
            return self._depletion[idx].copy()
        return float(self._depletion[idx])

    def __repr__(self):
        return (
            f"TimeSeriesResult({len(self)} periods, method={self._method}, "
            f"max_depletion={self.max_depletion:.6g})"
        )


def compute(
    method,
    params,
    schedule,
    horizon=None,
    period_length=None,
    hold_final_rate=True,
):
    """Superpose unit step responses to get depletion from a pumping schedule

    Each change in pumping rate dQ_k = Q_k - Q_(k-1) at the start of
    period k is a new step of pumping, so the depletion rate at the
    end of period tau is

        Qs(tau) = sum_k dQ_k * U((tau - k + 1) * period_length)

    where U is the unit step response of the method. U is computed
    once for the whole horizon and shifted and scaled for each step.
    Units must be consistent between params, schedule and period_length.

    Parameters
    ----------
    method: GloverInfinite, GloverAlluvialImage, JenkinsSDF or UnitResponseFunction
        depletion method variant
    params: AquiferParameters
        aquifer properties and well geometry
    schedule: PumpingSchedule
        monthly pumping rates [L**3/T]
    horizon: int, optional
        number of periods to evaluate. Defaults to the schedule length.
    period_length: float, optional
        overrides schedule.period_length [T]
    hold_final_rate: bool
        if True (default), pumping continues at the last scheduled rate
        for periods past the end of the schedule. If False pumping
        stops after the last scheduled period.

    Returns
    -------
    result: TimeSeriesResult
        depletion rate at the end of each period [L**3/T]
    """
    if len(schedule) == 0:
        raise EmptySchedule()
    if period_length is None:
        period_length = schedule.period_length
    try:
        pl = float(period_length)
    except (TypeError, ValueError):
        raise NonPositivePeriodLength(period_length)
    if not np.isfinite(pl) or pl <= 0:
        raise NonPositivePeriodLength(period_length)
    if horizon is None:
        horizon = len(schedule)
    if (
        isinstance(horizon, bool)
        or not isinstance(horizon, (int, np.integer))
        or horizon < 1
    ):
        raise InvalidParameter("horizon", horizon, "must be a positive integer")
    horizon = int(horizon)

    Q = schedule.to_series().iloc[:horizon]
    deltaQ = _calc_deltaQ(Q)
    if not hold_final_rate and len(schedule) < horizon and Q.iloc[-1] != 0:
        deltaQ.loc[len(schedule)] = -Q.iloc[-1]

    # elapsed time from the start of a period to the end of each later period
    elapsed = np.arange(1, horizon + 1) * pl
    unit_response = np.atleast_1d(unit_step_response(method, elapsed, params))

    depl = np.zeros(horizon)
    for idx, cQ in zip(deltaQ.index, deltaQ.values):
        n = horizon - idx
        depl[idx:] += cQ * unit_response[:n]

    # cancelling steps can leave roundoff just below zero
    depl[(depl < 0) & (depl > -ROUNDOFF_TOL * np.max(Q.values))] = 0.0

    return TimeSeriesResult(
        depl,
        period_length=pl,
        start_date=schedule.start_date,
        method=getattr(method, "name", None),
    )


class Well:
    """Object to evaluate stream depletion from a single pumping well

    Builds the AquiferParameters, depletion method and PumpingSchedule
    from plain values so a well can be set up from a configuration
    file in one call.

    Parameters
    ----------
    name: string
        well name
    T: float
        Aquifer Transmissivity [L**2/T]
    S: float
        Aquifer Storage [unitless]
    dist: float
        Distance between well and stream [L]
    Q: list-like, pandas Series or PumpingSchedule
        monthly pumping rates [L**3/T]
    depl_method: string, optional
        Method to be used for depletion calculations.
        Defaults to 'glover_depletion'.
    boundaries: list of floats, optional
        distance to impermeable boundaries [L], used by
        glover_alluvial_depletion
    sdf: float, optional
        stream depletion factor [T], used by sdf_depletion
    urf: UnitResponseFunction, string or pathlib.Path, optional
        unit response table or its CSV file, used by urf_depletion
    period_length: float, optional
        length of each period [T]. Defaults to 30.42.
    horizon: int, optional
        number of periods to evaluate. Defaults to the schedule length.
    start_date: date-like, optional
        date in the first month of pumping
    hold_final_rate: bool, optional
        keep pumping at the last rate past the end of the schedule.
        Defaults to True.
    """

    def __init__(
        self,
        name,
        T,
        S,
        dist,
        Q,
        depl_method="glover_depletion",
        boundaries=None,
        sdf=None,
        urf=None,
        period_length=DAYS_PER_MONTH,
        horizon=None,
        start_date=None,
        hold_final_rate=True,
    ) -> None:
        self._depletion = None
        self.name = name
        self.depl_method = depl_method
        self.params = AquiferParameters(T, S, dist, boundaries)
        self.method = make_method(depl_method, sdf=sdf, urf=urf)
        if isinstance(Q, PumpingSchedule):
            self.schedule = Q
        else:
            self.schedule = PumpingSchedule(
                Q, period_length=period_length, start_date=start_date
            )
        self.horizon = horizon
        self.hold_final_rate = hold_final_rate

    @property
    def depletion(self):
        if self._depletion is None:
            self._depletion = compute(
                self.method,
                self.params,
                self.schedule,
                horizon=self.horizon,
                hold_final_rate=self.hold_final_rate,
            )
        return self._depletion

    @property
    def max_depletion(self):
        return self.depletion.max_depletion

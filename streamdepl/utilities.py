import numpy as np
import pandas as pd

from streamdepl.solutions import AF2CF, DAYS_PER_MONTH
from streamdepl.streamdepl_exceptions import StreamDeplException


def Q2ts(pumping_months, years, Q):
    """Function to convert annual pumping to a monthly time series

    Pumping occurs at rate Q in the first `pumping_months` months of
    every year and is zero for the rest of the year.

    Parameters
    ----------
    pumping_months: int
        number of months per year the well pumps, 0 to 12
    years: int
        number of years in the series
    Q: float
        pumping rate while pumping [L**3/T]

    Returns
    -------
    Q: pandas Series
        monthly pumping rate, index `period` starting at 0
    """
    if not 0 <= pumping_months <= 12:
        raise StreamDeplException(
            f"pumping_months must be between 0 and 12, got {pumping_months}"
        )
    one_year = np.zeros(12)
    one_year[: int(pumping_months)] = Q
    vals = np.tile(one_year, int(years))
    return pd.Series(vals, index=pd.RangeIndex(len(vals), name="period"))


def create_timeseries_template(filename, well_ids, n_periods=120):
    """Write a template pumping time series CSV file with zero pumping

    Parameters
    ----------
    filename: string or pathlib.Path
        output CSV file
    well_ids: list of strings
        well names, one column each
    n_periods: int
        number of monthly periods. Defaults to 120.
    """
    df = pd.DataFrame(
        index=pd.RangeIndex(n_periods, name="period"),
        columns=well_ids,
        data=0.0,
    )
    df.to_csv(filename)


def month_starts(start_date, n):
    """first day of `n` consecutive months, starting with the month
    containing start_date
    """
    start = pd.Timestamp(start_date).to_period("M").to_timestamp()
    return pd.date_range(start=start, periods=n, freq="MS", name="date")


def monthly_volumes_to_rates(
    volumes, days_per_month=DAYS_PER_MONTH, conversion=AF2CF
):
    """Convert monthly pumped volumes to average pumping rates

    Parameters
    ----------
    volumes: float, list-like or pandas Series
        volume pumped each month (e.g. acre-ft)
    days_per_month: float
        month length. Defaults to 30.42 days.
    conversion: float
        factor from the volume units to the rate volume units.
        Defaults to cubic feet per acre-foot.

    Returns
    -------
    rates: same type as volumes (lists return np.array)
        e.g. ft**3/day
    """
    if isinstance(volumes, list):
        volumes = np.array(volumes, dtype=float)
    return volumes * conversion / days_per_month


def rates_to_monthly_volumes(
    rates, days_per_month=DAYS_PER_MONTH, conversion=AF2CF
):
    """Inverse of monthly_volumes_to_rates"""
    if isinstance(rates, list):
        rates = np.array(rates, dtype=float)
    return rates * days_per_month / conversion

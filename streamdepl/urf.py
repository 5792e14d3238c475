import pandas as pd

from streamdepl.streamdepl_exceptions import OutOfRangeTable

URF_COLUMNS = ["month", "reach", "urf_val"]


def _check_monthly_urf(urf):
    """coerce a monthly URF table to a DataFrame and check its columns"""
    if not isinstance(urf, pd.DataFrame):
        urf = pd.DataFrame(urf)
    missing = [c for c in URF_COLUMNS if c not in urf.columns]
    if len(missing) > 0:
        raise OutOfRangeTable(f"missing columns: {', '.join(missing)}")
    if len(urf) == 0:
        raise OutOfRangeTable("table is empty")
    if urf[URF_COLUMNS].isnull().values.any():
        raise OutOfRangeTable("table contains missing values")
    return urf


def urf_lagging(usage, urf):
    """Lag monthly usage through a per-reach monthly unit response function

    Each reach has a sequence of monthly factors: factor i (ordered by
    `month`) is the fraction of a month's usage that shows up as
    depletion in that reach i months later, with the first factor
    landing in the usage month itself.

    Parameters
    ----------
    usage: pandas Series
        monthly usage volume, indexed by a date within each month.
        Months without an entry contribute nothing.
    urf: pandas DataFrame or list of dicts
        columns `month`, `reach` and `urf_val`

    Returns
    -------
    lagged: pandas DataFrame
        lagged depletion volume, indexed by month-start date, one column
        per reach in order of first appearance in the table
    """
    urf = _check_monthly_urf(urf)
    months = pd.DatetimeIndex(usage.index).to_period("M").to_timestamp()
    usage = usage.groupby(months).sum().sort_index()

    lagged = {}
    for reach, grp in urf.groupby("reach", sort=False):
        factors = grp.sort_values("month", kind="stable")["urf_val"].values
        reach_lagged = {}
        for usage_date, volume in usage.items():
            for i, factor in enumerate(factors):
                urf_date = usage_date + pd.DateOffset(months=i)
                reach_lagged[urf_date] = (
                    reach_lagged.get(urf_date, 0.0) + volume * factor
                )
        lagged[reach] = pd.Series(reach_lagged, dtype=float)

    lagged = pd.DataFrame(lagged).sort_index().fillna(0.0)
    lagged.index.name = "date"
    return lagged


def combined_urf_results(lagged):
    """Sum lagged depletion over all reaches

    Parameters
    ----------
    lagged: pandas DataFrame
        output of urf_lagging

    Returns
    -------
    depletion: pandas Series
        total depletion volume per month, sorted by date
    """
    return lagged.sum(axis=1).sort_index().rename("depletion")

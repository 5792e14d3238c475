from .streamdepl_exceptions import (
    EmptySchedule,
    InvalidParameter,
    NonPositivePeriodLength,
    OutOfRangeTable,
    StreamDeplException,
)
from .solutions import (
    AF2CF,
    ALL_DEPL_METHODS,
    CFD2GPM,
    DAYS_PER_MONTH,
    GPD2CFD,
    GPM2CFD,
    SEC2DAY,
    _calc_deltaQ,
    erfc,
    glover_alluvial_depletion,
    glover_depletion,
    sdf,
    sdf_depletion,
    urf_depletion,
)
from .aquifer import AquiferParameters
from .methods import (
    ALL_METHODS,
    GloverAlluvialImage,
    GloverInfinite,
    JenkinsSDF,
    UnitResponseFunction,
    make_method,
    unit_step_response,
)
from .utilities import (
    Q2ts,
    create_timeseries_template,
    month_starts,
    monthly_volumes_to_rates,
    rates_to_monthly_volumes,
)
from .urf import combined_urf_results, urf_lagging
from .wells import PumpingSchedule, TimeSeriesResult, Well, compute

__version__ = "0.1.0"

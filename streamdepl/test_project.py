from pathlib import Path

import numpy as np
import pandas as pd
import pytest
import yaml

import streamdepl
from streamdepl import (
    AquiferParameters,
    GloverAlluvialImage,
    GloverInfinite,
    OutOfRangeTable,
    PumpingSchedule,
    StreamDeplException,
    compute,
)
from streamdepl.utilities import Q2ts, create_timeseries_template

datapath = Path(__file__).parent / "tests" / "data"


@pytest.fixture
def project_dict():
    return {
        "project_properties": {
            "name": "in memory",
            "T": 5000.0,
            "S": 0.2,
            "depl_method": "glover_depletion",
            "period_length": 30.0,
            "horizon": 6,
        },
        "well_a": {"name": "a", "dist": 1000.0, "Q": [500.0, 500.0, 0.0]},
        "well_b": {"name": "b", "dist": 250.0, "Q": [100.0]},
    }


def test_yml_example_in_memory():
    from streamdepl.analysis_project import Project

    ap = Project(datapath / "example.yml", write_results_to_files=False)
    assert list(ap.wells.keys()) == ["north_well", "south_well"]
    assert ap.depl_method == "glover_alluvial_depletion"
    assert ap.wells["north_well"].params.boundaries == (8000.0,)
    assert ap.wells["south_well"].params.boundaries == ()
    assert np.isclose(ap.T, 35000 / 7.481)

    depl = ap.depletion
    assert depl.shape == (24, 2)
    assert depl.index[0] == pd.Timestamp("2025-01-01")
    assert np.all(depl.values >= 0)
    # north well starts pumping in month 4
    assert np.all(depl["north_well"].iloc[:3] == 0)
    assert depl["north_well"].iloc[3] > 0

    pumping = pd.read_csv(datapath / "example_pumping.csv", index_col=0)
    rates = streamdepl.monthly_volumes_to_rates(pumping["south_well"].values, 30.42)
    expected = compute(
        GloverAlluvialImage(),
        AquiferParameters(35000 / 7.481, 0.2, 1500.0),
        PumpingSchedule(rates, period_length=30.42),
        horizon=24,
        hold_final_rate=False,
    )
    np.testing.assert_allclose(
        depl["south_well"].values,
        streamdepl.rates_to_monthly_volumes(expected.depletion, 30.42),
        rtol=1e-10,
    )


def test_run_in_memory_example(project_dict):
    from streamdepl.analysis_project import Project

    ap = Project(None, write_results_to_files=False, project_dict=project_dict)
    depl = ap.write_responses_csv()
    assert list(depl.columns) == ["a", "b"]
    assert len(depl) == 6

    params = AquiferParameters(5000.0, 0.2, 1000.0)
    expected = compute(
        GloverInfinite(),
        params,
        PumpingSchedule([500.0, 500.0, 0.0], period_length=30.0),
        horizon=6,
    )
    np.testing.assert_allclose(depl["a"].values, expected.depletion)
    # well b keeps pumping past its one-month schedule
    assert np.all(np.diff(depl["b"].values) > 0)


def test_uneven_Q_lists_share_horizon(project_dict):
    from streamdepl.analysis_project import Project

    project_dict["project_properties"].pop("horizon")
    ap = Project(None, write_results_to_files=False, project_dict=project_dict)
    assert ap.horizon == 3
    depl = ap.write_responses_csv()
    assert depl.shape == (3, 2)
    assert not depl.isnull().values.any()

    # well b pumps one month then holds its rate
    expected = compute(
        GloverInfinite(),
        AquiferParameters(5000.0, 0.2, 250.0),
        PumpingSchedule([100.0], period_length=30.0),
        horizon=3,
    )
    np.testing.assert_allclose(depl["b"].values, expected.depletion)
    assert np.all(np.diff(depl["b"].values) > 0)


def test_project_writes_files(tmp_path):
    from streamdepl.analysis_project import Project

    tsfile = tmp_path / "pumping.csv"
    create_timeseries_template(tsfile, ["w1", "w2"], n_periods=12)
    ts = pd.read_csv(tsfile, index_col=0)
    ts.loc[0:5, "w1"] = 2.0
    ts.loc[3:8, "w2"] = 1.5
    ts.to_csv(tsfile)

    config = {
        "project_properties": {
            "name": "written",
            "T": 1200.0,
            "S": 0.15,
            "depl_method": "sdf_depletion",
            "pumping_units": "gpm",
            "horizon": 36,
            "hold_final_rate": False,
            "pumping_timeseries_file": "pumping.csv",
        },
        "well_1": {"name": "w1", "dist": 400.0},
        "well_2": {"name": "w2", "dist": 900.0, "sdf": 120.0},
    }
    ymlfile = tmp_path / "proj.yml"
    with open(ymlfile, "w") as ofp:
        yaml.safe_dump(config, ofp)

    ap = Project(ymlfile)
    ap.report_responses()
    ap.write_responses_csv()

    assert (tmp_path / "proj.yml.import_report").exists()
    report = (tmp_path / "output" / "proj.report.txt").read_text()
    assert "w1" in report and "w2" in report
    assert "sdf_depletion" in report
    out = pd.read_csv(tmp_path / "output" / "proj.depletion.csv", index_col=0)
    assert out.shape == (36, 2)
    assert out["w1"].max() < 2.0
    assert ap.wells["w2"].method.sdf == 120.0


def test_urf_project():
    from streamdepl.analysis_project import Project

    config = {
        "project_properties": {
            "name": "urf",
            "T": 5000.0,
            "S": 0.2,
            "depl_method": "urf_depletion",
            "horizon": 60,
        },
        "well_1": {
            "name": "w",
            "dist": 1000.0,
            "Q": [100.0],
            "urf_file": str((datapath / "urf_table.csv").resolve()),
        },
    }
    ap = Project(None, write_results_to_files=False, project_dict=config)
    depl = ap.depletion["w"].values
    assert np.all(depl >= 0)
    assert np.all(np.diff(depl) >= 0)
    assert depl[-1] <= 100.0 * 0.9436 + 1e-9


@pytest.mark.parametrize(
    "change",
    [
        lambda d: d.pop("project_properties"),
        lambda d: [d.pop(k) for k in ["well_a", "well_b"]],
        lambda d: d["project_properties"].update({"depl_method": "theis_drawdown"}),
        lambda d: d["project_properties"].update({"pumping_units": "furlongs"}),
        lambda d: d["project_properties"].pop("T"),
        lambda d: d["well_a"].pop("Q"),
        lambda d: d["well_a"].update({"dist": -10.0}),
        lambda d: d.update({"well_c": {"name": "a", "dist": 50.0, "Q": [900.0]}}),
    ],
)
def test_bad_configuration(project_dict, change):
    from streamdepl.analysis_project import Project

    change(project_dict)
    with pytest.raises(StreamDeplException):
        Project(None, write_results_to_files=False, project_dict=project_dict)


def test_ts_and_Q_conflict(project_dict):
    from streamdepl.analysis_project import Project

    project_dict["project_properties"]["pumping_timeseries_file"] = str(
        (datapath / "example_pumping.csv").resolve()
    )
    with pytest.raises(StreamDeplException):
        Project(None, write_results_to_files=False, project_dict=project_dict)


def test_no_configuration():
    from streamdepl.analysis_project import Project

    with pytest.raises(StreamDeplException):
        Project(None, write_results_to_files=False)


def test_urf_lagging():
    urf = [
        {"month": 1, "reach": 1, "urf_val": 0.6},
        {"month": 1, "reach": 2, "urf_val": 0.1},
        {"month": 2, "reach": 1, "urf_val": 0.3},
    ]
    usage = pd.Series(
        [100.0, 100.0], index=pd.to_datetime(["2024-07-01", "2024-08-01"])
    )
    lagged = streamdepl.urf_lagging(usage, urf)
    assert list(lagged.columns) == [1, 2]
    assert list(lagged.index) == list(
        pd.to_datetime(["2024-07-01", "2024-08-01", "2024-09-01"])
    )
    np.testing.assert_allclose(lagged[1].values, [60.0, 90.0, 30.0])
    np.testing.assert_allclose(lagged[2].values, [10.0, 10.0, 0.0])


def test_urf_lagging_skip_usage_month():
    urf = pd.DataFrame(
        {
            "month": [1, 1, 2, 2, 3],
            "reach": [1, 2, 1, 2, 1],
            "urf_val": [0.4, 0.2, 0.2, 0.1, 0.1],
        }
    )
    usage = pd.Series(
        [100.0, 100.0, 100.0],
        index=pd.to_datetime(["2024-05-01", "2024-07-01", "2024-08-01"]),
    )
    lagged = streamdepl.urf_lagging(usage, urf)
    assert lagged.index[0] == pd.Timestamp("2024-05-01")
    assert lagged.index[-1] == pd.Timestamp("2024-10-01")
    np.testing.assert_allclose(lagged[1].values, [40.0, 20.0, 50.0, 60.0, 30.0, 10.0])
    np.testing.assert_allclose(lagged[2].values, [20.0, 10.0, 20.0, 30.0, 10.0, 0.0])

    total = streamdepl.combined_urf_results(lagged)
    np.testing.assert_allclose(total.values, [60.0, 30.0, 70.0, 90.0, 40.0, 10.0])
    assert total.index.is_monotonic_increasing


def test_urf_lagging_bad_table():
    usage = pd.Series([100.0], index=pd.to_datetime(["2024-05-01"]))
    with pytest.raises(OutOfRangeTable):
        streamdepl.urf_lagging(usage, pd.DataFrame({"month": [1], "urf_val": [0.5]}))
    with pytest.raises(OutOfRangeTable):
        streamdepl.urf_lagging(
            usage, pd.DataFrame(columns=["month", "reach", "urf_val"])
        )


def test_Q2ts():
    Q = Q2ts(3, 2, 10.0)
    assert len(Q) == 24
    assert Q.sum() == 60.0
    assert list(Q.iloc[:4]) == [10.0, 10.0, 10.0, 0.0]
    assert Q.iloc[12] == 10.0
    with pytest.raises(StreamDeplException):
        Q2ts(13, 1, 10.0)


def test_month_starts():
    dates = streamdepl.month_starts("2023-12-15", 3)
    assert list(dates) == list(
        pd.to_datetime(["2023-12-01", "2024-01-01", "2024-02-01"])
    )


def test_volume_rate_conversions():
    rates = streamdepl.monthly_volumes_to_rates([100.0, 0.0], 30.42)
    np.testing.assert_allclose(rates, [100.0 * 43560.0 / 30.42, 0.0])
    np.testing.assert_allclose(
        streamdepl.rates_to_monthly_volumes(rates, 30.42), [100.0, 0.0]
    )
    assert np.isclose(streamdepl.GPM2CFD * streamdepl.CFD2GPM, 1.0)


def test_create_timeseries_template(tmp_path):
    fname = tmp_path / "template.csv"
    create_timeseries_template(fname, [f"well{i}" for i in range(1, 6)], 24)
    df = pd.read_csv(fname, index_col=0)
    assert df.index.name == "period"
    assert df.shape == (24, 5)
    assert (df.values == 0).all()

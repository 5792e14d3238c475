import os
from pathlib import Path

import numpy as np
import pandas as pd
import yaml

from streamdepl.methods import ALL_METHODS
from streamdepl.solutions import CFD2GPM, DAYS_PER_MONTH, GPD2CFD, GPM2CFD
from streamdepl.streamdepl_exceptions import StreamDeplException
from streamdepl.utilities import monthly_volumes_to_rates, rates_to_monthly_volumes
from streamdepl.wells import Well

PUMPING_UNITS = ["cfd", "gpm", "af_per_month"]


def _print_to_screen_and_file(s, ofp):
    """function to print formatted output to both
    the screen and a file

    Parameters
    ----------
    s: string
        string to point
    ofp: file pointer
        handle to an open output file for printing to

    Returns
    -------
    None
    """
    ofp.write(f"{s}\n")
    print(s)


def _print_single_well_header(ofp, wname, depl_method):
    ofp.write("#" * 50 + "\n")
    ofp.write(f"Well Name: {wname}\n")
    ofp.write(f"Depletion method: {depl_method}\n")


def _print_depl(ofp, cw, units):
    """Function to write the depletion summary of a well to a file.

    Parameters
    ----------
    ofp: file pointer
        handle to an open output file for printing to
    cw: Well
        well to summarize
    units: string
        pumping units for reported rates
    """
    ofp.write(f"{'Distance to stream':30s}{cw.params.dist:<30.4f}\n")
    if len(cw.params.boundaries) > 0:
        bnds = ", ".join(f"{b:.4f}" for b in cw.params.boundaries)
        ofp.write(f"{'Boundary distances':30s}{bnds}\n")
    ofp.write(f"{'Stream depletion factor':30s}{cw.params.sdf:<30.4f}\n")
    depl = cw.depletion
    ofp.write(
        f"{'Maximum depletion':30s}"
        f"{_from_cfd(depl.max_depletion, units, depl.period_length):<30.4f}"
        f"{units}\n"
    )
    ofp.write(f"{'Total depleted volume (ft3)':30s}{depl.total_volume:<30.4f}\n")


def _to_cfd(Q, units, period_length):
    """convert pumping in the configured units to cubic feet per day"""
    if units == "cfd":
        return Q
    elif units == "gpm":
        return Q * GPM2CFD
    return monthly_volumes_to_rates(Q, period_length)


def _from_cfd(Q, units, period_length):
    """convert cubic feet per day back to the configured units"""
    if units == "cfd":
        return Q
    elif units == "gpm":
        return Q * CFD2GPM
    return rates_to_monthly_volumes(Q, period_length)


class Project:
    def __init__(self, ymlfile, write_results_to_files=True, project_dict=None):
        """
        Highest-level Class for a stream depletion analysis of one or
        more wells. Each well is evaluated independently against its own
        stream with the project aquifer properties.

        Parameters
        ----------
        ymlfile: string or pathlib.Path
            Path to a yml file containing configuration information for a project.
            If None, project is initiated from the project_dict arg, if present. If
            both are None, throw an error.

        write_results_to_files: Bool
            True means all output files are written to disk. False means results are
            only held in memory and not written. Default is True

        project_dict: dictionary
            Dictionary containing all the data from a yml configuration. Only read if
            ymlfile is None. This option is to allow an in-memory-only driving of the
            project to avoid any interaction with the disk.
        """
        self.write_results_to_files = write_results_to_files
        self.wells = {}  # dictionary to hold well objects
        self.depl_method = "glover_depletion"  # default, can specify in the yml file
        self.period_length = DAYS_PER_MONTH
        self.horizon = None
        self.start_date = None
        self.pumping_units = "cfd"
        self.hold_final_rate = True

        # populate the project data from YML or directly from a dictionary
        if ymlfile is not None:
            self.ymlfile = Path(ymlfile)
            with open(self.ymlfile) as ifp:
                d = yaml.safe_load(ifp)
        elif project_dict is not None:
            d = project_dict
            self.ymlfile = Path("./default.yml")
        else:
            raise StreamDeplException(
                "Must either provide a YML file or a project dictionary"
            )
        self.basepath = self.ymlfile.parent

        if self.write_results_to_files:
            # make a home for the report file
            self.outpath = self.basepath / "output"
            if not os.path.exists(self.outpath):
                os.mkdir(self.outpath)

        # parse project_properties block
        if "project_properties" in d.keys():
            self._parse_project_properties(d["project_properties"])
        else:
            raise StreamDeplException(
                'Configuration YAML file must have a "project_properties" block'
            )

        self.wellkeys = [i for i in d.keys() if i.lower().startswith("well")]

        # look for a timeseries file in the project_properties block to determine how to
        # handle pumping
        if "pumping_timeseries_file" in d["project_properties"].keys():
            self.tsfile = self._resolve(
                d["project_properties"]["pumping_timeseries_file"]
            )
            self.ts = True
            self.Q_ts = pd.read_csv(self.tsfile).set_index("period")
        else:
            self.ts = False
            self.Q_ts = None

        # parse well blocks
        if len(self.wellkeys) > 0:
            self._parse_wells(d, self.ts)
        else:
            raise StreamDeplException(
                "No wells were defined in the input file. Goodbye"
            )

        # create well objects
        self._create_well_objects()
        # report out on yaml input to screen and logfile
        if self.write_results_to_files:
            self._report_yaml_input()

    def _resolve(self, filename):
        """paths in the configuration are relative to the yml file"""
        filename = Path(filename)
        if filename.is_absolute():
            return filename
        return self.basepath / filename

    def _parse_project_properties(self, pp):
        """Method to parse all the project properties from the YAML file block

        Parameters
        ----------
        pp: dict
            Project properties block read from YML file
        """
        try:
            self.name = pp["name"]
            self.T = pp["T"]
            self.S = pp["S"]
        except KeyError as err:
            raise StreamDeplException(
                'Formatting problem with "project_properties" block: '
                + f"missing {err}"
            )
        if pp.get("T_units", "ft2_per_day") == "gpd_ft":
            self.T = self.T * GPD2CFD
        if "depl_method" in pp.keys():
            self.depl_method = pp["depl_method"].lower()
        if self.depl_method not in ALL_METHODS.keys():
            raise StreamDeplException(
                f"unknown depl_method: {self.depl_method}\n"
                + "available methods are: "
                + ", ".join(ALL_METHODS.keys())
            )
        self.period_length = pp.get("period_length", self.period_length)
        self.horizon = pp.get("horizon", self.horizon)
        self.start_date = pp.get("start_date", self.start_date)
        self.hold_final_rate = pp.get("hold_final_rate", self.hold_final_rate)
        self.pumping_units = pp.get("pumping_units", self.pumping_units).lower()
        if self.pumping_units not in PUMPING_UNITS:
            raise StreamDeplException(
                f"unknown pumping_units: {self.pumping_units}\n"
                + "available units are: "
                + ", ".join(PUMPING_UNITS)
            )

    def _parse_wells(self, d, ts):
        """populate information about wells

        Parameters
        ----------
        d: dict
            yml file data
        ts: bool
            flag as to whether a timeseries dataframe was read in
        """
        self.__well_data = {}

        for ck in self.wellkeys:
            cw = d[ck]
            if "name" not in cw.keys() or "dist" not in cw.keys():
                raise StreamDeplException(
                    f'well block "{ck}" must have a name and a dist'
                )
            # make sure if ts is supplied that Q is not supplied for each well
            if ts is True:
                if "Q" in cw.keys():
                    raise StreamDeplException(
                        "ERROR:\ntime series file was supplied AND Q was "
                        + f"supplied for well {cw['name']}.\n"
                        + "User can only supply pumping "
                        + "rates in one or the other\n"
                        + "Please try again...."
                    )
                if cw["name"] not in self.Q_ts.columns:
                    raise StreamDeplException(
                        f"well {cw['name']} is not represented in the time series file"
                    )
            elif "Q" not in cw.keys():
                raise StreamDeplException(
                    f"no pumping (Q) supplied for well {cw['name']}"
                )
            if cw["name"] in self.__well_data:
                raise StreamDeplException(
                    f"well name {cw['name']} is used by more than one well block"
                )
            self.__well_data[cw["name"]] = cw

    def _create_well_objects(self):
        """
        Populate a Well object for each well,
        using the attributes of each well and the project
        """
        # sort out the time series for wells and convert to CFD
        all_Q = {}
        for ck, cw in self.__well_data.items():
            if self.ts is True:
                Q = self.Q_ts[ck].values
            else:
                Q = np.atleast_1d(np.array(cw["Q"], dtype=float))
            all_Q[ck] = _to_cfd(Q, self.pumping_units, self.period_length)

        # every well shares one horizon so the results line up
        if self.horizon is None:
            self.horizon = max(len(Q) for Q in all_Q.values())

        for ck, cw in self.__well_data.items():
            Q = all_Q[ck]
            urf = cw.get("urf_file")
            if urf is not None:
                urf = self._resolve(urf)

            self.wells[ck] = Well(
                ck,
                T=self.T,
                S=self.S,
                dist=cw["dist"],
                Q=Q,
                depl_method=self.depl_method,
                boundaries=cw.get("boundaries"),
                sdf=cw.get("sdf"),
                urf=urf,
                period_length=self.period_length,
                horizon=self.horizon,
                start_date=self.start_date,
                hold_final_rate=self.hold_final_rate,
            )

    def _report_yaml_input(self):
        """
        summarize broad details of the YAML file read in
        """
        logfile = str(self.ymlfile).replace(".yml", ".yml.import_report")
        logfile = logfile.replace(".yaml", ".yml.import_report")
        with open(logfile, "w") as ofp:
            print(f"Writing report to {logfile}\n\n")
            _print_to_screen_and_file("", ofp)
            _print_to_screen_and_file(f"Successfully parsed {self.ymlfile}", ofp)
            _print_to_screen_and_file("*" * 25, ofp)
            _print_to_screen_and_file("Summary follows:", ofp)
            _print_to_screen_and_file(f"\nDEPLETION METHOD: {self.depl_method}", ofp)
            _print_to_screen_and_file(
                f"T: {self.T}  S: {self.S}  period length: {self.period_length}",
                ofp,
            )
            _print_to_screen_and_file(f"\n{len(self.wells)} WELLS:", ofp)
            [_print_to_screen_and_file(f"\t{i}", ofp) for i in self.wells.keys()]

    @property
    def depletion(self):
        """depletion time series of every well in the pumping units"""
        return pd.DataFrame(
            {
                cn: _from_cfd(
                    cw.depletion.to_series(), self.pumping_units, self.period_length
                )
                for cn, cw in self.wells.items()
            }
        )

    def report_responses(self):
        """
        make a report file - named from the YML name
        """
        if not self.write_results_to_files:
            raise StreamDeplException(
                "report_responses requires write_results_to_files=True"
            )
        ymlbase = self.ymlfile.name
        outfile = ymlbase.replace(".yml", ".report.txt")
        self.report_filename = self.outpath / outfile
        with open(self.report_filename, "w") as ofp:
            ofp.write(
                f"Stream depletion analysis report, configured from: {ymlbase}\n"
            )
            ofp.write(f"Project: {self.name}\n")
            ofp.write("\nINDIVIDUAL WELL REPORTS\n")
            for cn, cw in self.wells.items():
                _print_single_well_header(ofp, cn, cw.depl_method)
                _print_depl(ofp, cw, self.pumping_units)
                ofp.write("\n")

    def write_responses_csv(self):
        """
        Write depletion time series for all wells to an external CSV file
        """
        depl_df = self.depletion
        if self.write_results_to_files:
            ymlbase = self.ymlfile.name
            outfile = ymlbase.replace(".yml", ".depletion.csv")
            self.csv_output_filename = self.outpath / outfile
            depl_df.to_csv(self.csv_output_filename)
        # save the dataframe of results into self.
        self.depl_df = depl_df
        return depl_df

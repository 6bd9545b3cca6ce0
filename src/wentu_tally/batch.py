"""
Contains functions used to tally a batch of scheduling events.
"""

from typing import Dict, List, Type

import ast
import copy
import datetime
import json
import logging
import os
import pathlib
import shutil

import pandas as pd
import tqdm

import wentu_tally
import wentu_tally.util as util

from wentu_tally.rcv.base import RCV
from wentu_tally.rcv.variants import get_rcv_dict
from wentu_tally.parsers import get_parser_dict

logger = logging.getLogger(__name__)

# read functions in parsers and rcv variants
rcv_dict = get_rcv_dict()
parser_dict = get_parser_dict()


def _new_rcv_event(event_dict: Dict) -> Type[RCV]:
    """
    Pass in a dictionary and run the constructor function stored within it
    """
    return event_dict["rcv_type"](**{k: v for k, v in event_dict.items() if k != "rcv_type"})


# typecast functions
def _cast_str(s):
    """
    If string-in-string '"0006"', evaluate to '0006'
    If 'None', return None
    else, return str() result
    """
    s = str(s)
    if len(s) > 1 and ((s[0] == '"' and s[-1] == '"') or (s[0] == "'" and s[-1] == "'")):
        return ast.literal_eval(s)
    elif s == "None":
        return None
    else:
        return s


def _cast_bool(s):
    if isinstance(s, bool):
        return s
    if str(s).title() not in ("True", "False"):
        raise RuntimeError(f'invalid value ({s}), must be "true" or "false".')
    return str(s).title() == "True"


def _cast_dict(dct):
    dct_return = {}
    if dct == "":
        return dct_return
    comma_split = [arg for arg in dct.strip("\n").split(";") if arg]
    for i in comma_split:
        equal_split = i.split("=")
        dct_return.update({equal_split[0].strip(): "=".join(equal_split[1:]).strip()})
    return dct_return


def _cast_func(s):

    if s in rcv_dict and s in parser_dict:
        raise RuntimeError(
            "(developer error) An rcv variant class and a parser function share the same name. Make them unique."
        )

    if s in rcv_dict:
        return rcv_dict[s]

    if s in parser_dict:
        return parser_dict[s]

    return None


cast_dict = {
    "str": _cast_str,
    "dict": _cast_dict,
    "bool": _cast_bool,
    "func": _cast_func,
}


def _read_settings(fname: str) -> Dict:
    settings_fpath = pathlib.Path(os.path.dirname(__file__)) / fname
    if os.path.isfile(settings_fpath) is False:
        raise RuntimeError(f"(developer error) Looking for {fname}. Not a valid file path: {settings_fpath}")

    with open(settings_fpath) as settings_file:
        return json.load(settings_file)


def _read_event_set(event_set_path, override_event_root_dir=None):
    """
    Read event_set.csv and run_config.json from the event set directory. Missing columns and options are filled
    in with defaults from the settings files shipped with the package.
    """
    event_set_path = pathlib.Path(event_set_path)

    # settings/defaults
    event_set_settings = _read_settings("event_set_settings.json")
    run_config_settings = _read_settings("run_config_settings.json")

    # read run_config.json
    run_config_fpath = event_set_path / "run_config.json"
    if os.path.isfile(run_config_fpath) is False:
        raise RuntimeError(f"not a valid file path: {run_config_fpath}")

    with open(run_config_fpath) as run_config_file:
        run_config = json.load(run_config_file)

    for option in run_config:
        if option not in run_config_settings:
            logger.info(f'"{option}" is an unrecognized option in run_config.json, it will be ignored.')

    # add in defaults for missing options
    for field in run_config_settings:
        if field not in run_config:
            run_config.update({field: run_config_settings[field]["default"]})
        run_config[field] = cast_dict[run_config_settings[field]["type"]](run_config[field])

    event_path_root = pathlib.Path(run_config["event_path_root"])
    if not event_path_root.is_absolute():
        event_path_root = event_set_path / event_path_root
    run_config["event_path_root"] = event_path_root

    # read event_set.csv
    event_set_fpath = event_set_path / "event_set.csv"
    if os.path.isfile(event_set_fpath) is False:
        raise RuntimeError(f"not a valid file path: {event_set_fpath}")

    event_set_df = pd.read_csv(event_set_fpath, dtype=object)

    # add in default values for missing columns
    for setting in event_set_settings:
        if setting not in event_set_df.columns:
            event_set_df[setting] = event_set_settings[setting]["default"]

    # fill in na values with defaults and evaluate column, if indicated
    for col in event_set_df:

        if col not in event_set_settings:
            logger.info(f'"{col}" is an unrecognized column in event_set.csv, it will be ignored.')
            event_set_df = event_set_df.drop(columns=[col])
        else:
            event_set_df[col] = event_set_df[col].fillna(event_set_settings[col]["default"])
            event_set_df[col] = [cast_dict[event_set_settings[col]["type"]](i) for i in event_set_df[col].tolist()]

    # convert df to listOdicts, one dict per row
    events = event_set_df.to_dict("records")

    valid_events = []
    for event in events:

        if event.get("ignore_event"):
            logger.info(f'ignoring event: {event["event"]}')
            continue

        if event["parser_func"] is None or event["rcv_type"] is None:
            logger.warning(f'invalid parser or rcv type, ignoring event: {event["event"]}')
            continue

        copy_event = copy.copy(event)

        if override_event_root_dir:
            copy_event["event_path"] = pathlib.Path(override_event_root_dir) / event["event_path"]
        else:
            copy_event["event_path"] = run_config["event_path_root"] / event["event_path"]

        copy_event["parser_args"] = {"event_path": copy_event["event_path"]}
        copy_event["parser_args"].update(copy_event["extra_parser_args"])

        del copy_event["event_path"]
        del copy_event["extra_parser_args"]
        del copy_event["ignore_event"]

        valid_events.append(copy_event)

    # store file locations
    run_config["event_set_file_path"] = event_set_fpath
    run_config["run_config_file_path"] = run_config_fpath

    return valid_events, run_config


class _Steps:
    """
    Ordered, dependent steps run for a single event. A step runs once all steps it depends on succeeded and its
    condition is met. Failures are written to the error log writers and do not stop the remaining steps.
    """

    def __init__(self, event, output_config, results_dir):
        self.event = event
        self.output_config = output_config
        self.results_dir = results_dir
        self.state_data = {}
        self.error_log_writers = []
        self.steps = {}

    def update_error_log_writers(self, writers_list):
        self.error_log_writers = writers_list

    def refresh_steps(self):
        new_steps = self.generate_steps()
        for k in new_steps:
            if k in self.steps:
                new_steps[k]["success"] = self.steps[k]["success"]
        self.steps = new_steps

    def generate_steps(self):
        rcv_obj = self.state_data.get("rcv_obj")
        return {
            "tabulate": {
                "f": _new_rcv_event,
                "args": [self.event],
                "return_key": "rcv_obj",
                "condition": True,
                "depends_on": [],
                "success": None,
            },
            "round_by_round_json": {
                "f": RCV.write_round_by_round_json,
                "args": [rcv_obj, self.results_dir],
                "return_key": None,
                "condition": self.output_config.get("round_by_round_json"),
                "depends_on": ["tabulate"],
                "success": None,
            },
            "round_by_round_table": {
                "f": RCV.write_round_by_round_table,
                "args": [rcv_obj, self.results_dir],
                "return_key": None,
                "condition": self.output_config.get("round_by_round_table"),
                "depends_on": ["tabulate"],
                "success": None,
            },
            "candidate_outcomes": {
                "f": RCV.write_candidate_outcome_table,
                "args": [rcv_obj, self.results_dir],
                "return_key": None,
                "condition": self.output_config.get("candidate_outcomes"),
                "depends_on": ["tabulate"],
                "success": None,
            },
            "event_stats": {
                "f": RCV.calc_stats,
                "args": [rcv_obj],
                "return_key": "event_stats_df",
                "condition": self.output_config.get("event_stats"),
                "depends_on": ["tabulate"],
                "success": None,
            },
        }

    def n_steps(self):
        return len(self.steps.keys())

    def next_step(self):

        remaining_steps = [
            (k, step)
            for k, step in self.steps.items()
            if step["success"] is None  # step not attempted yet
            and step["condition"]  # step conditions are met
            and all(self.steps[dep_k]["success"] for dep_k in step["depends_on"])  # all step dependencies are met
        ]

        if not remaining_steps:
            return False
        else:
            return remaining_steps[0]

    def run_steps(self, pbar=None):

        self.state_data["n_errors"] = 0
        self.refresh_steps()

        next_step = self.next_step()
        while next_step:

            step_name, step_details = next_step

            if pbar is not None:
                pbar.set_postfix_str(step_name)

            try:
                if step_details["return_key"]:
                    self.state_data.update({step_details["return_key"]: step_details["f"](*step_details["args"])})
                else:
                    step_details["f"](*step_details["args"])

            except Exception as e:

                self.steps[step_name]["success"] = False
                logger.error(f'{self.event["event"]}: step {step_name} failed: {e!r}')

                for writer in self.error_log_writers:
                    writer.write([self.event["event"], step_name, repr(e)])
                self.state_data["n_errors"] += 1

            else:
                self.steps[step_name]["success"] = True

            self.refresh_steps()
            next_step = self.next_step()

    def return_results(self):
        return self.state_data


def _write_input_dir(results_dir, output_config, start_time, end_time):

    # copy input files
    result_log_dir = results_dir / "inputs"
    util.verifyDir(result_log_dir)

    with open(result_log_dir / "pkg_info.txt", "w") as pkg_info:
        pkg_info.write(f"version: {wentu_tally.__version__}\n")
        pkg_info.write(f'start_time: {start_time.strftime("%Y-%m-%d %H:%M:%S")}\n')
        pkg_info.write(f'end_time: {end_time.strftime("%Y-%m-%d %H:%M:%S")}')

    shutil.copy2(output_config["run_config_file_path"], result_log_dir / "run_config.json")
    shutil.copy2(output_config["event_set_file_path"], result_log_dir / "event_set.csv")


def _crunch_event_set(event_set: List[Dict], output_config: Dict, path_to_output, fresh_output=False) -> int:

    start_time = datetime.datetime.now()

    ##################
    # OUTPUT PATHS
    path_to_output = pathlib.Path(path_to_output)

    results_dir = path_to_output / "results"
    if fresh_output and results_dir.exists():
        logger.info("deleting existing results directory...")
        shutil.rmtree(results_dir)
    util.verifyDir(results_dir)

    # init error log
    header_list = ["event", "tally_step", "message"]
    error_log_path = results_dir / "error_log.csv"
    error_logger = util.CSVLogger(error_log_path, header_list)

    empty_error_log_path = error_log_path.parent / (error_log_path.stem + "_EMPTY.csv")
    if empty_error_log_path.exists():
        os.remove(empty_error_log_path)

    #########################
    # LOOP THROUGH EVENTS

    event_stats_dfs = []
    n_errors = 0

    with tqdm.tqdm(total=len(event_set), bar_format="{l_bar}{bar}| {n_fmt}/{total_fmt}{postfix}") as pbar:
        for event in event_set:

            desc = event["event"]
            if n_errors:
                desc = f"[{n_errors} ERRORS SO FAR] " + desc
            pbar.set_description(desc)

            steps = _Steps(event, output_config, results_dir)
            steps.update_error_log_writers([error_logger])
            steps.run_steps(pbar=pbar)

            crunch_returns = steps.return_results()
            n_errors += crunch_returns["n_errors"]

            if crunch_returns.get("event_stats_df") is not None:
                event_stats_dfs.append(crunch_returns["event_stats_df"])

            pbar.update(1)

    if n_errors:
        logger.warning(f"[{n_errors} TOTAL ERRORS]")

    # close logs
    error_logger.close()
    if not error_logger.lines_added:
        os.rename(error_log_path, empty_error_log_path)

    # WRITE OUT AGGREGATED STATS FOR EVENTS
    if output_config.get("event_stats") and event_stats_dfs:
        df = pd.concat(event_stats_dfs, axis=0, ignore_index=True, sort=False)
        df.to_csv(results_dir / "event_stats.csv", index=False)

    end_time = datetime.datetime.now()

    _write_input_dir(results_dir, output_config, start_time, end_time)

    logger.info(f"runtime duration: {str(end_time - start_time)}")

    return n_errors


def analyze_event_set(event_set_path: str, output_path: str, fresh_output=False) -> int:
    """
    Tally a set of events.

    :param event_set_path: Directory containing two files: event_set.csv, which lists events to tally and how to read them, and run_config.json, which contains the settings specifying which outputs to write.
    :type event_set_path: str
    :param output_path: Directory where output will be written to.
    :type output_path: str
    :param fresh_output: If True, the results folder already present in `output_path` is deleted, defaults to False
    :type fresh_output: bool, optional
    :return: Number of failed steps across all events.
    :rtype: int
    """

    # read in event set info
    event_set, run_config = _read_event_set(event_set_path)

    # tally events
    return _crunch_event_set(event_set, run_config, output_path, fresh_output=fresh_output)

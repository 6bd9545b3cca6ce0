"""
Contains event parser functions.
"""

from typing import List, Dict

import pathlib

import pandas as pd

from wentu_tally.ballots import ballots_from_rankings, candidates_from_options, check_rankings
from wentu_tally.package_types import ParserDict, Path
from wentu_tally.util import DL2LD

RANKING_COLUMNS = ["participant_id", "date_option_id", "preference_order"]


def add_parser(new_parsers: ParserDict) -> None:
    """Add custom parser functions to the module parser dictionary.

    :param new_parsers: A dictionary containing parser functions, with their names as keys.
    :type new_parsers: Dict
    """
    parser_dict.update(new_parsers)


def get_parser_dict() -> ParserDict:
    """Returns the module parser dictionary. Including both package parsers and
    custom parsers added with :func:`add_parser`.

    :return: A dictionary of parser functions. Keys are parser name strings.
    :rtype: Dict
    """
    return parser_dict


def rankings_csv(rankings_path: Path) -> Dict[str, List]:
    """Reads ranking rows stored in csv format. One row per ranked date option of a participant, with columns
    "participant_id", "date_option_id" and "preference_order" (1 is most preferred). Other columns are kept.

    :param rankings_path: The path to the rankings file.
    :type rankings_path: Union[str, pathlib.Path]
    :raises RuntimeError: Error raised if a required column is missing or a preference order is not an integer.
    :return: A dictionary of lists containing all columns in the file. Ids are strings, preference orders are ints.
    :rtype: Dict[str, List]
    """
    rankings_path = pathlib.Path(rankings_path)
    df = pd.read_csv(rankings_path, encoding="utf8", dtype={"participant_id": str, "date_option_id": str})

    missing = [col for col in RANKING_COLUMNS if col not in df.columns]
    if missing:
        raise RuntimeError(f"{rankings_path.name} is missing required columns: {', '.join(missing)}")

    try:
        df["preference_order"] = df["preference_order"].astype(int)
    except (TypeError, ValueError) as e:
        raise RuntimeError(f"{rankings_path.name} contains a non-integer preference_order") from e

    return {col: df[col].tolist() for col in df.columns}


def date_options_csv(options_path: Path) -> Dict[str, List]:
    """Reads date options stored in csv format. One row per option with an "id" column, and optional "sort_order"
    and "label" columns. If "sort_order" is missing, file order is used.

    :param options_path: The path to the date options file.
    :type options_path: Union[str, pathlib.Path]
    :raises RuntimeError: Error raised if the "id" column is missing or a sort order is not an integer.
    :return: A dictionary of lists containing all columns in the file, plus "sort_order" if it was absent.
    :rtype: Dict[str, List]
    """
    options_path = pathlib.Path(options_path)
    df = pd.read_csv(options_path, encoding="utf8", dtype={"id": str, "label": str})

    if "id" not in df.columns:
        raise RuntimeError(f'{options_path.name} is missing required column "id"')

    if "sort_order" not in df.columns:
        df["sort_order"] = list(range(len(df)))

    try:
        df["sort_order"] = df["sort_order"].astype(int)
    except (TypeError, ValueError) as e:
        raise RuntimeError(f"{options_path.name} contains a missing or non-integer sort_order") from e

    return {col: df[col].tolist() for col in df.columns}


def event_csv(event_path: Path) -> Dict[str, List]:
    """
    Reads an event stored as a directory containing "date_options.csv" and "rankings.csv".
    Rankings are checked before ballots are assembled.

    :param event_path: The path to the event directory.
    :type event_path: Union[str, pathlib.Path]
    :raises RuntimeError: Error raised if a file is missing or a ranking submission is invalid.
    :return: A dictionary with "candidates" (date option ids in display order), "ballots" (one ranked list per
     participant) and "labels" (date option id to label, empty if no labels are given).
    :rtype: Dict[str, List]
    """
    event_path = pathlib.Path(event_path)

    options_fpath = event_path / "date_options.csv"
    rankings_fpath = event_path / "rankings.csv"
    for fpath in [options_fpath, rankings_fpath]:
        if not fpath.is_file():
            raise RuntimeError(f"not a valid file path: {fpath}")

    options = date_options_csv(options_fpath)
    rankings = rankings_csv(rankings_fpath)

    option_records = DL2LD(options)
    ranking_records = DL2LD(rankings)

    candidates = candidates_from_options(option_records)
    check_rankings(ranking_records, candidates)

    labels = {}
    if "label" in options:
        labels = {d["id"]: d["label"] for d in option_records if isinstance(d["label"], str)}

    return {
        "candidates": candidates,
        "ballots": ballots_from_rankings(ranking_records),
        "labels": labels,
    }


parser_dict = {
    "event_csv": event_csv,
}

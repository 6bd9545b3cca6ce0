"""
Build tabulation inputs from stored date options and ranking rows.
"""
from typing import Dict, List, Optional, Sequence

import collections
import logging

from wentu_tally.package_types import Ballot, Candidate, Records

logger = logging.getLogger(__name__)


def candidates_from_options(options: Records) -> List[Candidate]:
    """
    Return date option ids in display order. Options are dicts with keys 'id' and 'sort_order'.
    Options sharing a sort order keep their input order.
    """
    return [d["id"] for d in sorted(options, key=lambda d: d["sort_order"])]


def ballots_from_rankings(rankings: Records) -> List[Ballot]:
    """
    Group ranking rows into one ballot per participant.

    Rows are dicts with keys 'participant_id', 'date_option_id' and 'preference_order' (1 is most preferred).
    Participants appear in order of their first row. Participants without rows cast no ballot.

    :param rankings: ranking rows, in any order
    :type rankings: List[Dict]
    :return: list of ranked date option id lists
    :rtype: List[List]
    """
    by_participant = collections.OrderedDict()
    for row in rankings:
        by_participant.setdefault(row["participant_id"], []).append(row)

    return [
        [row["date_option_id"] for row in sorted(rows, key=lambda r: r["preference_order"])]
        for rows in by_participant.values()
    ]


def check_rankings(rankings: Records, candidates: Optional[Sequence[Candidate]] = None) -> None:
    """
    Reject ranking submissions that could not have been stored: a participant ranking the same date option twice,
    reusing a preference order, or ranking a date option that is not part of the event.

    :param rankings: ranking rows
    :type rankings: List[Dict]
    :param candidates: date options of the event. If None, option membership is not checked.
    :type candidates: Optional[Sequence]
    :raises RuntimeError: on the first invalid participant submission found.
    """
    valid_options = set(candidates) if candidates is not None else None

    seen_options: Dict = collections.defaultdict(set)
    seen_orders: Dict = collections.defaultdict(set)

    for row in rankings:

        participant = row["participant_id"]
        option = row["date_option_id"]
        order = row["preference_order"]

        if valid_options is not None and option not in valid_options:
            logger.warning(f"Unknown date option {option} in rankings of participant {participant}")
            raise RuntimeError(f"participant {participant} ranked unknown date option {option}")

        if option in seen_options[participant]:
            logger.warning(f"Duplicate date option in rankings of participant {participant}")
            raise RuntimeError(f"participant {participant} ranked date option {option} more than once")

        if order in seen_orders[participant]:
            logger.warning(f"Duplicate preference order in rankings of participant {participant}")
            raise RuntimeError(f"participant {participant} used preference order {order} more than once")

        seen_options[participant].add(option)
        seen_orders[participant].add(order)

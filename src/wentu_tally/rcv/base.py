"""
Contains the RCV class.
Defines the class and adds in methods from rcv/stats.py and rcv/tables.py files.
"""
from __future__ import annotations
from typing import AbstractSet, Callable, Dict, List, Mapping, Optional, Sequence, Tuple, Type, Union

import abc
import collections
import dataclasses
import json
import logging
import pathlib
import re
import types

import pandas as pd

from wentu_tally.marks import BallotMarks
from wentu_tally.package_types import Ballot, Candidate
from wentu_tally.rcv.stats import RCV_stats
from wentu_tally.rcv.tables import RCV_tables

logger = logging.getLogger(__name__)


@dataclasses.dataclass(frozen=True)
class Round:
    """One counting pass. `eliminated` is the date option removed at the end of the round,
    None if the round ended the tabulation. Vote counts are a read-only view."""

    round_number: int
    vote_counts: Mapping[Candidate, int]
    eliminated: Optional[Candidate] = None


@dataclasses.dataclass(frozen=True)
class TallyResult:
    """Terminal output of a tabulation."""

    winner: Optional[Candidate]
    quota: int
    rounds: Tuple[Round, ...] = ()
    ballot_count: int = 0


class RCV(abc.ABC, RCV_stats, RCV_tables):
    """
    Template class. Creates the function skeleton for use in the definition of specific RCV variant tabulation
    methods. Rounds are counted from the ballots and the set of eliminated date options only, the eliminated set
    is replaced (never mutated) at the end of each round.
    """

    @staticmethod
    def get_variant_name(rcv_obj: Type[RCV]) -> str:
        """Convenience function for batch script. Returns name of RCV class.

        :type rcv_obj: Type[RCV]
        :return: Name of class of object passed
        :rtype: str
        """
        return rcv_obj.__class__.__name__

    @staticmethod
    def calc_stats(rcv_obj: Type[RCV]) -> pd.DataFrame:
        """Static wrapper for `RCV.get_stats`."""
        return rcv_obj.get_stats()

    @staticmethod
    def calc_round_by_round_table(rcv_obj: Type[RCV]) -> pd.DataFrame:
        """Static wrapper for `RCV.get_round_by_round_table`."""
        return rcv_obj.get_round_by_round_table()

    @staticmethod
    def write_round_by_round_table(rcv_obj: Type[RCV], save_dir: Union[str, pathlib.Path]) -> None:
        """Wrapper for `RCV.get_round_by_round_table` that writes out the table to path
        '{save_dir}/round_by_round_table/{event}.csv'

        :param rcv_obj: RCV object or RCV subclass object
        :type rcv_obj: Type[RCV]
        :param save_dir: Directory path to write tables to
        :type save_dir: Union[str, pathlib.Path]
        """
        save_path = pathlib.Path(save_dir) / "round_by_round_table"
        save_path.mkdir(parents=True, exist_ok=True)

        df = rcv_obj.get_round_by_round_table()
        df.to_csv(save_path / f"{rcv_obj.unique_id}.csv", index=False)

    @staticmethod
    def write_round_by_round_json(rcv_obj: Type[RCV], save_dir: Union[str, pathlib.Path]) -> None:
        """Wrapper for `RCV.get_round_by_round_dict` that writes out the dictionary to path
        '{save_dir}/round_by_round_json/{event}.json'

        :param rcv_obj: RCV object
        :type rcv_obj: Type[RCV]
        :param save_dir: Path to create "round_by_round_json" directory and write out json files.
        :type save_dir: Union[str, pathlib.Path]
        """
        save_path = pathlib.Path(save_dir) / "round_by_round_json"
        save_path.mkdir(parents=True, exist_ok=True)

        with open(save_path / f"{rcv_obj.unique_id}.json", "w") as outfile:
            json.dump(rcv_obj.get_round_by_round_dict(), outfile, indent=2)

    @staticmethod
    def write_candidate_outcome_table(rcv_obj: Type[RCV], save_dir: Union[str, pathlib.Path]) -> None:
        """Wrapper for `RCV.get_candidate_outcome_table` that writes out the table to path
        '{save_dir}/candidate_outcomes/{event}.csv'
        """
        save_path = pathlib.Path(save_dir) / "candidate_outcomes"
        save_path.mkdir(parents=True, exist_ok=True)

        df = rcv_obj.get_candidate_outcome_table()
        df.to_csv(save_path / f"{rcv_obj.unique_id}.csv", index=False)

    # override me
    @abc.abstractmethod
    def _win_threshold(self) -> int:
        """
        Abstract method to be implemented by RCV variant subclass.
        This function should return the win threshold, in terms of vote counts. It is computed once,
        before the first round.
        """
        pass

    # override me
    @abc.abstractmethod
    def _set_round_winner(self, round_tally: Dict[Candidate, int]) -> None:
        """
        Abstract method to be implemented by RCV variant subclass.
        This function should set self._final_round to True if the tabulation ends with this round,
        and self._round_winner to the winning date option (or leave it None).
        """
        pass

    # override me, if elimination rules differ
    def _set_round_loser(self, round_tally: Dict[Candidate, int]) -> None:
        """
        Find date option from round with least votes. Only options holding at least one vote can be chosen.
        Tied losers are broken by eliminating the one latest in tie order.
        """
        active = [(cand, count) for cand, count in round_tally.items() if cand not in self._eliminated]
        if not active:
            return

        self._round_loser = min(active, key=lambda t: (t[1], -self._tie_order[t[0]]))[0]

    def __init__(
        self,
        ballots: Optional[Sequence[Ballot]] = None,
        candidates: Optional[Sequence[Candidate]] = None,
        event: str = "",
        notes: str = "",
        parser_func: Optional[Callable] = None,
        parser_args: Optional[Dict] = None,
        parsed_event: Optional[Dict] = None,
        labels: Optional[Mapping[Candidate, str]] = None,
    ) -> None:
        """
        Constructor. Reads ballots, tabulates the election.

        Either **ballots** (and usually **candidates**), **parser_func** and **parser_args**, or an already parsed
        event as **parsed_event** must be passed.

        :param ballots: One ranked list of date option ids per participant, most preferred first.
        :type ballots: Optional[Sequence[Ballot]], optional
        :param candidates: All date options of the event, in display order. Display order is used to break ties.
        :type candidates: Optional[Sequence[Candidate]], optional
        :param event: Name of the event, used to name output files. Defaults to ""
        :type event: str, optional
        :param notes: Any extra notes to store about the event, defaults to ""
        :type notes: str, optional
        :param parser_func: A function from `parsers.py` or a custom function with the same signature and return type, defaults to None
        :type parser_func: Optional[Callable], optional
        :param parser_args: Dictionary of arguments and their values which are unrolled and passed to chosen `parser_func`. Defaults to None.
        :type parser_args: Optional[Dict], optional
        :param parsed_event: Dictionary with keys 'ballots' and 'candidates' (and optionally 'labels'), as returned by parser functions. Defaults to None
        :type parsed_event: Optional[Dict], optional
        :param labels: Display label per date option, shown next to ids in tables. Defaults to None
        :type labels: Optional[Mapping[Candidate, str]], optional
        """
        self.event = event
        self.notes = notes
        self.unique_id = self._unique_id()

        if parser_func and parser_args is not None:
            parsed_event = parser_func(**parser_args)

        if parsed_event is not None:
            if "ballots" not in parsed_event:
                raise RuntimeError('Parsed event does not contain field "ballots"')
            ballots = parsed_event["ballots"]
            candidates = parsed_event.get("candidates", candidates)
            labels = parsed_event.get("labels", labels)

        if ballots is None:
            raise ValueError("if no parser_func and parser_args are passed, ballots or a parsed_event must be passed.")

        self._candidates = list(candidates) if candidates is not None else []
        self._labels = dict(labels) if labels else {}
        self._ballots = [BallotMarks.remove_duplicate_candidate_marks(BallotMarks(list(b))) for b in ballots]

        # display order first, then ids only seen on ballots in order of appearance
        self._tie_order = {}
        for cand in self._candidates:
            self._tie_order.setdefault(cand, len(self._tie_order))
        for b in self._ballots:
            for mark in b.marks:
                self._tie_order.setdefault(mark, len(self._tie_order))

        # contest-level
        self._quota = 0
        self._winner = None
        self._rounds = []
        self._eliminated = frozenset()

        # round-level
        self._round_num = 0
        self._round_winner = None
        self._round_loser = None
        self._final_round = False

        # RUN
        self._run_contest()

    def _unique_id(self) -> str:
        uid = re.sub("[^0-9a-zA-Z_-]+", "", self.event.replace(" ", "_"))
        return uid or "event"

    # override me, if the tabulation needs a different setup
    def _run_contest(self) -> None:

        if not self._ballots:
            logger.info(f"{self.unique_id}: no ballots, nothing to tabulate")
            return

        self._quota = self._win_threshold()
        logger.debug(f"{self.unique_id}: {len(self._ballots)} ballots, quota {self._quota}")

        self._tabulate()

        logger.info(f"{self.unique_id}: winner {self._winner} after {len(self._rounds)} rounds")

    def _tabulate(self) -> None:
        """
        Run the rounds of rcv contest.
        """
        not_complete = True
        while not_complete:
            self._round_num += 1

            #############################################
            # CLEAR LAST ROUND VALUES
            self._round_winner = None
            self._round_loser = None
            self._final_round = False

            #############################################
            # COUNT ROUND RESULTS
            round_tally = self._tally_active_ballots(self._ballots, self._eliminated, self._tie_order)
            logger.debug(f"{self.unique_id}: round {self._round_num} counts {round_tally}")

            #############################################
            # CHECK FOR ROUND WINNER
            self._set_round_winner(round_tally)
            if self._final_round:
                self._winner = self._round_winner
                self._rounds.append(
                    Round(round_number=self._round_num, vote_counts=types.MappingProxyType(round_tally))
                )
                not_complete = False
                continue

            #############################################
            # IDENTIFY ROUND LOSER
            self._set_round_loser(round_tally)
            if self._round_loser is None:
                # every remaining ballot is exhausted, this count is not recorded
                logger.warning(f"{self.unique_id}: all ballots exhausted before a winner was found")
                self._round_num -= 1
                not_complete = False
                continue

            self._rounds.append(
                Round(
                    round_number=self._round_num,
                    vote_counts=types.MappingProxyType(round_tally),
                    eliminated=self._round_loser,
                )
            )
            self._eliminated = self._eliminated | {self._round_loser}

    @staticmethod
    def _tally_active_ballots(
        ballots: Sequence[BallotMarks],
        eliminated: AbstractSet[Candidate],
        tie_order: Mapping[Candidate, int],
    ) -> Dict[Candidate, int]:
        """
        Count each ballot for its most preferred date option not yet eliminated. Exhausted ballots count
        for no one. Returned dictionary is ordered by descending count, then by tie order.
        """
        vote_alloc = collections.Counter()
        for b in ballots:
            candidate = b.first_active(eliminated)
            if candidate is not None:
                vote_alloc[candidate] += 1

        return {cand: vote_alloc[cand] for cand in sorted(vote_alloc, key=lambda c: (-vote_alloc[c], tie_order[c]))}

    def _round_leader(self, round_tally: Dict[Candidate, int]) -> Optional[Candidate]:
        # round tallies are already sorted, ties go to the option earliest in tie order
        return next(iter(round_tally), None)

    def get_result(self) -> TallyResult:
        """
        :return: Winner, quota and round trace of the tabulation.
        :rtype: TallyResult
        """
        return TallyResult(
            winner=self._winner,
            quota=self._quota,
            rounds=tuple(self._rounds),
            ballot_count=len(self._ballots),
        )

    def winner(self) -> Optional[Candidate]:
        return self._winner

    def get_win_threshold(self) -> int:
        """Vote threshold a date option needs to reach in order to win. 0 if there were no ballots.

        :rtype: int
        """
        return self._quota

    def n_rounds(self) -> int:
        """Return the number of rounds used in tabulation.

        :rtype: int
        """
        return len(self._rounds)

    def get_candidates(self) -> List[Candidate]:
        """All date options, in tie order: display order followed by any ids only seen on ballots.

        :rtype: List[Candidate]
        """
        return sorted(self._tie_order, key=self._tie_order.get)

    def get_ballots(self) -> List[List[Candidate]]:
        """Ballots as tabulated, after repeated date options were dropped.

        :rtype: List[List[Candidate]]
        """
        return [list(b.marks) for b in self._ballots]

    def get_round_tally_tuple(self, round_num: int) -> Tuple[Tuple[Candidate, ...], Tuple[int, ...]]:
        """
        Return a pair of index-matched tuples, (date options, vote counts), for a round. Sorted in descending
        order by vote count and then by tie order. Only options holding votes in the round appear.

        :param round_num: Round number for which to return vote counts for.
        :type round_num: int
        :rtype: Tuple[Tuple[Candidate, ...], Tuple[int, ...]]
        """
        round_tally = self._rounds[round_num - 1].vote_counts
        if not round_tally:
            return (), ()
        return tuple(round_tally.keys()), tuple(round_tally.values())

    def get_round_tally_dict(self, round_num: int) -> Dict[Candidate, int]:
        """
        Return a dictionary containing date options as keys and vote counts as values.

        :param round_num: Round number for which to return vote counts for.
        :type round_num: int
        :rtype: Dict[Candidate, int]
        """
        return dict(self._rounds[round_num - 1].vote_counts)

    def get_candidate_outcomes(self) -> List[Dict]:
        """Return a list of dictionaries containing date option outcome information. Keys are name, round_elected,
        and round_eliminated. Values for round_elected and round_eliminated are either integers indicating round
        numbers or None.

        :rtype: List[Dict]
        """
        outcomes = {
            cand: {"name": cand, "round_elected": None, "round_eliminated": None} for cand in self.get_candidates()
        }

        for rnd in self._rounds:
            if rnd.eliminated is not None:
                outcomes[rnd.eliminated]["round_eliminated"] = rnd.round_number

        if self._winner is not None and self._winner in outcomes:
            outcomes[self._winner]["round_elected"] = len(self._rounds)

        return list(outcomes.values())
